"""Capped-supply ownership token split between the two rate payers.

INV-T01: total_supply <= max_supply after every call. A mint that would
break it fails with SupplyExceededMaxSupply and changes nothing.
"""

from __future__ import annotations

from typing import final

from irswap.core.clock import Clock
from irswap.core.errors import SupplyExceededMaxSupply, ValidationError
from irswap.core.money import scale_units
from irswap.core.result import Err, Ok
from irswap.core.types import Address
from irswap.token.ledger import FungibleLedger


def derive_max_supply(scaling: int, decimals: int) -> int:
    """Cap in base units: each party holds one unit per collateral component.

    Two components (margin buffer, termination fee) times `scaling`, for each
    of the two parties. scaling=1 gives 4 whole units.
    """
    if scaling <= 0:
        raise ValueError(f"scaling must be > 0, got {scaling}")
    units_per_party = 2 * scaling
    return scale_units(2 * units_per_party, decimals)


@final
class OwnershipLedger(FungibleLedger):
    """Transferable balances with a hard supply cap fixed at construction."""

    def __init__(
        self,
        name: str,
        symbol: str,
        max_supply: int,
        decimals: int = 18,
        clock: Clock | None = None,
    ) -> None:
        super().__init__(name, symbol, decimals, clock)
        if max_supply <= 0:
            raise TypeError(f"OwnershipLedger.max_supply must be > 0, got {max_supply}")
        self._max_supply = max_supply

    @classmethod
    def issue(
        cls,
        name: str,
        symbol: str,
        max_supply: int,
        fixed_rate_payer: Address,
        floating_rate_payer: Address,
        decimals: int = 18,
        clock: Clock | None = None,
    ) -> Ok[OwnershipLedger] | Err[str]:
        """Create the ledger with the whole supply minted 50/50 to the two payers."""
        if fixed_rate_payer == floating_rate_payer:
            return Err("fixed_rate_payer and floating_rate_payer must differ")
        if max_supply <= 0 or max_supply % 2 != 0:
            return Err(f"max_supply must be a positive even amount, got {max_supply}")
        ledger = cls(name, symbol, max_supply, decimals, clock)
        half = max_supply // 2
        ledger._credit(fixed_rate_payer, half)
        ledger._credit(floating_rate_payer, half)
        return Ok(ledger)

    def max_supply(self) -> int:
        return self._max_supply

    def mint(
        self, to: Address, amount: int,
    ) -> Ok[int] | Err[SupplyExceededMaxSupply | ValidationError]:
        """Mint within the cap. Returns the new total supply."""
        match self._check_amount(amount, "mint"):
            case Err() as e:
                return e
        attempted = self._total_supply + amount
        if attempted > self._max_supply:
            return Err(SupplyExceededMaxSupply(
                message=f"supplyExceededMaxSupply({attempted}, {self._max_supply})",
                code="SUPPLY_EXCEEDED_MAX_SUPPLY",
                timestamp=self._clock.now(),
                source="token.ownership.OwnershipLedger.mint",
                attempted=attempted,
                max_supply=self._max_supply,
            ))
        self._credit(to, amount)
        return Ok(self._total_supply)
