"""External settlement-asset ledger: the protocol the escrow depends on, plus an in-memory double.

The engine only ever holds the asset through allowance-based pulls; it
never mints or burns it.
"""

from __future__ import annotations

from typing import Protocol, final, runtime_checkable

from irswap.core.errors import (
    InsufficientAllowance,
    InsufficientBalance,
    ValidationError,
)
from irswap.core.result import Err, Ok
from irswap.core.types import Address
from irswap.token.ledger import FungibleLedger


@runtime_checkable
class SettlementAsset(Protocol):
    """Standard fungible-asset ledger (ERC-20 shaped).

    Invariants:
      - transfer_from() spends the spender's allowance and fails with
        InsufficientAllowance, unchanged, when it is too small.
      - A failed call mutates nothing.
    """

    symbol: str

    def balance_of(self, holder: Address) -> int: ...

    def allowance(self, owner: Address, spender: Address) -> int: ...

    def approve(
        self, owner: Address, spender: Address, amount: int,
    ) -> Ok[None] | Err[ValidationError]: ...

    def transfer(
        self, sender: Address, to: Address, amount: int,
    ) -> Ok[None] | Err[InsufficientBalance | ValidationError]: ...

    def transfer_from(
        self, spender: Address, owner: Address, to: Address, amount: int,
    ) -> Ok[None] | Err[InsufficientAllowance | InsufficientBalance | ValidationError]: ...


@final
class InMemorySettlementLedger(FungibleLedger):
    """Uncapped settlement asset. mint() exists for test setup only."""

    def mint(self, to: Address, amount: int) -> Ok[int] | Err[ValidationError]:
        match self._check_amount(amount, "mint"):
            case Err() as e:
                return e
        self._credit(to, amount)
        return Ok(self.total_supply())
