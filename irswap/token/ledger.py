"""Fungible balance ledger shared by the settlement asset and the ownership token.

Balances and allowances are non-negative integers in base units. Transfers
conserve total supply: sigma(balances) == total_supply after every call.
Every failed call leaves balances and allowances untouched.
"""

from __future__ import annotations

from collections import defaultdict

from irswap.core.clock import Clock, SystemClock
from irswap.core.errors import (
    FieldViolation,
    InsufficientAllowance,
    InsufficientBalance,
    ValidationError,
)
from irswap.core.result import Err, Ok
from irswap.core.types import Address


class FungibleLedger:
    """Balance and allowance book for one fungible asset. NOT @final."""

    def __init__(
        self,
        name: str,
        symbol: str,
        decimals: int = 18,
        clock: Clock | None = None,
    ) -> None:
        if not name or not symbol:
            raise TypeError("FungibleLedger requires non-empty name and symbol")
        if decimals < 0:
            raise TypeError(f"FungibleLedger.decimals must be >= 0, got {decimals}")
        self.name = name
        self.symbol = symbol
        self.decimals = decimals
        self._clock: Clock = clock if clock is not None else SystemClock()
        self._balances: dict[Address, int] = defaultdict(int)
        self._allowances: dict[tuple[Address, Address], int] = defaultdict(int)
        self._total_supply = 0

    # -- queries --

    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, holder: Address) -> int:
        return self._balances.get(holder, 0)

    def allowance(self, owner: Address, spender: Address) -> int:
        return self._allowances.get((owner, spender), 0)

    def holders(self) -> tuple[Address, ...]:
        """Addresses with a non-zero balance, sorted."""
        return tuple(sorted(a for a, b in self._balances.items() if b != 0))

    # -- mutations --

    def approve(
        self, owner: Address, spender: Address, amount: int,
    ) -> Ok[None] | Err[ValidationError]:
        """Set (not add to) the allowance of spender over owner's balance."""
        match self._check_amount(amount, "approve"):
            case Err() as e:
                return e
        self._allowances[(owner, spender)] = amount
        return Ok(None)

    def transfer(
        self, sender: Address, to: Address, amount: int,
    ) -> Ok[None] | Err[InsufficientBalance | ValidationError]:
        match self._check_amount(amount, "transfer"):
            case Err() as e:
                return e
        match self._check_balance(sender, amount, "transfer"):
            case Err() as e:
                return e
        self._move(sender, to, amount)
        return Ok(None)

    def transfer_from(
        self, spender: Address, owner: Address, to: Address, amount: int,
    ) -> Ok[None] | Err[InsufficientAllowance | InsufficientBalance | ValidationError]:
        """Pull `amount` from owner to `to`, spending spender's allowance."""
        match self._check_amount(amount, "transfer_from"):
            case Err() as e:
                return e
        current = self.allowance(owner, spender)
        if current < amount:
            return Err(InsufficientAllowance(
                message=(
                    f"{self.symbol}: allowance of {spender} over {owner} is "
                    f"{current}, need {amount}"
                ),
                code="INSUFFICIENT_ALLOWANCE",
                timestamp=self._clock.now(),
                source=f"token.ledger.{type(self).__name__}.transfer_from",
                party=owner.value,
                allowance=current,
                required=amount,
            ))
        match self._check_balance(owner, amount, "transfer_from"):
            case Err() as e:
                return e
        self._allowances[(owner, spender)] = current - amount
        self._move(owner, to, amount)
        return Ok(None)

    # -- internals --

    def _move(self, src: Address, dst: Address, amount: int) -> None:
        self._balances[src] -= amount
        self._balances[dst] += amount

    def _credit(self, to: Address, amount: int) -> None:
        """Create `amount` new units at `to`. Callers enforce any cap."""
        self._balances[to] += amount
        self._total_supply += amount

    def _check_amount(self, amount: int, op: str) -> Ok[None] | Err[ValidationError]:
        if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0:
            return Err(ValidationError(
                message=f"{self.symbol}.{op}: amount must be a non-negative int",
                code="INVALID_AMOUNT",
                timestamp=self._clock.now(),
                source=f"token.ledger.{type(self).__name__}.{op}",
                fields=(FieldViolation(
                    path="amount", constraint="int >= 0", actual_value=repr(amount),
                ),),
            ))
        return Ok(None)

    def _check_balance(
        self, holder: Address, amount: int, op: str,
    ) -> Ok[None] | Err[InsufficientBalance]:
        balance = self.balance_of(holder)
        if balance < amount:
            return Err(InsufficientBalance(
                message=f"{self.symbol}: balance of {holder} is {balance}, need {amount}",
                code="INSUFFICIENT_BALANCE",
                timestamp=self._clock.now(),
                source=f"token.ledger.{type(self).__name__}.{op}",
                party=holder.value,
                balance=balance,
                required=amount,
            ))
        return Ok(None)
