"""Margin escrow: custody of each party's margin buffer and termination fee.

Core invariant (INV-E01): the custodian's balance on the settlement ledger
equals the sum of live escrow records. Funds only enter through
post_margin() and only leave through the release paths below.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypeAlias, final

from irswap.core.clock import Clock, SystemClock
from irswap.core.errors import (
    ConservationViolationError,
    FieldViolation,
    InsufficientAllowance,
    InsufficientBalance,
    UnauthorizedCaller,
    ValidationError,
)
from irswap.core.result import Err, Ok
from irswap.core.types import Address
from irswap.token.settlement import SettlementAsset


@final
@dataclass(frozen=True, slots=True)
class MarginAccount:
    """Margin buffer plus termination fee, in settlement-asset base units."""

    margin_buffer: int
    termination_fee: int

    def __post_init__(self) -> None:
        if self.margin_buffer < 0:
            raise TypeError(f"MarginAccount.margin_buffer must be >= 0, got {self.margin_buffer}")
        if self.termination_fee < 0:
            raise TypeError(
                f"MarginAccount.termination_fee must be >= 0, got {self.termination_fee}"
            )

    @property
    def total(self) -> int:
        return self.margin_buffer + self.termination_fee


EscrowError: TypeAlias = (
    InsufficientAllowance | InsufficientBalance | UnauthorizedCaller | ValidationError
)


@final
class MarginEscrow:
    """Per-party escrow backed by allowance pulls from the settlement ledger.

    Requirements are fixed at construction and may differ per party.
    """

    def __init__(
        self,
        ledger: SettlementAsset,
        custodian: Address,
        requirements: dict[Address, MarginAccount],
        clock: Clock | None = None,
    ) -> None:
        if not requirements:
            raise TypeError("MarginEscrow requires at least one party requirement")
        self._ledger = ledger
        self._custodian = custodian
        self._requirements = dict(requirements)
        self._clock: Clock = clock if clock is not None else SystemClock()
        self._escrowed: dict[Address, MarginAccount] = {}

    @property
    def custodian(self) -> Address:
        return self._custodian

    @property
    def ledger(self) -> SettlementAsset:
        return self._ledger

    # -- queries --

    def get_margin_requirement(self, party: Address) -> tuple[int, int]:
        """(margin_buffer, termination_fee) required of party; (0, 0) for strangers."""
        req = self._requirements.get(party)
        if req is None:
            return (0, 0)
        return (req.margin_buffer, req.termination_fee)

    def escrowed(self, party: Address) -> MarginAccount:
        return self._escrowed.get(party, MarginAccount(margin_buffer=0, termination_fee=0))

    def live_parties(self) -> tuple[Address, ...]:
        return tuple(sorted(self._escrowed))

    def total_escrowed(self) -> int:
        return sum(acct.total for acct in self._escrowed.values())

    # -- posting and refunds --

    def post_margin(self, party: Address) -> Ok[int] | Err[EscrowError]:
        """Pull margin_buffer + termination_fee from party into custody."""
        _src = "escrow.margin.MarginEscrow.post_margin"
        req = self._requirements.get(party)
        if req is None:
            return Err(UnauthorizedCaller(
                message=f"No margin requirement configured for {party}",
                code="UNKNOWN_PARTY",
                timestamp=self._clock.now(),
                source=_src,
                caller=party.value,
                operation="post_margin",
            ))
        if party in self._escrowed:
            return Err(self._validation(
                f"Margin already posted by {party}", "MARGIN_ALREADY_POSTED",
                "party", "must not have live escrow", party.value, _src,
            ))
        match self._ledger.transfer_from(self._custodian, party, self._custodian, req.total):
            case Err(e):
                return Err(e)
        self._escrowed[party] = req
        return Ok(req.total)

    def refund_margin(self, party: Address) -> Ok[int] | Err[EscrowError]:
        """Return party's whole escrow and zero its record."""
        _src = "escrow.margin.MarginEscrow.refund_margin"
        acct = self._escrowed.get(party)
        if acct is None:
            return Err(self._validation(
                f"No escrow held for {party}", "NO_ESCROW",
                "party", "must have live escrow", party.value, _src,
            ))
        if acct.total > 0:
            match self._ledger.transfer(self._custodian, party, acct.total):
                case Err(e):
                    return Err(e)
        del self._escrowed[party]
        return Ok(acct.total)

    def release_all(self) -> Ok[dict[Address, int]] | Err[EscrowError]:
        """Refund every live party. Used when the trade terminates or matures."""
        refunded: dict[Address, int] = {}
        for party in self.live_parties():
            match self.refund_margin(party):
                case Err() as e:
                    return e
                case Ok(amount):
                    refunded[party] = amount
        return Ok(refunded)

    # -- default handling --

    def pay_from_margin(
        self, payer: Address, receiver: Address, amount: int,
    ) -> Ok[int] | Err[EscrowError]:
        """Pay up to `amount` out of payer's margin buffer. Returns the amount paid."""
        _src = "escrow.margin.MarginEscrow.pay_from_margin"
        if amount < 0:
            return Err(self._validation(
                f"amount must be >= 0, got {amount}", "INVALID_AMOUNT",
                "amount", "int >= 0", str(amount), _src,
            ))
        acct = self._escrowed.get(payer)
        if acct is None:
            return Err(self._validation(
                f"No escrow held for {payer}", "NO_ESCROW",
                "payer", "must have live escrow", payer.value, _src,
            ))
        paid = min(amount, acct.margin_buffer)
        if paid > 0:
            match self._ledger.transfer(self._custodian, receiver, paid):
                case Err(e):
                    return Err(e)
        self._escrowed[payer] = MarginAccount(
            margin_buffer=acct.margin_buffer - paid,
            termination_fee=acct.termination_fee,
        )
        return Ok(paid)

    def forfeit_termination_fee(
        self, payer: Address, receiver: Address,
    ) -> Ok[int] | Err[EscrowError]:
        """Pay payer's termination fee to receiver."""
        _src = "escrow.margin.MarginEscrow.forfeit_termination_fee"
        acct = self._escrowed.get(payer)
        if acct is None:
            return Err(self._validation(
                f"No escrow held for {payer}", "NO_ESCROW",
                "payer", "must have live escrow", payer.value, _src,
            ))
        fee = acct.termination_fee
        if fee > 0:
            match self._ledger.transfer(self._custodian, receiver, fee):
                case Err(e):
                    return Err(e)
        self._escrowed[payer] = MarginAccount(
            margin_buffer=acct.margin_buffer, termination_fee=0,
        )
        return Ok(fee)

    # -- invariant --

    def check_conservation(self) -> Ok[None] | Err[ConservationViolationError]:
        """INV-E01: custodied balance == sum of live escrow records."""
        held = self._ledger.balance_of(self._custodian)
        owed = self.total_escrowed()
        if held != owed:
            return Err(ConservationViolationError(
                message=f"Custodian holds {held} but escrow records sum to {owed}",
                code="ESCROW_CONSERVATION",
                timestamp=self._clock.now(),
                source="escrow.margin.MarginEscrow.check_conservation",
                law_name="INV-E01",
                expected=str(owed),
                actual=str(held),
            ))
        return Ok(None)

    def check_solvency(self) -> Ok[int] | Err[ConservationViolationError]:
        """Custodied balance covers every live escrow record. Returns any surplus.

        A surplus, such as a stray transfer to the custodian, is reported as
        the Ok value.
        """
        held = self._ledger.balance_of(self._custodian)
        owed = self.total_escrowed()
        if held < owed:
            return Err(ConservationViolationError(
                message=f"Custodian holds {held}, short of escrow records summing to {owed}",
                code="ESCROW_SHORTFALL",
                timestamp=self._clock.now(),
                source="escrow.margin.MarginEscrow.check_solvency",
                law_name="INV-E02",
                expected=f">= {owed}",
                actual=str(held),
            ))
        return Ok(held - owed)

    def _validation(
        self, message: str, code: str, path: str, constraint: str, actual: str, source: str,
    ) -> ValidationError:
        return ValidationError(
            message=message, code=code, timestamp=self._clock.now(), source=source,
            fields=(FieldViolation(path=path, constraint=constraint, actual_value=actual),),
        )
