"""Trade terms, their mirror image, and the terms fingerprint.

Two parties agree when the confirming party's terms are the exact mirror of
the proposer's: roles swapped, position and payment amount negated, data
blobs identical. Only the fingerprint of the proposal is stored.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import final

from irswap.core.errors import FieldViolation
from irswap.core.result import Err, Ok
from irswap.core.serialization import content_hash
from irswap.core.types import POSITIONS, Address


@final
@dataclass(frozen=True, slots=True)
class TradeTerms:
    """Terms as seen by one party. `initiator` is always the party submitting them."""

    initiator: Address
    counterparty: Address
    trade_data: str
    position: int  # +1 long, -1 short
    payment_amount: int  # signed, settlement-asset base units
    settlement_data: str

    def mirrored(self) -> TradeTerms:
        """The terms the other party must submit to agree to these."""
        return TradeTerms(
            initiator=self.counterparty,
            counterparty=self.initiator,
            trade_data=self.trade_data,
            position=-self.position,
            payment_amount=-self.payment_amount,
            settlement_data=self.settlement_data,
        )

    def violations(self) -> tuple[FieldViolation, ...]:
        """Field-level problems that make the terms unproposable."""
        found: list[FieldViolation] = []
        if self.initiator == self.counterparty:
            found.append(FieldViolation(
                path="counterparty", constraint="must differ from caller",
                actual_value=self.counterparty.value,
            ))
        if isinstance(self.position, bool) or self.position not in POSITIONS:
            found.append(FieldViolation(
                path="position", constraint="must be +1 or -1",
                actual_value=repr(self.position),
            ))
        if isinstance(self.payment_amount, bool) or not isinstance(self.payment_amount, int):
            found.append(FieldViolation(
                path="payment_amount", constraint="must be int",
                actual_value=repr(self.payment_amount),
            ))
        if not isinstance(self.trade_data, str):
            found.append(FieldViolation(
                path="trade_data", constraint="must be str",
                actual_value=type(self.trade_data).__name__,
            ))
        if not isinstance(self.settlement_data, str):
            found.append(FieldViolation(
                path="settlement_data", constraint="must be str",
                actual_value=type(self.settlement_data).__name__,
            ))
        return tuple(found)


def terms_fingerprint(terms: TradeTerms) -> Ok[str] | Err[str]:
    """SHA-256 content hash over the full terms, initiator first."""
    return content_hash(terms)


@final
@dataclass(frozen=True, slots=True)
class TerminationTerms:
    """A termination request as seen by one party.

    termination_payment is signed from the submitting party's side:
    positive means it receives, negative means it pays.
    """

    requester: Address
    counterparty: Address
    termination_payment: int
    terms: str

    def mirrored(self) -> TerminationTerms:
        return TerminationTerms(
            requester=self.counterparty,
            counterparty=self.requester,
            termination_payment=-self.termination_payment,
            terms=self.terms,
        )
