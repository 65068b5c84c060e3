"""Workflow data types for the trade confirmation handshake.

All types: @final @dataclass(frozen=True, slots=True).
Activity outputs carry either a result or an error, never both.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import final

from irswap.core.types import POSITIONS, Address, NonEmptyStr

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class ConfirmationOutcome(Enum):
    """Terminal states of the confirmation workflow."""

    CONFIRMED = "Confirmed"
    EXPIRED = "Expired"
    REJECTED = "Rejected"


# ---------------------------------------------------------------------------
# Workflow input and signal payload
# ---------------------------------------------------------------------------


@final
@dataclass(frozen=True, slots=True)
class TradeProposal:
    """Proposal from the initiator. proposal_id doubles as the Temporal workflow id."""

    proposal_id: NonEmptyStr
    initiator: Address
    counterparty: Address
    trade_data: str
    position: int
    payment_amount: int
    settlement_data: str

    def __post_init__(self) -> None:
        if self.initiator == self.counterparty:
            raise TypeError("TradeProposal: initiator and counterparty must differ")
        if self.position not in POSITIONS:
            raise TypeError(f"TradeProposal.position must be +1 or -1, got {self.position}")


@final
@dataclass(frozen=True, slots=True)
class CounterpartyConfirmation:
    """Terms as the counterparty sees them: itself as initiator, mirrored values."""

    confirmer: Address
    counterparty: Address
    trade_data: str
    position: int
    payment_amount: int
    settlement_data: str


# ---------------------------------------------------------------------------
# Activity I/O
# ---------------------------------------------------------------------------


@final
@dataclass(frozen=True, slots=True)
class InceptOutput:
    """confirmation_window is the engine's window in seconds for this proposal."""

    trade_id: str | None = None
    error: str | None = None
    error_code: str | None = None
    confirmation_window: int | None = None

    def __post_init__(self) -> None:
        if (self.trade_id is None) == (self.error is None):
            raise TypeError("InceptOutput must have exactly one of trade_id or error")
        if self.confirmation_window is not None and self.confirmation_window <= 0:
            raise TypeError(
                f"InceptOutput.confirmation_window must be > 0, got {self.confirmation_window}"
            )


@final
@dataclass(frozen=True, slots=True)
class ConfirmInput:
    proposal_id: NonEmptyStr
    confirmation: CounterpartyConfirmation


@final
@dataclass(frozen=True, slots=True)
class ConfirmOutput:
    trade_id: str | None = None
    error: str | None = None
    error_code: str | None = None

    def __post_init__(self) -> None:
        if (self.trade_id is None) == (self.error is None):
            raise TypeError("ConfirmOutput must have exactly one of trade_id or error")


@final
@dataclass(frozen=True, slots=True)
class CancelOutput:
    refunded: int | None = None
    error: str | None = None

    def __post_init__(self) -> None:
        if (self.refunded is None) == (self.error is None):
            raise TypeError("CancelOutput must have exactly one of refunded or error")


# ---------------------------------------------------------------------------
# Workflow result
# ---------------------------------------------------------------------------


@final
@dataclass(frozen=True, slots=True)
class ConfirmationResult:
    proposal_id: NonEmptyStr
    outcome: ConfirmationOutcome
    trade_id: str | None = None
    rejection_reasons: tuple[str, ...] = ()
