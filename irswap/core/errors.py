"""Error value hierarchy. No engine operation raises to signal a rejection.

Every rejection is a frozen dataclass value that can be matched on, logged,
and serialized. Base class SwapError; the subclasses are @final.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import final

from irswap.core.types import Timestamp


@dataclass(frozen=True, slots=True)
class SwapError:
    """Base error value. NOT @final, has subclasses."""

    message: str
    code: str
    timestamp: Timestamp
    source: str  # "module.function" that produced this error

    def with_context(self, context: str) -> SwapError:
        """Return a copy with context prepended to message."""
        return replace(self, message=f"{context}: {self.message}")

    def to_dict(self) -> dict[str, object]:
        return {
            "kind": type(self).__name__,
            "message": self.message,
            "code": self.code,
            "timestamp": self.timestamp,
            "source": self.source,
        }


@final
@dataclass(frozen=True, slots=True)
class FieldViolation:
    """Describes a single field validation failure."""

    path: str  # e.g. "terms.position"
    constraint: str  # e.g. "must be +1 or -1"
    actual_value: str


@final
@dataclass(frozen=True, slots=True)
class ValidationError(SwapError):
    """One or more inputs failed validation."""

    fields: tuple[FieldViolation, ...]

    def to_dict(self) -> dict[str, object]:
        return {
            **SwapError.to_dict(self),
            "fields": [
                {"path": f.path, "constraint": f.constraint, "actual_value": f.actual_value}
                for f in self.fields
            ],
        }


@final
@dataclass(frozen=True, slots=True)
class WrongTradeState(SwapError):
    """Operation invoked outside the trade state it requires."""

    expected: str
    actual: str

    def to_dict(self) -> dict[str, object]:
        return {**SwapError.to_dict(self), "expected": self.expected, "actual": self.actual}


@final
@dataclass(frozen=True, slots=True)
class ConfirmationExpired(SwapError):
    """Confirmation attempted at or after the proposal deadline."""

    proposed_at: Timestamp
    deadline: Timestamp

    def to_dict(self) -> dict[str, object]:
        return {
            **SwapError.to_dict(self),
            "proposed_at": self.proposed_at,
            "deadline": self.deadline,
        }


@final
@dataclass(frozen=True, slots=True)
class InconsistentTradeDataOrWrongAddress(SwapError):
    """Confirming terms do not mirror the proposal, or the caller is not the named party.

    code tells the two causes apart: WRONG_ADDRESS or INCONSISTENT_TRADE_DATA.
    diagnostic is the fingerprint recomputed from the caller's terms.
    """

    address: str
    expected_counterparty: str
    diagnostic: str

    def to_dict(self) -> dict[str, object]:
        return {
            **SwapError.to_dict(self),
            "address": self.address,
            "expected_counterparty": self.expected_counterparty,
            "diagnostic": self.diagnostic,
        }


@final
@dataclass(frozen=True, slots=True)
class InsufficientAllowance(SwapError):
    """Spender allowance is below the amount to pull."""

    party: str
    allowance: int
    required: int

    def to_dict(self) -> dict[str, object]:
        return {
            **SwapError.to_dict(self),
            "party": self.party,
            "allowance": self.allowance,
            "required": self.required,
        }


@final
@dataclass(frozen=True, slots=True)
class InsufficientBalance(SwapError):
    """Holder balance is below the amount to move."""

    party: str
    balance: int
    required: int

    def to_dict(self) -> dict[str, object]:
        return {
            **SwapError.to_dict(self),
            "party": self.party,
            "balance": self.balance,
            "required": self.required,
        }


@final
@dataclass(frozen=True, slots=True)
class SupplyExceededMaxSupply(SwapError):
    """A mint would push total supply past the cap."""

    attempted: int
    max_supply: int

    def to_dict(self) -> dict[str, object]:
        return {
            **SwapError.to_dict(self),
            "attempted": self.attempted,
            "max_supply": self.max_supply,
        }


@final
@dataclass(frozen=True, slots=True)
class UnauthorizedCaller(SwapError):
    """Caller holds no role that permits the operation."""

    caller: str
    operation: str

    def to_dict(self) -> dict[str, object]:
        return {**SwapError.to_dict(self), "caller": self.caller, "operation": self.operation}


@final
@dataclass(frozen=True, slots=True)
class OracleRequestMismatch(SwapError):
    """Oracle callback does not answer the pending request."""

    expected_request_id: str
    actual_request_id: str

    def to_dict(self) -> dict[str, object]:
        return {
            **SwapError.to_dict(self),
            "expected_request_id": self.expected_request_id,
            "actual_request_id": self.actual_request_id,
        }


@final
@dataclass(frozen=True, slots=True)
class IllegalTransitionError(SwapError):
    """State transition is not in the transition table."""

    from_state: str
    to_state: str

    def to_dict(self) -> dict[str, object]:
        return {
            **SwapError.to_dict(self),
            "from_state": self.from_state,
            "to_state": self.to_state,
        }


@final
@dataclass(frozen=True, slots=True)
class ConservationViolationError(SwapError):
    """A conservation law was violated."""

    law_name: str
    expected: str
    actual: str

    def to_dict(self) -> dict[str, object]:
        return {
            **SwapError.to_dict(self),
            "law_name": self.law_name,
            "expected": self.expected,
            "actual": self.actual,
        }


@final
@dataclass(frozen=True, slots=True)
class PersistenceError(SwapError):
    """Event bus or storage operation failed."""

    operation: str

    def to_dict(self) -> dict[str, object]:
        return {**SwapError.to_dict(self), "operation": self.operation}
