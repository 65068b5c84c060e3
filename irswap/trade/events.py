"""Notifications emitted on every committed transition.

Events are immutable once emitted. Each carries the time of the transition
and enough identity to be keyed on the event bus.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypeAlias, final

from irswap.core.result import Err, Ok
from irswap.core.serialization import canonical_bytes, content_hash
from irswap.core.types import Address, Timestamp

# ---------------------------------------------------------------------------
# Handshake
# ---------------------------------------------------------------------------


@final
@dataclass(frozen=True, slots=True)
class TradeIncepted:
    initiator: Address
    counterparty: Address
    trade_id: str  # terms fingerprint
    trade_data: str
    position: int
    payment_amount: int
    settlement_data: str
    timestamp: Timestamp


@final
@dataclass(frozen=True, slots=True)
class TradeConfirmed:
    confirmer: Address
    trade_id: str
    timestamp: Timestamp


@final
@dataclass(frozen=True, slots=True)
class TradeCanceled:
    initiator: Address
    trade_id: str
    refunded: int
    timestamp: Timestamp


# ---------------------------------------------------------------------------
# Valuation and settlement
# ---------------------------------------------------------------------------


@final
@dataclass(frozen=True, slots=True)
class SettlementRequested:
    initiator: Address
    request_id: str
    settlement_date: Timestamp
    timestamp: Timestamp


@final
@dataclass(frozen=True, slots=True)
class SettlementEvaluated:
    request_id: str
    benchmark_rate: int
    settlement_amount: int  # > 0: floating payer pays fixed payer
    timestamp: Timestamp


@final
@dataclass(frozen=True, slots=True)
class SettlementTransferred:
    payer: Address
    receiver: Address
    amount: int
    settlement_date: Timestamp
    timestamp: Timestamp


# ---------------------------------------------------------------------------
# Termination and maturity
# ---------------------------------------------------------------------------


@final
@dataclass(frozen=True, slots=True)
class TradeTerminationRequest:
    requester: Address
    trade_id: str
    termination_payment: int
    terms: str
    timestamp: Timestamp


@final
@dataclass(frozen=True, slots=True)
class TradeTerminationConfirmed:
    confirmer: Address
    trade_id: str
    termination_payment: int
    terms: str
    timestamp: Timestamp


@final
@dataclass(frozen=True, slots=True)
class TradeTerminationCanceled:
    requester: Address
    trade_id: str
    termination_id: str  # fingerprint of the withdrawn request
    timestamp: Timestamp


@final
@dataclass(frozen=True, slots=True)
class TradeTerminated:
    """Trade closed after a settlement default."""

    defaulter: Address
    receiver: Address
    covered_from_margin: int
    termination_fee_paid: int
    reason: str
    timestamp: Timestamp


@final
@dataclass(frozen=True, slots=True)
class TradeMatured:
    trade_id: str
    released: int
    timestamp: Timestamp


TradeEvent: TypeAlias = (
    TradeIncepted
    | TradeConfirmed
    | TradeCanceled
    | SettlementRequested
    | SettlementEvaluated
    | SettlementTransferred
    | TradeTerminationRequest
    | TradeTerminationConfirmed
    | TradeTerminationCanceled
    | TradeTerminated
    | TradeMatured
)


def encode_event(event: TradeEvent) -> Ok[tuple[str, bytes]] | Err[str]:
    """(key, value) pair for the event bus. The key is the event's content hash."""
    match canonical_bytes(event):
        case Err() as e:
            return e
        case Ok(payload):
            pass
    match content_hash(event):
        case Err() as e:
            return e
        case Ok(key):
            return Ok((key, payload))
