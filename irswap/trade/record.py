"""Trade state, the single trade record, and the state transition table.

TRADE_TRANSITIONS lists every legal edge. INACTIVE is initial; TERMINATED
and MATURED have no outgoing edges.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import TypeAlias, final

from irswap.core.errors import IllegalTransitionError
from irswap.core.result import Err, Ok
from irswap.core.types import Address, Timestamp


class TradeState(Enum):
    """Lifecycle state of the trade. Values match the on-chain enum ordering."""

    INACTIVE = 0
    INCEPTED = 1
    CONFIRMED = 2
    VALUATION = 3
    IN_TRANSFER = 4
    SETTLED = 5
    IN_TERMINATION = 6
    TERMINATED = 7
    MATURED = 8


TERMINAL_STATES: frozenset[TradeState] = frozenset({
    TradeState.TERMINATED,
    TradeState.MATURED,
})

# States in which a confirmed trade is live and idle.
ACTIVE_STATES: frozenset[TradeState] = frozenset({
    TradeState.CONFIRMED,
    TradeState.SETTLED,
})


# ---------------------------------------------------------------------------
# Transition table
# ---------------------------------------------------------------------------

TransitionTable: TypeAlias = frozenset[tuple[TradeState, TradeState]]

TRADE_TRANSITIONS: TransitionTable = frozenset({
    # handshake
    (TradeState.INACTIVE, TradeState.INCEPTED),
    (TradeState.INCEPTED, TradeState.CONFIRMED),
    (TradeState.INCEPTED, TradeState.INACTIVE),
    # valuation and settlement
    (TradeState.CONFIRMED, TradeState.VALUATION),
    (TradeState.SETTLED, TradeState.VALUATION),
    (TradeState.VALUATION, TradeState.IN_TRANSFER),
    # re-request after the oracle timed out
    (TradeState.VALUATION, TradeState.VALUATION),
    (TradeState.IN_TRANSFER, TradeState.SETTLED),
    (TradeState.IN_TRANSFER, TradeState.MATURED),
    (TradeState.IN_TRANSFER, TradeState.TERMINATED),
    (TradeState.SETTLED, TradeState.MATURED),
    # termination
    (TradeState.CONFIRMED, TradeState.IN_TERMINATION),
    (TradeState.SETTLED, TradeState.IN_TERMINATION),
    (TradeState.IN_TERMINATION, TradeState.CONFIRMED),
    (TradeState.IN_TERMINATION, TradeState.SETTLED),
    (TradeState.IN_TERMINATION, TradeState.TERMINATED),
})


def check_transition(
    from_state: TradeState,
    to_state: TradeState,
    transitions: TransitionTable = TRADE_TRANSITIONS,
    timestamp: Timestamp = 0,
) -> Ok[None] | Err[IllegalTransitionError]:
    """Validate a state transition against a transition table."""
    if (from_state, to_state) in transitions:
        return Ok(None)
    return Err(IllegalTransitionError(
        message=f"Invalid transition: {from_state.name} -> {to_state.name}",
        code="ILLEGAL_TRANSITION",
        timestamp=timestamp,
        source="trade.record.check_transition",
        from_state=from_state.name,
        to_state=to_state.name,
    ))


# ---------------------------------------------------------------------------
# Trade record
# ---------------------------------------------------------------------------


@final
@dataclass(frozen=True, slots=True)
class TradeRecord:
    """The one trade slot an engine owns.

    Only the fingerprint of the agreed terms is kept, never the terms.
    Empty-string and zero-address fields mean "not set".
    """

    state: TradeState
    terms_fingerprint: str
    proposed_at: Timestamp
    confirmation_deadline: Timestamp
    initiator: Address
    counterparty: Address
    # valuation
    pending_request_id: str = ""
    requested_at: Timestamp = 0
    settlement_amount: int = 0
    settlements_done: int = 0
    # termination
    termination_fingerprint: str = ""
    termination_requester: Address = Address.ZERO
    state_before_termination: TradeState = TradeState.INACTIVE

    def __post_init__(self) -> None:
        if self.confirmation_deadline < self.proposed_at:
            raise TypeError(
                f"TradeRecord.confirmation_deadline ({self.confirmation_deadline}) "
                f"must be >= proposed_at ({self.proposed_at})"
            )
        if self.settlements_done < 0:
            raise TypeError(
                f"TradeRecord.settlements_done must be >= 0, got {self.settlements_done}"
            )

    @staticmethod
    def empty() -> TradeRecord:
        """The zeroed record an engine starts with and returns to on cancel."""
        return TradeRecord(
            state=TradeState.INACTIVE,
            terms_fingerprint="",
            proposed_at=0,
            confirmation_deadline=0,
            initiator=Address.ZERO,
            counterparty=Address.ZERO,
        )

    @property
    def is_empty(self) -> bool:
        return self == TradeRecord.empty()

    def moved_to(self, state: TradeState) -> TradeRecord:
        return replace(self, state=state)

    def closed(self, state: TradeState) -> TradeRecord:
        """Terminal copy: identity and fingerprint kept, pending work cleared."""
        return replace(
            self,
            state=state,
            pending_request_id="",
            requested_at=0,
            settlement_amount=0,
            termination_fingerprint="",
            termination_requester=Address.ZERO,
            state_before_termination=TradeState.INACTIVE,
        )

    def involves(self, party: Address) -> bool:
        return party in (self.initiator, self.counterparty)

    def other_party(self, party: Address) -> Address:
        return self.counterparty if party == self.initiator else self.initiator
