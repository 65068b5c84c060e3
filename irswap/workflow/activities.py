"""Activity implementations for the trade confirmation workflow.

Activities are thin IO wrappers around one SwapEngine. All lifecycle rules
live in the engine.

Each activity:
- Is decorated with @activity.defn
- Takes a single frozen-dataclass input
- Returns a frozen-dataclass output (with optional error field)
- Is idempotent: a retry after a committed call returns the same result
  without moving margin twice
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from temporalio import activity

from irswap.core.result import Err, Ok
from irswap.trade.engine import SwapEngine
from irswap.trade.record import TradeState
from irswap.trade.terms import TradeTerms, terms_fingerprint
from irswap.workflow.types import (
    CancelOutput,
    ConfirmInput,
    ConfirmOutput,
    InceptOutput,
    TradeProposal,
)


def _proposal_terms(proposal: TradeProposal) -> TradeTerms:
    return TradeTerms(
        initiator=proposal.initiator,
        counterparty=proposal.counterparty,
        trade_data=proposal.trade_data,
        position=proposal.position,
        payment_amount=proposal.payment_amount,
        settlement_data=proposal.settlement_data,
    )


class TradeActivities:
    """Activities bound to the engine they drive."""

    def __init__(self, engine: SwapEngine) -> None:
        self._engine = engine

    # -----------------------------------------------------------------------
    # 1. incept_trade
    # -----------------------------------------------------------------------

    @activity.defn(name="incept_trade")
    async def incept_trade(self, proposal: TradeProposal) -> InceptOutput:
        """Propose the trade and post the initiator's margin.

        Timeout: 30s | Retries: 3 | Non-retryable: every engine rejection
        Idempotent: yes (a live record with the same fingerprint is success)
        """
        activity.logger.info(
            "Incepting proposal %s: %s -> %s",
            proposal.proposal_id.value, proposal.initiator, proposal.counterparty,
        )
        record = self._engine.get_trade_record()
        match terms_fingerprint(_proposal_terms(proposal)):
            case Ok(fp) if record.state is not TradeState.INACTIVE and fp == record.terms_fingerprint:
                return self._incepted(fp)
        match self._engine.propose(
            proposal.initiator,
            proposal.counterparty,
            proposal.trade_data,
            proposal.position,
            proposal.payment_amount,
            proposal.settlement_data,
        ):
            case Ok(trade_id):
                return self._incepted(trade_id)
            case Err(e):
                activity.logger.info(
                    "Proposal %s rejected: %s", proposal.proposal_id.value, e.code,
                )
                return InceptOutput(error=e.message, error_code=e.code)

    # -----------------------------------------------------------------------
    # 2. confirm_trade
    # -----------------------------------------------------------------------

    @activity.defn(name="confirm_trade")
    async def confirm_trade(self, inp: ConfirmInput) -> ConfirmOutput:
        """Confirm with the counterparty's terms and post its margin.

        Timeout: 30s | Retries: 3 | Non-retryable: every engine rejection
        Idempotent: yes (a confirmed record matching the mirrored terms is success)
        """
        conf = inp.confirmation
        activity.logger.info(
            "Confirming proposal %s by %s", inp.proposal_id.value, conf.confirmer,
        )
        record = self._engine.get_trade_record()
        confirming = TradeTerms(
            initiator=conf.confirmer,
            counterparty=conf.counterparty,
            trade_data=conf.trade_data,
            position=conf.position,
            payment_amount=conf.payment_amount,
            settlement_data=conf.settlement_data,
        )
        match terms_fingerprint(confirming.mirrored()):
            case Ok(fp) if (
                record.state is TradeState.CONFIRMED
                and conf.confirmer == record.counterparty
                and fp == record.terms_fingerprint
            ):
                return ConfirmOutput(trade_id=fp)
        match self._engine.confirm(
            conf.confirmer,
            conf.counterparty,
            conf.trade_data,
            conf.position,
            conf.payment_amount,
            conf.settlement_data,
        ):
            case Ok(trade_id):
                return ConfirmOutput(trade_id=trade_id)
            case Err(e):
                activity.logger.info(
                    "Confirmation of %s rejected: %s", inp.proposal_id.value, e.code,
                )
                return ConfirmOutput(error=e.message, error_code=e.code)

    # -----------------------------------------------------------------------
    # 3. cancel_trade
    # -----------------------------------------------------------------------

    @activity.defn(name="cancel_trade")
    async def cancel_trade(self, proposal: TradeProposal) -> CancelOutput:
        """Withdraw an unconfirmed proposal and refund the initiator.

        Timeout: 30s | Retries: 3
        Idempotent: yes (an already empty record refunds nothing)
        """
        activity.logger.info(
            "Cancelling proposal %s for %s", proposal.proposal_id.value, proposal.initiator,
        )
        if self._engine.get_trade_record().is_empty:
            return CancelOutput(refunded=0)
        match self._engine.cancel(
            proposal.initiator,
            proposal.counterparty,
            proposal.trade_data,
            proposal.position,
            proposal.payment_amount,
            proposal.settlement_data,
        ):
            case Ok(refunded):
                return CancelOutput(refunded=refunded)
            case Err(e):
                return CancelOutput(error=e.message)

    def _incepted(self, trade_id: str) -> InceptOutput:
        record = self._engine.get_trade_record()
        return InceptOutput(
            trade_id=trade_id,
            confirmation_window=record.confirmation_deadline - record.proposed_at,
        )

    def all(self) -> list[Callable[..., Any]]:
        """Bound activity methods for Worker(activities=...)."""
        return [self.incept_trade, self.confirm_trade, self.cancel_trade]
