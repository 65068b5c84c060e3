"""Durable workflow for the propose / confirm handshake of one trade.

Steps: incept -> wait for counterparty (until the window closes) -> confirm.
A confirmation the engine rejects is recorded and waiting continues. When
the window closes without a confirmation the proposal is cancelled and the
initiator's margin refunded.

Determinism contract: this module contains NO I/O, NO randomness,
NO system clock access (uses workflow.now()), NO mutable globals.
All engine interaction is delegated to activities.
"""

from __future__ import annotations

from datetime import timedelta

from temporalio import workflow
from temporalio.common import RetryPolicy

with workflow.unsafe.imports_passed_through():
    from irswap.config import DEFAULT_CONFIRMATION_WINDOW
    from irswap.workflow.activities import TradeActivities
    from irswap.workflow.types import (
        ConfirmationOutcome,
        ConfirmationResult,
        ConfirmInput,
        CounterpartyConfirmation,
        TradeProposal,
    )

# Used only when incept_trade does not report the engine's own window.
CONFIRMATION_WINDOW: timedelta = timedelta(seconds=DEFAULT_CONFIRMATION_WINDOW)
ACTIVITY_TIMEOUT: timedelta = timedelta(seconds=30)

# Engine rejections come back as values, so retries only cover worker failures.
ENGINE_RETRY = RetryPolicy(
    initial_interval=timedelta(seconds=1),
    backoff_coefficient=2.0,
    maximum_interval=timedelta(seconds=10),
    maximum_attempts=3,
)

# After this code no later confirmation can succeed.
_EXPIRED_CODE = "CONFIRMATION_EXPIRED"


@workflow.defn(name="TradeConfirmation")
class TradeConfirmationWorkflow:
    """Durable confirmation handshake.

    Invariants maintained:
    - Every proposal reaches exactly one terminal outcome
    - Margin is refunded whenever the outcome is EXPIRED
    - Confirmations are tried in arrival order, each at most once
    """

    def __init__(self) -> None:
        self._status: str = "RECEIVED"
        self._inbox: list[CounterpartyConfirmation] = []
        self._rejections: list[str] = []

    # -- Signal --

    @workflow.signal
    async def counterparty_confirms(self, confirmation: CounterpartyConfirmation) -> None:
        """Counterparty submits its view of the terms."""
        self._inbox.append(confirmation)

    # -- Queries --

    @workflow.query
    def get_status(self) -> str:
        return self._status

    @workflow.query
    def get_rejections(self) -> list[str]:
        """Reasons given for every rejected confirmation so far."""
        return list(self._rejections)

    # -- Main workflow --

    @workflow.run
    async def run(self, proposal: TradeProposal) -> ConfirmationResult:
        self._status = "INCEPTING"
        incepted = await workflow.execute_activity_method(
            TradeActivities.incept_trade,
            proposal,
            start_to_close_timeout=ACTIVITY_TIMEOUT,
            retry_policy=ENGINE_RETRY,
        )
        if incepted.error is not None:
            self._status = "REJECTED"
            return ConfirmationResult(
                proposal_id=proposal.proposal_id,
                outcome=ConfirmationOutcome.REJECTED,
                rejection_reasons=(incepted.error,),
            )

        window = (
            timedelta(seconds=incepted.confirmation_window)
            if incepted.confirmation_window is not None
            else CONFIRMATION_WINDOW
        )
        deadline = workflow.now() + window
        while True:
            self._status = "AWAITING_COUNTERPARTY"
            remaining = deadline - workflow.now()
            if remaining <= timedelta(0):
                break
            try:
                await workflow.wait_condition(lambda: bool(self._inbox), timeout=remaining)
            except TimeoutError:
                break

            confirmation = self._inbox.pop(0)
            self._status = "CONFIRMING"
            confirmed = await workflow.execute_activity_method(
                TradeActivities.confirm_trade,
                ConfirmInput(proposal_id=proposal.proposal_id, confirmation=confirmation),
                start_to_close_timeout=ACTIVITY_TIMEOUT,
                retry_policy=ENGINE_RETRY,
            )
            if confirmed.error is None:
                self._status = "COMPLETED"
                return ConfirmationResult(
                    proposal_id=proposal.proposal_id,
                    outcome=ConfirmationOutcome.CONFIRMED,
                    trade_id=confirmed.trade_id,
                    rejection_reasons=tuple(self._rejections),
                )
            self._rejections.append(confirmed.error)
            if confirmed.error_code == _EXPIRED_CODE:
                break

        self._status = "CANCELLING"
        cancelled = await workflow.execute_activity_method(
            TradeActivities.cancel_trade,
            proposal,
            start_to_close_timeout=ACTIVITY_TIMEOUT,
            retry_policy=ENGINE_RETRY,
        )
        if cancelled.error is not None:
            self._rejections.append(f"Cancel failed: {cancelled.error}")

        self._status = "EXPIRED"
        return ConfirmationResult(
            proposal_id=proposal.proposal_id,
            outcome=ConfirmationOutcome.EXPIRED,
            trade_id=incepted.trade_id,
            rejection_reasons=tuple(self._rejections),
        )
