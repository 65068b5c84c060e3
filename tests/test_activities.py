"""Tests for the trade confirmation activities, run in a Temporal ActivityEnvironment."""

from __future__ import annotations

import pytest
from temporalio.testing import ActivityEnvironment

from irswap.config import EngineSettings
from irswap.core.types import NonEmptyStr
from irswap.trade.record import TradeState
from irswap.workflow.activities import TradeActivities
from irswap.workflow.types import (
    CancelOutput,
    ConfirmInput,
    CounterpartyConfirmation,
    InceptOutput,
    TradeProposal,
)
from tests.swap_world import FIXED, FLOATING, MARGIN, SwapWorld, deploy

_PID = NonEmptyStr(value="proposal-001")


def _proposal() -> TradeProposal:
    return TradeProposal(
        proposal_id=_PID,
        initiator=FIXED,
        counterparty=FLOATING,
        trade_data="tradeData",
        position=1,
        payment_amount=100,
        settlement_data="settlementData",
    )


def _confirmation(position: int = -1) -> ConfirmInput:
    return ConfirmInput(
        proposal_id=_PID,
        confirmation=CounterpartyConfirmation(
            confirmer=FLOATING,
            counterparty=FIXED,
            trade_data="tradeData",
            position=position,
            payment_amount=-100,
            settlement_data="settlementData",
        ),
    )


def _funded() -> tuple[SwapWorld, TradeActivities]:
    world = deploy()
    world.fund(FIXED)
    world.fund(FLOATING)
    return world, TradeActivities(world.engine)


class TestInceptTrade:
    @pytest.mark.asyncio
    async def test_success(self) -> None:
        world, acts = _funded()
        out = await ActivityEnvironment().run(acts.incept_trade, _proposal())
        assert isinstance(out, InceptOutput)
        assert out.error is None
        assert out.trade_id == world.engine.get_trade_record().terms_fingerprint
        assert world.engine.get_trade_state() is TradeState.INCEPTED
        assert out.confirmation_window == 3600

    @pytest.mark.asyncio
    async def test_reports_engine_window(self) -> None:
        world = deploy(settings=EngineSettings(confirmation_window=60))
        world.fund(FIXED)
        acts = TradeActivities(world.engine)
        env = ActivityEnvironment()
        first = await env.run(acts.incept_trade, _proposal())
        second = await env.run(acts.incept_trade, _proposal())
        assert first.confirmation_window == 60
        assert second.confirmation_window == 60

        assert world.custody() == MARGIN

    @pytest.mark.asyncio
    async def test_retry_is_idempotent(self) -> None:
        world, acts = _funded()
        env = ActivityEnvironment()
        first = await env.run(acts.incept_trade, _proposal())
        second = await env.run(acts.incept_trade, _proposal())
        assert first == second
        assert world.custody() == MARGIN
        assert len(world.engine.events()) == 1

    @pytest.mark.asyncio
    async def test_rejection_reported(self) -> None:
        world = deploy()
        acts = TradeActivities(world.engine)
        out = await ActivityEnvironment().run(acts.incept_trade, _proposal())
        assert out.trade_id is None
        assert out.error_code == "INSUFFICIENT_ALLOWANCE"
        assert out.confirmation_window is None
        assert world.engine.get_trade_state() is TradeState.INACTIVE


class TestConfirmTrade:
    @pytest.mark.asyncio
    async def test_success(self) -> None:
        world, acts = _funded()
        env = ActivityEnvironment()
        incepted = await env.run(acts.incept_trade, _proposal())
        out = await env.run(acts.confirm_trade, _confirmation())
        assert out.trade_id == incepted.trade_id
        assert world.engine.get_trade_state() is TradeState.CONFIRMED
        assert world.custody() == 2 * MARGIN

    @pytest.mark.asyncio
    async def test_retry_is_idempotent(self) -> None:
        world, acts = _funded()
        env = ActivityEnvironment()
        await env.run(acts.incept_trade, _proposal())
        first = await env.run(acts.confirm_trade, _confirmation())
        second = await env.run(acts.confirm_trade, _confirmation())
        assert first == second
        assert world.custody() == 2 * MARGIN
        assert len(world.engine.events()) == 2

    @pytest.mark.asyncio
    async def test_inconsistent_terms(self) -> None:
        world, acts = _funded()
        env = ActivityEnvironment()
        await env.run(acts.incept_trade, _proposal())
        out = await env.run(acts.confirm_trade, _confirmation(position=1))
        assert out.trade_id is None
        assert out.error_code == "INCONSISTENT_TRADE_DATA"
        assert world.engine.get_trade_state() is TradeState.INCEPTED

    @pytest.mark.asyncio
    async def test_expired(self) -> None:
        world, acts = _funded()
        env = ActivityEnvironment()
        await env.run(acts.incept_trade, _proposal())
        world.clock.advance(3600)
        out = await env.run(acts.confirm_trade, _confirmation())
        assert out.error_code == "CONFIRMATION_EXPIRED"
        assert world.usdc.balance_of(FLOATING) == MARGIN


class TestCancelTrade:
    @pytest.mark.asyncio
    async def test_refunds_initiator(self) -> None:
        world, acts = _funded()
        env = ActivityEnvironment()
        await env.run(acts.incept_trade, _proposal())
        out = await env.run(acts.cancel_trade, _proposal())
        assert out == CancelOutput(refunded=MARGIN)
        assert world.engine.get_trade_record().is_empty
        assert world.usdc.balance_of(FIXED) == MARGIN
        assert world.custody() == 0

    @pytest.mark.asyncio
    async def test_empty_record_refunds_nothing(self) -> None:
        _, acts = _funded()
        out = await ActivityEnvironment().run(acts.cancel_trade, _proposal())
        assert out == CancelOutput(refunded=0)

    @pytest.mark.asyncio
    async def test_confirmed_trade_not_cancelled(self) -> None:
        world, acts = _funded()
        env = ActivityEnvironment()
        await env.run(acts.incept_trade, _proposal())
        await env.run(acts.confirm_trade, _confirmation())
        out = await env.run(acts.cancel_trade, _proposal())
        assert out.refunded is None
        assert out.error is not None
        assert world.engine.get_trade_state() is TradeState.CONFIRMED


def test_all_lists_three_activities() -> None:
    acts = TradeActivities(deploy().engine)
    assert acts.all() == [acts.incept_trade, acts.confirm_trade, acts.cancel_trade]
