"""Test helpers: a deployed swap with its ledger, oracle, bus and clock.

The default swap mirrors the reference deployment: notional 1000, swap rate
10.0% (100 at one rate decimal), initial margin 100 and termination fee 100
per party, scaling 1. Two settlement dates 180 days apart, the second at
maturity.
"""

from __future__ import annotations

from dataclasses import dataclass

from irswap.config import EngineSettings, IrsTerms, SwapConfig
from irswap.core.clock import ManualClock
from irswap.core.errors import SwapError
from irswap.core.result import Err, Ok, unwrap
from irswap.core.types import Address
from irswap.infra.memory_adapter import InMemoryEventBus
from irswap.oracle.adapter import InMemoryRateOracle
from irswap.token.settlement import InMemorySettlementLedger
from irswap.trade.engine import SwapEngine
from irswap.trade.record import TradeState

FIXED = Address(value="0xA2003BF3fEbB0E8DcdEA3c75F1699b5c443Cc7cc")
FLOATING = Address(value="0x2aB0021165ed140EC25Bc320956963CA2d3dbca0")
OUTSIDER = Address(value="0x" + "33" * 20)
ORACLE = Address(value="0x6090149792dAAeE9D1D568c9f9a6F6B46AA29eFD")
ENGINE = Address(value="0x" + "e1" * 20)

JOB_ID = "ca98366cc7314957b8c012c72f05aeeb"
DAY = 24 * 3600
START = 1_704_067_200  # 2024-01-01T00:00:00Z
FIRST_SETTLEMENT = START + 180 * DAY
MATURITY = START + 360 * DAY

INITIAL_MARGIN = 100
TERMINATION_FEE = 100
MARGIN = INITIAL_MARGIN + TERMINATION_FEE


def irs_terms(
    settlement_dates: tuple[int, ...] = (FIRST_SETTLEMENT, MATURITY),
    maturity_date: int = MATURITY,
    day_count_basis: int = 0,
    spread: int = 0,
) -> IrsTerms:
    return unwrap(IrsTerms.create(
        fixed_rate_payer=FIXED.value,
        floating_rate_payer=FLOATING.value,
        rates_decimals=1,
        day_count_basis=day_count_basis,
        swap_rate=100,
        spread=spread,
        notional_amount=1000,
        settlement_frequency=180,
        starting_date=START,
        maturity_date=maturity_date,
        settlement_dates=settlement_dates,
    ))


def swap_config(
    irs: IrsTerms | None = None,
    initial_margin: int = INITIAL_MARGIN,
    termination_fee: int = TERMINATION_FEE,
    scaling: int = 1,
) -> SwapConfig:
    return unwrap(SwapConfig.create(
        name="QualitaX Token",
        symbol="QTX",
        irs=irs if irs is not None else irs_terms(),
        oracle=ORACLE.value,
        job_id=JOB_ID,
        initial_margin=initial_margin,
        termination_fee=termination_fee,
        scaling=scaling,
    ))


@dataclass
class SwapWorld:
    clock: ManualClock
    usdc: InMemorySettlementLedger
    oracle: InMemoryRateOracle
    bus: InMemoryEventBus
    engine: SwapEngine

    def fund(self, party: Address, amount: int = MARGIN) -> None:
        """Mint `amount` to party and let the engine pull exactly that much."""
        unwrap(self.usdc.mint(party, amount))
        unwrap(self.usdc.approve(party, self.engine.address, amount))

    def custody(self) -> int:
        return self.usdc.balance_of(self.engine.address)

    def propose(
        self,
        caller: Address = FIXED,
        counterparty: Address = FLOATING,
        trade_data: str = "tradeData",
        position: int = 1,
        payment_amount: int = 100,
        settlement_data: str = "settlementData",
    ) -> Ok[str] | Err[SwapError]:
        return self.engine.propose(
            caller, counterparty, trade_data, position, payment_amount, settlement_data,
        )

    def confirm(
        self,
        caller: Address = FLOATING,
        counterparty: Address = FIXED,
        trade_data: str = "tradeData",
        position: int = -1,
        payment_amount: int = -100,
        settlement_data: str = "settlementData",
    ) -> Ok[str] | Err[SwapError]:
        return self.engine.confirm(
            caller, counterparty, trade_data, position, payment_amount, settlement_data,
        )

    def cancel(
        self,
        caller: Address = FIXED,
        counterparty: Address = FLOATING,
        trade_data: str = "tradeData",
        position: int = 1,
        payment_amount: int = 100,
        settlement_data: str = "settlementData",
    ) -> Ok[int] | Err[SwapError]:
        return self.engine.cancel(
            caller, counterparty, trade_data, position, payment_amount, settlement_data,
        )

    def confirmed(self) -> None:
        """Fund both parties and run the handshake to CONFIRMED."""
        self.fund(FIXED)
        self.fund(FLOATING)
        unwrap(self.propose())
        unwrap(self.confirm())
        assert self.engine.get_trade_state() is TradeState.CONFIRMED

    def evaluate(self, rate: int) -> int:
        """Advance to the next settlement date, request and deliver `rate`."""
        due = self.engine.next_settlement_date()
        assert due is not None
        if self.clock.now() < due:
            self.clock.set(due)
        request_id = unwrap(self.engine.initiate_settlement(FIXED))
        return unwrap(self.oracle.fulfil(self.engine, request_id, rate))  # type: ignore[arg-type]


def deploy(
    config: SwapConfig | None = None,
    start: int = START,
    settings: EngineSettings | None = None,
) -> SwapWorld:
    clock = ManualClock(start)
    usdc = InMemorySettlementLedger("USD Coin", "USDC", decimals=6, clock=clock)
    oracle = InMemoryRateOracle(ORACLE, clock=clock)
    bus = InMemoryEventBus()
    engine = unwrap(SwapEngine.create(
        address=ENGINE,
        config=config if config is not None else swap_config(),
        settlement_asset=usdc,
        oracle=oracle,
        clock=clock,
        settings=settings,
        bus=bus,
    ))
    return SwapWorld(clock=clock, usdc=usdc, oracle=oracle, bus=bus, engine=engine)
