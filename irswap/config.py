"""Construction parameters for one swap engine.

IrsTerms and SwapConfig are fixed for the lifetime of the engine built from
them. Build them through create(), which validates and returns Err[str]
instead of raising.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import final

from irswap.core.calendar import DayCountBasis, generate_settlement_dates
from irswap.core.result import Err, Ok
from irswap.core.types import Address, NonEmptyStr, Timestamp
from irswap.escrow.margin import MarginAccount
from irswap.token.ownership import derive_max_supply

DEFAULT_CONFIRMATION_WINDOW: int = 3600
DEFAULT_OWNERSHIP_DECIMALS: int = 18
DEFAULT_ORACLE_TIMEOUT: int = 3600


# ---------------------------------------------------------------------------
# Interest rate swap terms
# ---------------------------------------------------------------------------


@final
@dataclass(frozen=True, slots=True)
class IrsTerms:
    """Economic terms of the swap.

    Rates (swap_rate, spread, benchmark fixings) are integers carrying
    rates_decimals decimal places, in percent: swap_rate=100 with
    rates_decimals=1 is 10.0%.
    """

    fixed_rate_payer: Address
    floating_rate_payer: Address
    oracle_contract_for_benchmark: Address
    settlement_currency: Address
    rates_decimals: int
    day_count_basis: DayCountBasis
    swap_rate: int
    spread: int
    notional_amount: int
    settlement_frequency: int  # days between generated settlement dates
    starting_date: Timestamp
    maturity_date: Timestamp
    settlement_dates: tuple[Timestamp, ...]

    def __post_init__(self) -> None:
        if self.fixed_rate_payer == self.floating_rate_payer:
            raise TypeError("IrsTerms: fixed_rate_payer and floating_rate_payer must differ")
        if self.starting_date >= self.maturity_date:
            raise TypeError(
                f"IrsTerms: starting_date ({self.starting_date}) "
                f"must be < maturity_date ({self.maturity_date})"
            )

    @staticmethod
    def create(
        fixed_rate_payer: str,
        floating_rate_payer: str,
        rates_decimals: int,
        day_count_basis: int,
        swap_rate: int,
        spread: int,
        notional_amount: int,
        settlement_frequency: int,
        starting_date: Timestamp,
        maturity_date: Timestamp,
        settlement_dates: tuple[Timestamp, ...] = (),
        oracle_contract_for_benchmark: str = Address.ZERO.value,
        settlement_currency: str = Address.ZERO.value,
    ) -> Ok[IrsTerms] | Err[str]:
        """Validate and build. Empty settlement_dates are generated from the frequency."""
        match Address.parse(fixed_rate_payer):
            case Err(e):
                return Err(f"IrsTerms.fixed_rate_payer: {e}")
            case Ok(fixed):
                pass
        match Address.parse(floating_rate_payer):
            case Err(e):
                return Err(f"IrsTerms.floating_rate_payer: {e}")
            case Ok(floating):
                pass
        if fixed == floating:
            return Err("IrsTerms: fixed_rate_payer and floating_rate_payer must differ")
        match Address.parse(oracle_contract_for_benchmark):
            case Err(e):
                return Err(f"IrsTerms.oracle_contract_for_benchmark: {e}")
            case Ok(benchmark):
                pass
        match Address.parse(settlement_currency):
            case Err(e):
                return Err(f"IrsTerms.settlement_currency: {e}")
            case Ok(currency):
                pass
        if rates_decimals < 0:
            return Err(f"IrsTerms.rates_decimals must be >= 0, got {rates_decimals}")
        try:
            basis = DayCountBasis(day_count_basis)
        except ValueError:
            return Err(f"IrsTerms.day_count_basis: unknown basis {day_count_basis}")
        if notional_amount <= 0:
            return Err(f"IrsTerms.notional_amount must be > 0, got {notional_amount}")
        if starting_date >= maturity_date:
            return Err(
                f"IrsTerms: starting_date ({starting_date}) "
                f"must be < maturity_date ({maturity_date})"
            )
        if settlement_dates:
            dates = tuple(settlement_dates)
            if any(b <= a for a, b in zip(dates, dates[1:])):
                return Err("IrsTerms.settlement_dates must be strictly increasing")
            if dates[0] <= starting_date:
                return Err(
                    f"IrsTerms.settlement_dates must start after starting_date ({starting_date})"
                )
            if dates[-1] > maturity_date:
                return Err(
                    f"IrsTerms.settlement_dates must not pass maturity_date ({maturity_date})"
                )
        else:
            match generate_settlement_dates(starting_date, maturity_date, settlement_frequency):
                case Err(e):
                    return Err(f"IrsTerms.settlement_dates: {e}")
                case Ok(dates):
                    pass
        return Ok(IrsTerms(
            fixed_rate_payer=fixed, floating_rate_payer=floating,
            oracle_contract_for_benchmark=benchmark, settlement_currency=currency,
            rates_decimals=rates_decimals, day_count_basis=basis,
            swap_rate=swap_rate, spread=spread, notional_amount=notional_amount,
            settlement_frequency=settlement_frequency,
            starting_date=starting_date, maturity_date=maturity_date,
            settlement_dates=dates,
        ))

    @property
    def parties(self) -> frozenset[Address]:
        return frozenset({self.fixed_rate_payer, self.floating_rate_payer})


# ---------------------------------------------------------------------------
# Engine construction parameters
# ---------------------------------------------------------------------------


@final
@dataclass(frozen=True, slots=True)
class EngineSettings:
    """Protocol constants shared by every engine instance."""

    confirmation_window: int = DEFAULT_CONFIRMATION_WINDOW
    ownership_decimals: int = DEFAULT_OWNERSHIP_DECIMALS
    # Seconds a rate request may stay unanswered before a party can re-request.
    oracle_timeout: int = DEFAULT_ORACLE_TIMEOUT

    def __post_init__(self) -> None:
        if self.confirmation_window <= 0:
            raise TypeError(
                f"EngineSettings.confirmation_window must be > 0, got {self.confirmation_window}"
            )
        if self.ownership_decimals < 0:
            raise TypeError(
                f"EngineSettings.ownership_decimals must be >= 0, got {self.ownership_decimals}"
            )
        if self.oracle_timeout <= 0:
            raise TypeError(
                f"EngineSettings.oracle_timeout must be > 0, got {self.oracle_timeout}"
            )


@final
@dataclass(frozen=True, slots=True)
class SwapConfig:
    """Everything needed to deploy one engine.

    initial_margin and termination_fee are per party, in settlement-asset
    base units. scaling sizes the ownership token supply.
    """

    name: NonEmptyStr
    symbol: NonEmptyStr
    irs: IrsTerms
    oracle: Address
    job_id: NonEmptyStr
    initial_margin: int
    termination_fee: int
    scaling: int

    def __post_init__(self) -> None:
        if self.initial_margin < 0 or self.termination_fee < 0:
            raise TypeError("SwapConfig: initial_margin and termination_fee must be >= 0")
        if self.scaling <= 0:
            raise TypeError(f"SwapConfig.scaling must be > 0, got {self.scaling}")

    @staticmethod
    def create(
        name: str,
        symbol: str,
        irs: IrsTerms,
        oracle: str,
        job_id: str,
        initial_margin: int,
        termination_fee: int,
        scaling: int = 1,
    ) -> Ok[SwapConfig] | Err[str]:
        match NonEmptyStr.parse(name):
            case Err(e):
                return Err(f"SwapConfig.name: {e}")
            case Ok(n):
                pass
        match NonEmptyStr.parse(symbol):
            case Err(e):
                return Err(f"SwapConfig.symbol: {e}")
            case Ok(sym):
                pass
        match Address.parse(oracle):
            case Err(e):
                return Err(f"SwapConfig.oracle: {e}")
            case Ok(orc):
                pass
        match NonEmptyStr.parse(job_id):
            case Err(e):
                return Err(f"SwapConfig.job_id: {e}")
            case Ok(job):
                pass
        if initial_margin < 0:
            return Err(f"SwapConfig.initial_margin must be >= 0, got {initial_margin}")
        if termination_fee < 0:
            return Err(f"SwapConfig.termination_fee must be >= 0, got {termination_fee}")
        if scaling <= 0:
            return Err(f"SwapConfig.scaling must be > 0, got {scaling}")
        return Ok(SwapConfig(
            name=n, symbol=sym, irs=irs, oracle=orc, job_id=job,
            initial_margin=initial_margin, termination_fee=termination_fee,
            scaling=scaling,
        ))

    def margin_requirements(self) -> dict[Address, MarginAccount]:
        """Symmetric requirement: both payers post the same buffer and fee."""
        acct = MarginAccount(
            margin_buffer=self.initial_margin, termination_fee=self.termination_fee,
        )
        return {
            self.irs.fixed_rate_payer: acct,
            self.irs.floating_rate_payer: acct,
        }

    def max_supply(self, settings: EngineSettings) -> int:
        return derive_max_supply(self.scaling, settings.ownership_decimals)
