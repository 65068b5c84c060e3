"""Tests for irswap.config — swap terms and deployment parameters."""

from __future__ import annotations

import dataclasses

import pytest

from irswap.config import (
    DEFAULT_CONFIRMATION_WINDOW,
    EngineSettings,
    IrsTerms,
    SwapConfig,
)
from irswap.core.calendar import DayCountBasis
from irswap.core.result import Err, Ok, unwrap
from irswap.core.types import Address
from irswap.escrow.margin import MarginAccount
from tests.swap_world import (
    DAY,
    FIRST_SETTLEMENT,
    FIXED,
    FLOATING,
    JOB_ID,
    MATURITY,
    ORACLE,
    START,
    irs_terms,
    swap_config,
)


def _create(**overrides: object) -> Ok[IrsTerms] | Err[str]:
    kwargs: dict[str, object] = {
        "fixed_rate_payer": FIXED.value,
        "floating_rate_payer": FLOATING.value,
        "rates_decimals": 1,
        "day_count_basis": 0,
        "swap_rate": 100,
        "spread": 0,
        "notional_amount": 1000,
        "settlement_frequency": 180,
        "starting_date": START,
        "maturity_date": MATURITY,
    }
    kwargs.update(overrides)
    return IrsTerms.create(**kwargs)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# IrsTerms
# ---------------------------------------------------------------------------


class TestIrsTerms:
    def test_create_valid(self) -> None:
        irs = unwrap(_create())
        assert irs.day_count_basis is DayCountBasis.ACT_360
        assert irs.parties == {FIXED, FLOATING}
        assert irs.oracle_contract_for_benchmark == Address.ZERO

    def test_dates_generated_from_frequency(self) -> None:
        assert unwrap(_create()).settlement_dates == (FIRST_SETTLEMENT, MATURITY)

    def test_explicit_dates_kept(self) -> None:
        dates = (START + 90 * DAY, MATURITY)
        assert unwrap(_create(settlement_dates=dates)).settlement_dates == dates

    def test_same_payers(self) -> None:
        assert isinstance(_create(floating_rate_payer=FIXED.value.upper()), Err)

    def test_blank_payer(self) -> None:
        result = _create(fixed_rate_payer="")
        assert isinstance(result, Err)
        assert "fixed_rate_payer" in result.error

    def test_negative_decimals(self) -> None:
        assert isinstance(_create(rates_decimals=-1), Err)

    def test_unknown_basis(self) -> None:
        result = _create(day_count_basis=9)
        assert isinstance(result, Err)
        assert "day_count_basis" in result.error

    def test_non_positive_notional(self) -> None:
        assert isinstance(_create(notional_amount=0), Err)

    def test_start_after_maturity(self) -> None:
        assert isinstance(_create(starting_date=MATURITY), Err)

    @pytest.mark.parametrize(
        "dates",
        [
            (MATURITY, FIRST_SETTLEMENT),
            (FIRST_SETTLEMENT, FIRST_SETTLEMENT),
            (START, MATURITY),
            (FIRST_SETTLEMENT, MATURITY + 1),
        ],
    )
    def test_bad_schedules(self, dates: tuple[int, ...]) -> None:
        assert isinstance(_create(settlement_dates=dates), Err)

    def test_bad_frequency_without_dates(self) -> None:
        assert isinstance(_create(settlement_frequency=0), Err)

    def test_direct_construction_checks_payers(self) -> None:
        irs = irs_terms()
        with pytest.raises(TypeError):
            dataclasses.replace(irs, floating_rate_payer=FIXED)


# ---------------------------------------------------------------------------
# Engine settings and swap config
# ---------------------------------------------------------------------------


class TestEngineSettings:
    def test_defaults(self) -> None:
        settings = EngineSettings()
        assert settings.confirmation_window == DEFAULT_CONFIRMATION_WINDOW == 3600
        assert settings.ownership_decimals == 18
        assert settings.oracle_timeout == 3600

    def test_window_positive(self) -> None:
        with pytest.raises(TypeError):
            EngineSettings(confirmation_window=0)

    def test_decimals_non_negative(self) -> None:
        with pytest.raises(TypeError):
            EngineSettings(ownership_decimals=-1)

    def test_oracle_timeout_positive(self) -> None:
        with pytest.raises(TypeError):
            EngineSettings(oracle_timeout=0)


class TestSwapConfig:
    def test_create(self) -> None:
        cfg = swap_config()
        assert cfg.name.value == "QualitaX Token"
        assert cfg.oracle == ORACLE
        assert cfg.job_id.value == JOB_ID

    def test_margin_requirements_symmetric(self) -> None:
        reqs = swap_config().margin_requirements()
        expected = MarginAccount(margin_buffer=100, termination_fee=100)
        assert reqs == {FIXED: expected, FLOATING: expected}

    def test_max_supply(self) -> None:
        assert swap_config().max_supply(EngineSettings()) == 4 * 10**18
        assert swap_config(scaling=2).max_supply(EngineSettings(ownership_decimals=0)) == 8

    @pytest.mark.parametrize(
        "field,value",
        [("name", ""), ("symbol", ""), ("oracle", ""), ("job_id", ""),
         ("initial_margin", -1), ("termination_fee", -1), ("scaling", 0)],
    )
    def test_create_rejects(self, field: str, value: object) -> None:
        kwargs: dict[str, object] = {
            "name": "QualitaX Token", "symbol": "QTX", "irs": irs_terms(),
            "oracle": ORACLE.value, "job_id": JOB_ID,
            "initial_margin": 100, "termination_fee": 100, "scaling": 1,
        }
        kwargs[field] = value
        result = SwapConfig.create(**kwargs)  # type: ignore[arg-type]
        assert isinstance(result, Err)
