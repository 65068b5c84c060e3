"""Settlement amount for one period from a benchmark rate fixing.

    floating = benchmark + spread
    amount   = notional * (floating - swap_rate) / 100 / 10**rates_decimals * dcf

computed in IRSWAP_DECIMAL_CONTEXT and rounded half-even to base units.
A positive amount is owed by the floating-rate payer to the fixed-rate payer.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, localcontext
from typing import final

from irswap.config import IrsTerms
from irswap.core.calendar import accrual_fraction
from irswap.core.errors import FieldViolation, ValidationError
from irswap.core.money import IRSWAP_DECIMAL_CONTEXT, to_base_units
from irswap.core.result import Err, Ok
from irswap.core.types import Address, Timestamp


@final
@dataclass(frozen=True, slots=True)
class SettlementLeg:
    """Who pays whom, and how much, for one settlement. amount >= 0."""

    payer: Address
    receiver: Address
    amount: int


def settlement_amount(
    irs: IrsTerms,
    benchmark_rate: int,
    period_start: Timestamp,
    period_end: Timestamp,
) -> Ok[int] | Err[ValidationError]:
    """Signed net amount for the period [period_start, period_end)."""
    if isinstance(benchmark_rate, bool) or not isinstance(benchmark_rate, int):
        return Err(ValidationError(
            message=f"benchmark_rate must be int, got {type(benchmark_rate).__name__}",
            code="INVALID_RATE",
            timestamp=period_end,
            source="trade.valuation.settlement_amount",
            fields=(FieldViolation(
                path="benchmark_rate", constraint="must be int",
                actual_value=repr(benchmark_rate),
            ),),
        ))
    if period_end < period_start:
        return Err(ValidationError(
            message=f"period_end ({period_end}) before period_start ({period_start})",
            code="INVALID_PERIOD",
            timestamp=period_end,
            source="trade.valuation.settlement_amount",
            fields=(FieldViolation(
                path="period_end", constraint=">= period_start",
                actual_value=str(period_end),
            ),),
        ))
    dcf = accrual_fraction(period_start, period_end, irs.day_count_basis)
    with localcontext(IRSWAP_DECIMAL_CONTEXT):
        floating = Decimal(benchmark_rate) + Decimal(irs.spread)
        rate_diff = floating - Decimal(irs.swap_rate)
        scale = Decimal(100) * Decimal(10) ** irs.rates_decimals
        amount = Decimal(irs.notional_amount) * rate_diff / scale * dcf
    return Ok(to_base_units(amount))


def settlement_leg(irs: IrsTerms, amount: int) -> SettlementLeg:
    """Resolve a signed settlement amount to a payer/receiver pair."""
    if amount >= 0:
        return SettlementLeg(
            payer=irs.floating_rate_payer, receiver=irs.fixed_rate_payer, amount=amount,
        )
    return SettlementLeg(
        payer=irs.fixed_rate_payer, receiver=irs.floating_rate_payer, amount=-amount,
    )
