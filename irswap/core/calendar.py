"""Day count fractions and settlement date schedules.

Settlement dates are epoch-second timestamps; accruals are computed on the
UTC calendar dates those timestamps fall on.
"""

from __future__ import annotations

import calendar as _cal
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import assert_never

from dateutil.relativedelta import relativedelta

from irswap.core.result import Err, Ok
from irswap.core.types import Timestamp, from_datetime, to_datetime


class DayCountBasis(Enum):
    """Day count basis selected by the integer `day_count_basis` term."""

    ACT_360 = 0
    ACT_365 = 1
    THIRTY_360 = 2
    ACT_ACT_ISDA = 3


def _days_in_year(y: int) -> int:
    return 366 if _cal.isleap(y) else 365


def _act_act_isda(start: date, end: date) -> Decimal:
    """ACT/ACT.ISDA: actual days / actual days in year, split across year boundaries."""
    total = Decimal("0")
    current = start
    while current.year < end.year:
        year_end = date(current.year + 1, 1, 1)
        total += Decimal((year_end - current).days) / Decimal(_days_in_year(current.year))
        current = year_end
    remaining = (end - current).days
    if remaining > 0:
        total += Decimal(remaining) / Decimal(_days_in_year(current.year))
    return total


def day_count_fraction(start: date, end: date, basis: DayCountBasis) -> Decimal:
    """Year fraction for the accrual period [start, end).

    Precondition: start <= end. Raises TypeError otherwise.
    """
    if start > end:
        raise TypeError(f"day_count_fraction: start ({start}) must be <= end ({end})")
    match basis:
        case DayCountBasis.ACT_360:
            return Decimal((end - start).days) / Decimal("360")
        case DayCountBasis.ACT_365:
            return Decimal((end - start).days) / Decimal("365")
        case DayCountBasis.THIRTY_360:
            # ISDA 2006 Section 4.16(f), bond basis
            d1 = min(start.day, 30)
            d2 = 30 if (end.day == 31 and d1 >= 30) else end.day
            days = 360 * (end.year - start.year) + 30 * (end.month - start.month) + (d2 - d1)
            return Decimal(days) / Decimal("360")
        case DayCountBasis.ACT_ACT_ISDA:
            return _act_act_isda(start, end)
        case _never:
            assert_never(_never)


def accrual_fraction(start: Timestamp, end: Timestamp, basis: DayCountBasis) -> Decimal:
    """day_count_fraction between the UTC dates of two timestamps."""
    return day_count_fraction(to_datetime(start).date(), to_datetime(end).date(), basis)


def generate_settlement_dates(
    starting_date: Timestamp,
    maturity_date: Timestamp,
    frequency_days: int,
) -> Ok[tuple[Timestamp, ...]] | Err[str]:
    """Settlement dates every `frequency_days` from start, the last one at maturity."""
    if starting_date >= maturity_date:
        return Err(f"starting_date ({starting_date}) must be < maturity_date ({maturity_date})")
    if frequency_days <= 0:
        return Err(f"frequency_days must be > 0, got {frequency_days}")
    start = to_datetime(starting_date)
    dates: list[Timestamp] = []
    step = 1
    while True:
        candidate = from_datetime(start + relativedelta(days=frequency_days * step))
        if candidate >= maturity_date:
            dates.append(maturity_date)
            break
        dates.append(candidate)
        step += 1
    return Ok(tuple(dates))
