"""Decimal context for rate and settlement arithmetic.

Token amounts are integers in base units. Rate arithmetic runs in
IRSWAP_DECIMAL_CONTEXT (prec=28, ROUND_HALF_EVEN, traps on invalid
operation, division by zero, overflow) and is rounded back to base units.
"""

from __future__ import annotations

from decimal import ROUND_HALF_EVEN as _ROUND_HALF_EVEN
from decimal import (
    Context,
    Decimal,
    DivisionByZero,
    InvalidOperation,
    Overflow,
    localcontext,
)

IRSWAP_DECIMAL_CONTEXT = Context(
    prec=28,
    rounding=_ROUND_HALF_EVEN,
    Emin=-999999,
    Emax=999999,
    capitals=1,
    clamp=0,
    flags=[],
    traps=[InvalidOperation, DivisionByZero, Overflow],
)


def to_base_units(amount: Decimal) -> int:
    """Round a Decimal amount half-even to whole base units."""
    with localcontext(IRSWAP_DECIMAL_CONTEXT):
        return int(amount.quantize(Decimal(1)))


def scale_units(whole_units: int, decimals: int) -> int:
    """Whole units to base units for a token with `decimals` decimals."""
    if decimals < 0:
        raise ValueError(f"decimals must be >= 0, got {decimals}")
    return whole_units * 10**decimals
