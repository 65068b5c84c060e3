"""Hypothesis strategies and profiles for the irswap test suite.

Strategies are composable: addresses, blobs and signed amounts build terms.
"""

from __future__ import annotations

from hypothesis import HealthCheck, settings
from hypothesis import strategies as st
from hypothesis.strategies import SearchStrategy

from irswap.core.types import Address
from irswap.trade.terms import TradeTerms

# ---------------------------------------------------------------------------
# Hypothesis global settings
# ---------------------------------------------------------------------------

settings.register_profile(
    "ci",
    max_examples=200,
    suppress_health_check=[HealthCheck.too_slow],
    deadline=None,
)
settings.register_profile(
    "dev",
    max_examples=50,
    suppress_health_check=[HealthCheck.too_slow],
    deadline=None,
)
settings.load_profile("dev")


# ===================================================================
# PRIMITIVE STRATEGIES
# ===================================================================


def hex_addresses() -> SearchStrategy[str]:
    """0x-prefixed 40-hex-digit account strings."""
    return st.text(alphabet="0123456789abcdef", min_size=40, max_size=40).map(
        lambda h: f"0x{h}"
    )


def addresses() -> SearchStrategy[Address]:
    return hex_addresses().map(lambda raw: Address(value=raw))


def signed_amounts(bound: int = 10**12) -> SearchStrategy[int]:
    return st.integers(min_value=-bound, max_value=bound)


def blobs(max_size: int = 40) -> SearchStrategy[str]:
    """Opaque trade-data / settlement-data strings."""
    return st.text(max_size=max_size)


def positions() -> SearchStrategy[int]:
    return st.sampled_from((1, -1))


# ===================================================================
# DOMAIN STRATEGIES
# ===================================================================


@st.composite
def trade_terms(draw: st.DrawFn) -> TradeTerms:
    """Well-formed TradeTerms between two distinct parties."""
    initiator = draw(addresses())
    counterparty = draw(addresses().filter(lambda a: a != initiator))
    return TradeTerms(
        initiator=initiator,
        counterparty=counterparty,
        trade_data=draw(blobs()),
        position=draw(positions()),
        payment_amount=draw(signed_amounts()),
        settlement_data=draw(blobs()),
    )
