"""Tests for irswap.trade.terms — mirroring and fingerprints."""

from __future__ import annotations

import dataclasses

import pytest
from hypothesis import given

from irswap.core.result import unwrap
from irswap.core.types import Address
from irswap.trade.terms import TerminationTerms, TradeTerms, terms_fingerprint
from tests.conftest import trade_terms

_A = Address(value="0x" + "aa" * 20)
_B = Address(value="0x" + "bb" * 20)


def _terms(**overrides: object) -> TradeTerms:
    base = TradeTerms(
        initiator=_A, counterparty=_B, trade_data="tradeData",
        position=1, payment_amount=100, settlement_data="settlementData",
    )
    return dataclasses.replace(base, **overrides)  # type: ignore[arg-type]


class TestMirror:
    def test_mirror_swaps_and_negates(self) -> None:
        m = _terms().mirrored()
        assert m.initiator == _B
        assert m.counterparty == _A
        assert m.position == -1
        assert m.payment_amount == -100
        assert m.trade_data == "tradeData"
        assert m.settlement_data == "settlementData"

    @given(trade_terms())
    def test_mirror_is_involution(self, terms: TradeTerms) -> None:
        assert terms.mirrored().mirrored() == terms

    @given(trade_terms())
    def test_mirror_fingerprint_matches_proposal(self, terms: TradeTerms) -> None:
        confirming = terms.mirrored()
        assert unwrap(terms_fingerprint(confirming.mirrored())) == unwrap(terms_fingerprint(terms))


class TestFingerprint:
    def test_hex_digest(self) -> None:
        assert len(unwrap(terms_fingerprint(_terms()))) == 64

    def test_address_case_irrelevant(self) -> None:
        upper = _terms(initiator=Address(value="0x" + "AA" * 20))
        assert unwrap(terms_fingerprint(upper)) == unwrap(terms_fingerprint(_terms()))

    @pytest.mark.parametrize(
        "field,value",
        [
            ("counterparty", Address(value="0x" + "cc" * 20)),
            ("trade_data", "tradeData2"),
            ("position", -1),
            ("payment_amount", 101),
            ("settlement_data", "other"),
        ],
    )
    def test_every_field_is_significant(self, field: str, value: object) -> None:
        changed = _terms(**{field: value})
        assert unwrap(terms_fingerprint(changed)) != unwrap(terms_fingerprint(_terms()))


class TestViolations:
    def test_valid_terms(self) -> None:
        assert _terms().violations() == ()

    def test_same_parties(self) -> None:
        paths = [v.path for v in _terms(counterparty=_A).violations()]
        assert paths == ["counterparty"]

    @pytest.mark.parametrize("position", [0, 2, -2, True])
    def test_bad_position(self, position: object) -> None:
        paths = [v.path for v in _terms(position=position).violations()]
        assert paths == ["position"]

    @pytest.mark.parametrize("amount", [1.0, "100", False])
    def test_bad_payment(self, amount: object) -> None:
        paths = [v.path for v in _terms(payment_amount=amount).violations()]
        assert paths == ["payment_amount"]

    def test_non_string_blobs(self) -> None:
        paths = {v.path for v in _terms(trade_data=1, settlement_data=None).violations()}
        assert paths == {"trade_data", "settlement_data"}

    def test_collects_all(self) -> None:
        assert len(_terms(counterparty=_A, position=0, payment_amount="x").violations()) == 3


class TestTerminationTerms:
    def test_mirror(self) -> None:
        t = TerminationTerms(requester=_A, counterparty=_B, termination_payment=50, terms="t")
        m = t.mirrored()
        assert (m.requester, m.counterparty, m.termination_payment, m.terms) == (_B, _A, -50, "t")
        assert m.mirrored() == t
