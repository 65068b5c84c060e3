"""Tests for irswap.core.result — Ok / Err result values."""

from __future__ import annotations

import dataclasses

import pytest
from hypothesis import given
from hypothesis import strategies as st

from irswap.core.result import Err, Ok, unwrap

# ---------------------------------------------------------------------------
# Ok and Err hold values, are frozen, support pattern matching
# ---------------------------------------------------------------------------


class TestOkBasics:
    def test_ok_holds_value(self) -> None:
        assert Ok(42).value == 42

    def test_ok_is_frozen(self) -> None:
        ok = Ok(42)
        with pytest.raises(dataclasses.FrozenInstanceError):
            ok.value = 99  # type: ignore[misc]

    def test_ok_equality(self) -> None:
        assert Ok(42) == Ok(42)
        assert Ok(42) != Ok(99)

    def test_pattern_match_ok(self) -> None:
        match Ok(42):
            case Ok(v):
                assert v == 42
            case _:
                pytest.fail("Should match Ok")


class TestErrBasics:
    def test_err_holds_error(self) -> None:
        assert Err("fail").error == "fail"

    def test_err_is_frozen(self) -> None:
        err = Err("fail")
        with pytest.raises(dataclasses.FrozenInstanceError):
            err.error = "other"  # type: ignore[misc]

    def test_pattern_match_err(self) -> None:
        match Err("fail"):
            case Err(e):
                assert e == "fail"
            case _:
                pytest.fail("Should match Err")

    def test_ok_is_not_err(self) -> None:
        assert not isinstance(Ok(1), Err)
        assert not isinstance(Err("e"), Ok)


# ---------------------------------------------------------------------------
# Combinators
# ---------------------------------------------------------------------------


def _half(x: int) -> Ok[int] | Err[str]:
    if x % 2:
        return Err(f"{x} is odd")
    return Ok(x // 2)


class TestCombinators:
    def test_ok_map_applies_function(self) -> None:
        assert Ok(5).map(lambda x: x * 2) == Ok(10)

    def test_err_map_passthrough(self) -> None:
        assert Err("fail").map(lambda x: x * 2) == Err("fail")

    def test_and_then_chains(self) -> None:
        assert Ok(8).and_then(_half).and_then(_half) == Ok(2)

    def test_and_then_stops_at_first_err(self) -> None:
        assert Ok(6).and_then(_half).and_then(_half) == Err("3 is odd")

    def test_err_and_then_passthrough(self) -> None:
        assert Err("initial").and_then(_half) == Err("initial")


class TestUnwrap:
    def test_ok_unwrap(self) -> None:
        assert Ok(42).unwrap() == 42

    def test_err_unwrap_raises(self) -> None:
        with pytest.raises(RuntimeError, match="Called unwrap on Err"):
            Err("fail").unwrap()

    def test_unwrap_or(self) -> None:
        assert Ok(42).unwrap_or(0) == 42
        assert Err("fail").unwrap_or(0) == 0

    def test_free_unwrap(self) -> None:
        assert unwrap(Ok("x")) == "x"
        with pytest.raises(RuntimeError, match="unwrap on Err"):
            unwrap(Err("fail"))

    def test_free_unwrap_rejects_non_result(self) -> None:
        with pytest.raises(TypeError):
            unwrap(42)  # type: ignore[arg-type]


class TestMonadLaws:
    @given(st.integers())
    def test_left_identity(self, x: int) -> None:
        assert Ok(x).and_then(_half) == _half(x)

    @given(st.integers())
    def test_right_identity(self, x: int) -> None:
        assert Ok(x).and_then(Ok) == Ok(x)
