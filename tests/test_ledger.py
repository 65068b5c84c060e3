"""Tests for irswap.token.ledger and the in-memory settlement asset."""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from irswap.core.clock import ManualClock
from irswap.core.errors import InsufficientAllowance, InsufficientBalance, ValidationError
from irswap.core.result import Err, Ok, unwrap
from irswap.core.types import Address
from irswap.token.settlement import InMemorySettlementLedger, SettlementAsset
from tests.conftest import addresses

_A = Address(value="0x" + "aa" * 20)
_B = Address(value="0x" + "bb" * 20)
_SPENDER = Address(value="0x" + "cc" * 20)


def _usdc(clock: ManualClock | None = None) -> InMemorySettlementLedger:
    return InMemorySettlementLedger("USD Coin", "USDC", decimals=6, clock=clock or ManualClock(7))


def _funded(amount: int = 500) -> InMemorySettlementLedger:
    ledger = _usdc()
    unwrap(ledger.mint(_A, amount))
    return ledger


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


class TestConstruction:
    def test_metadata(self) -> None:
        ledger = _usdc()
        assert (ledger.name, ledger.symbol, ledger.decimals) == ("USD Coin", "USDC", 6)
        assert ledger.total_supply() == 0

    def test_empty_symbol_rejected(self) -> None:
        with pytest.raises(TypeError):
            InMemorySettlementLedger("USD Coin", "")

    def test_negative_decimals_rejected(self) -> None:
        with pytest.raises(TypeError):
            InMemorySettlementLedger("USD Coin", "USDC", decimals=-1)

    def test_satisfies_settlement_protocol(self) -> None:
        assert isinstance(_usdc(), SettlementAsset)


# ---------------------------------------------------------------------------
# Mint and transfer
# ---------------------------------------------------------------------------


class TestMintAndTransfer:
    def test_mint_returns_total_supply(self) -> None:
        ledger = _usdc()
        assert unwrap(ledger.mint(_A, 300)) == 300
        assert unwrap(ledger.mint(_B, 200)) == 500
        assert ledger.balance_of(_A) == 300

    def test_transfer_moves_balance(self) -> None:
        ledger = _funded()
        assert isinstance(ledger.transfer(_A, _B, 120), Ok)
        assert ledger.balance_of(_A) == 380
        assert ledger.balance_of(_B) == 120
        assert ledger.total_supply() == 500

    def test_transfer_over_balance(self) -> None:
        ledger = _funded(10)
        result = ledger.transfer(_A, _B, 11)
        assert isinstance(result, Err)
        assert isinstance(result.error, InsufficientBalance)
        assert result.error.balance == 10
        assert result.error.required == 11
        assert result.error.timestamp == 7
        assert ledger.balance_of(_A) == 10

    @pytest.mark.parametrize("bad", [-1, True, 1.5, "10"])
    def test_invalid_amount(self, bad: object) -> None:
        ledger = _funded()
        result = ledger.transfer(_A, _B, bad)  # type: ignore[arg-type]
        assert isinstance(result, Err)
        assert isinstance(result.error, ValidationError)
        assert result.error.code == "INVALID_AMOUNT"

    def test_zero_transfer_allowed(self) -> None:
        assert isinstance(_funded().transfer(_A, _B, 0), Ok)

    def test_holders_sorted_non_zero(self) -> None:
        ledger = _funded()
        unwrap(ledger.transfer(_A, _B, 500))
        assert ledger.holders() == (_B,)


# ---------------------------------------------------------------------------
# Allowances
# ---------------------------------------------------------------------------


class TestAllowance:
    def test_approve_sets_not_adds(self) -> None:
        ledger = _funded()
        unwrap(ledger.approve(_A, _SPENDER, 100))
        unwrap(ledger.approve(_A, _SPENDER, 40))
        assert ledger.allowance(_A, _SPENDER) == 40

    def test_transfer_from_spends_allowance(self) -> None:
        ledger = _funded()
        unwrap(ledger.approve(_A, _SPENDER, 200))
        assert isinstance(ledger.transfer_from(_SPENDER, _A, _B, 150), Ok)
        assert ledger.allowance(_A, _SPENDER) == 50
        assert ledger.balance_of(_B) == 150

    def test_transfer_from_without_allowance(self) -> None:
        ledger = _funded()
        result = ledger.transfer_from(_SPENDER, _A, _B, 1)
        assert isinstance(result, Err)
        assert isinstance(result.error, InsufficientAllowance)
        assert result.error.party == _A.value
        assert ledger.balance_of(_A) == 500

    def test_transfer_from_allowance_but_no_balance(self) -> None:
        ledger = _funded(10)
        unwrap(ledger.approve(_A, _SPENDER, 100))
        result = ledger.transfer_from(_SPENDER, _A, _B, 50)
        assert isinstance(result, Err)
        assert isinstance(result.error, InsufficientBalance)
        assert ledger.allowance(_A, _SPENDER) == 100

    def test_approve_negative_rejected(self) -> None:
        assert isinstance(_usdc().approve(_A, _SPENDER, -5), Err)


class TestConservation:
    @given(
        st.lists(
            st.tuples(st.sampled_from([_A, _B, _SPENDER]), st.sampled_from([_A, _B, _SPENDER]),
                      st.integers(min_value=0, max_value=400)),
            max_size=30,
        )
    )
    def test_transfers_conserve_supply(self, moves: list[tuple[Address, Address, int]]) -> None:
        ledger = _funded(500)
        for src, dst, amount in moves:
            ledger.transfer(src, dst, amount)
        total = sum(ledger.balance_of(a) for a in (_A, _B, _SPENDER))
        assert total == ledger.total_supply() == 500
        assert all(ledger.balance_of(a) >= 0 for a in (_A, _B, _SPENDER))

    @given(addresses(), st.integers(min_value=0, max_value=10**30))
    def test_mint_credits_holder(self, holder: Address, amount: int) -> None:
        ledger = _usdc()
        unwrap(ledger.mint(holder, amount))
        assert ledger.balance_of(holder) == amount
