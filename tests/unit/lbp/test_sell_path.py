"""Tests for LBP swaps (sell_path) and fee accrual."""

import pytest

from appchain.errors import PoolDoesNotExist, TokensNotDistinct
from appchain.lbp.errors import AmountOutInsufficient, SaleIsNotRunning
from appchain.lbp.pool import FeeSchedule
from appchain.pairs import derive_fee_collector_asset_key
from tests.helpers import (
    ALICE,
    BOB,
    CAROL,
    INITIAL_LIQUIDITY,
    TOKEN_A,
    TOKEN_B,
    TOKEN_C,
    advance_to,
    create_lbp_pool,
    fund,
)


class TestSaleWindow:
    """Tests for is_pool_running and the sale window boundaries."""

    @pytest.mark.parametrize("height", [10, 500, 1010])
    def test_sell_inside_window(self, chain_with_pool, height):
        advance_to(chain_with_pool, height)
        out = chain_with_pool.lbp.sell_path(ALICE, TOKEN_B, TOKEN_A, 100, 1)
        assert out > 0

    @pytest.mark.parametrize("height", [0, 9, 1011])
    def test_sell_outside_window(self, chain_with_pool, height):
        advance_to(chain_with_pool, height)
        with pytest.raises(SaleIsNotRunning):
            chain_with_pool.lbp.sell_path(ALICE, TOKEN_B, TOKEN_A, 100, 1)

    def test_is_pool_running(self, chain_with_pool):
        lbp = chain_with_pool.lbp
        record = lbp.get_pool(TOKEN_A, TOKEN_B)

        advance_to(chain_with_pool, 9)
        assert not lbp.is_pool_running(record)
        advance_to(chain_with_pool, 10)
        assert lbp.is_pool_running(record)
        advance_to(chain_with_pool, 1010)
        assert lbp.is_pool_running(record)
        advance_to(chain_with_pool, 1011)
        assert not lbp.is_pool_running(record)


class TestSellSoldAsset:
    """Selling the sold asset: the fee is taken from the output."""

    def test_balances_after_sale(self, chain_with_pool):
        """100 B at start + 10: gross 25, repay fee 4, seller receives 21."""
        chain = chain_with_pool
        advance_to(chain, 20)

        out = chain.lbp.sell_path(ALICE, TOKEN_B, TOKEN_A, 100, 1)

        assert out == 21
        assert chain.balances.get_balance(TOKEN_A, ALICE) == INITIAL_LIQUIDITY + 21
        assert chain.balances.get_balance(TOKEN_B, ALICE) == INITIAL_LIQUIDITY - 100
        assert chain.balances.get_balance(TOKEN_A, BOB) == 4
        assert chain.lbp.get_reserves(TOKEN_A, TOKEN_B) == (
            INITIAL_LIQUIDITY - 25,
            INITIAL_LIQUIDITY + 100,
        )

    def test_fee_collected(self, chain_with_pool):
        advance_to(chain_with_pool, 20)
        chain_with_pool.lbp.sell_path(ALICE, TOKEN_B, TOKEN_A, 100, 1)
        assert chain_with_pool.lbp.get_fee_collected(BOB, TOKEN_A) == 4

    def test_min_limit_exact(self, chain_with_pool):
        advance_to(chain_with_pool, 20)
        assert chain_with_pool.lbp.sell_path(ALICE, TOKEN_B, TOKEN_A, 100, 21) == 21

    def test_min_limit_not_met(self, chain_with_pool):
        advance_to(chain_with_pool, 20)
        with pytest.raises(AmountOutInsufficient):
            chain_with_pool.lbp.sell_path(ALICE, TOKEN_B, TOKEN_A, 100, 22)


class TestSellAccumulatingAsset:
    """Selling the accumulating asset: the fee is charged on amount_in."""

    def test_balances_after_sale(self, chain_with_pool):
        """100 A at start + 10: repay fee 20 A, seller receives 100 - 20."""
        chain = chain_with_pool
        advance_to(chain, 20)
        record = chain.lbp.get_pool(TOKEN_A, TOKEN_B)
        assert chain.lbp.calculate_token_out_amount(TOKEN_A, TOKEN_B, 100, record) == 381

        out = chain.lbp.sell_path(ALICE, TOKEN_A, TOKEN_B, 100, 1)

        assert out == 80
        assert chain.balances.get_balance(TOKEN_A, ALICE) == INITIAL_LIQUIDITY - 120
        assert chain.balances.get_balance(TOKEN_B, ALICE) == INITIAL_LIQUIDITY + 80
        assert chain.balances.get_balance(TOKEN_A, BOB) == 20
        assert chain.lbp.get_fee_collected(BOB, TOKEN_A) == 20
        assert chain.lbp.get_reserves(TOKEN_A, TOKEN_B) == (
            INITIAL_LIQUIDITY + 100,
            INITIAL_LIQUIDITY - 80,
        )

    def test_out_is_amount_in_less_fee(self, chain):
        """Under the configured fee the payout is amount_in minus that fee."""
        create_lbp_pool(chain, fee=FeeSchedule(1, 100), repay_target=0)
        advance_to(chain, 20)

        out = chain.lbp.sell_path(ALICE, TOKEN_A, TOKEN_B, 1_000, 1)

        assert out == 990
        assert chain.lbp.get_fee_collected(BOB, TOKEN_A) == 10

    def test_min_limit_applies_to_net_amount(self, chain_with_pool):
        advance_to(chain_with_pool, 20)
        with pytest.raises(AmountOutInsufficient):
            chain_with_pool.lbp.sell_path(ALICE, TOKEN_A, TOKEN_B, 100, 81)


class TestRepayFee:
    """Tests for the switch from the repay fee to the configured fee."""

    def test_threshold_straddle(self, chain):
        """First sale pays the 20% repay fee, the second the configured 1%."""
        create_lbp_pool(chain, fee=FeeSchedule(1, 100), repay_target=500)
        lbp = chain.lbp
        record = lbp.get_pool(TOKEN_A, TOKEN_B)
        advance_to(chain, 20)

        assert lbp.is_repay_fee_applied(record)
        first = lbp.sell_path(ALICE, TOKEN_B, TOKEN_A, 10_000, 1)
        assert first == 2568 - 512
        assert lbp.get_fee_collected(BOB, TOKEN_A) == 512

        assert not lbp.is_repay_fee_applied(record)
        second = lbp.sell_path(ALICE, TOKEN_B, TOKEN_A, 10_000, 1)
        assert second == 2536 - 25
        assert lbp.get_fee_collected(BOB, TOKEN_A) == 537

    def test_calculate_fees_selects_schedule(self, chain):
        create_lbp_pool(chain, fee=FeeSchedule(1, 100), repay_target=10)
        lbp = chain.lbp
        record = lbp.get_pool(TOKEN_A, TOKEN_B)

        assert lbp.calculate_fees(record, 1_000) == 200
        lbp.fee_collected.set(derive_fee_collector_asset_key(BOB, TOKEN_A), 10)
        assert lbp.calculate_fees(record, 1_000) == 10


class TestSellErrors:
    """Tests for sell_path failures."""

    def test_pool_does_not_exist(self, chain_with_pool):
        advance_to(chain_with_pool, 20)
        with pytest.raises(PoolDoesNotExist):
            chain_with_pool.lbp.sell_path(ALICE, TOKEN_C, TOKEN_A, 100, 1)

    def test_same_tokens(self, chain_with_pool):
        with pytest.raises(TokensNotDistinct):
            chain_with_pool.lbp.sell_path(ALICE, TOKEN_A, TOKEN_A, 100, 1)

    def test_seller_without_funds_leaves_state(self, chain_with_pool):
        """A failing sale inside a block leaves fees and balances untouched."""
        chain = chain_with_pool
        advance_to(chain, 20)
        fund(chain, CAROL, TOKEN_B, 50)

        chain.transaction(
            CAROL,
            "lbp",
            "sell_path_signed",
            token_in=TOKEN_B,
            token_out=TOKEN_A,
            amount_in=100,
            amount_out_min_limit=1,
        )
        receipt = chain.produce_block().transactions[0]

        assert receipt.error == "InsufficientBalance"
        assert chain.lbp.get_fee_collected(BOB, TOKEN_A) == 0
        assert chain.balances.get_balance(TOKEN_A, BOB) == 0
        assert chain.lbp.get_reserves(TOKEN_A, TOKEN_B) == (INITIAL_LIQUIDITY, INITIAL_LIQUIDITY)


class TestQuotes:
    """Tests for read-only quote helpers."""

    def test_calculate_token_out_amount(self, chain_with_pool):
        lbp = chain_with_pool.lbp
        record = lbp.get_pool(TOKEN_A, TOKEN_B)
        advance_to(chain_with_pool, 20)
        assert lbp.calculate_token_out_amount(TOKEN_B, TOKEN_A, 100, record) == 25

    def test_calculate_amount_in(self, chain_with_pool):
        assert chain_with_pool.lbp.calculate_amount_in(TOKEN_B, TOKEN_A, 500_000) == 1_000_000

    def test_get_linear_weight(self, chain_with_pool):
        assert chain_with_pool.lbp.get_linear_weight(1000, 2000, 80_000, 20_000, 1500) == 50_000
