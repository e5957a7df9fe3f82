"""LBP pool store records.

All records are immutable. A PoolRecord is written once at creation and
never changed afterwards; swaps only move ledger balances and fee totals.
"""

from __future__ import annotations

from dataclasses import dataclass

from appchain.constants import REPAY_FEE_DENOMINATOR, REPAY_FEE_NUMERATOR
from appchain.models.types import AccountId, TokenId


@dataclass(frozen=True)
class FeeSchedule:
    """Fee ratio numerator / denominator. Zero in either part means no fee."""

    numerator: int
    denominator: int


# Boosted fee charged until the repay target is collected (20%)
REPAY_FEE = FeeSchedule(REPAY_FEE_NUMERATOR, REPAY_FEE_DENOMINATOR)


@dataclass(frozen=True)
class AssetPair:
    """Roles of the pool's two tokens, in the order the creator gave them.

    Attributes:
        accumulating: Asset received from buyers; fees are charged in it
        sold: Asset being distributed by the sale
    """

    accumulating: TokenId
    sold: TokenId


@dataclass(frozen=True)
class PoolRecord:
    """Creation-time parameters of an LBP pool.

    Attributes:
        owner: Account that created the pool and received its LP supply
        start: First block height at which trading is allowed
        end: Last block height at which trading is allowed
        assets: Accumulating and sold asset roles
        initial_weight: Accumulating-side weight at start
        final_weight: Accumulating-side weight at end
        fee: Configured trading fee, used once the repay target is reached
        fee_collector: Account receiving trading fees
        repay_target: Cumulative fee amount after which the boosted fee stops
    """

    owner: AccountId
    start: int
    end: int
    assets: AssetPair
    initial_weight: int
    final_weight: int
    fee: FeeSchedule
    fee_collector: AccountId
    repay_target: int

    def weights_for(self, token_in: TokenId) -> tuple[int, int]:
        """(weight_in, weight_out) passed to linear_weight for a sale of token_in."""
        if token_in == self.assets.accumulating:
            return self.initial_weight, self.final_weight
        return self.final_weight, self.initial_weight
