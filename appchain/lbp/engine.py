"""LBP runtime module: pool creation, time-weighted sales and migration.

Lifecycle of a pool:
1. create_pool - the creator deposits both tokens and fixes the sale
   window, the weight curve and the fee schedule
2. sell_path - while start <= height <= end, anyone sells one pool token
   for the other at the current interpolated weight
3. migrate_pool - once height > end, anyone moves the remaining reserves
   into the XYK pool for the same pair; the LBP record stays as an inert
   marker with zero reserves

Fees are always charged in the accumulating asset. Until the fee
collector has received repay_target of it, the boosted repay fee applies
instead of the pool's configured fee.

Every public entry point runs inside one state transaction (see
appchain.runtime); raising anywhere discards all of its writes.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

import structlog

from appchain.errors import (
    InvalidAddress,
    PoolAlreadyExists,
    PoolDoesNotExist,
    TokensNotDistinct,
)
from appchain.lbp import math as lbp_math
from appchain.lbp.config import DEFAULT_LBP_CONFIG, LBPConfig
from appchain.lbp.errors import (
    AmountOutInsufficient,
    FeeCollectorAssetInUse,
    InvalidBlockRange,
    InvalidFee,
    InvalidWeight,
    MaxSaleDurationExceeded,
    PoolEmpty,
    PoolNotEnded,
    SaleIsNotRunning,
)
from appchain.lbp.pool import AssetPair, FeeSchedule, PoolRecord
from appchain.ledger import Balances
from appchain.models.types import (
    AccountId,
    TokenId,
    is_valid_address,
    normalize_address,
    short,
)
from appchain.module import BlockContext, RuntimeModule, runtime_method
from appchain.pairs import (
    DomainTag,
    canonicalize,
    derive_fee_collector_asset_key,
    derive_pool_key,
)
from appchain.safe_int import S
from appchain.state import StateMap, StateStore
from appchain.token_registry import TokenRegistry
from appchain.xyk import XYK

logger = structlog.get_logger()


def as_fee_schedule(fee: FeeSchedule | Mapping[str, int] | Sequence[int]) -> FeeSchedule:
    """Accept a FeeSchedule, a {numerator, denominator} mapping or a 2-item sequence."""
    if isinstance(fee, FeeSchedule):
        return fee
    if isinstance(fee, Mapping):
        return FeeSchedule(int(fee["numerator"]), int(fee["denominator"]))
    numerator, denominator = fee
    return FeeSchedule(int(numerator), int(denominator))


class LBP(RuntimeModule):
    """Liquidity bootstrapping pool runtime module.

    State:
        pools: pool key -> PoolRecord
        fee_collected: fee-collector-asset key -> cumulative fee
    """

    domain = DomainTag.LBP

    def __init__(
        self,
        store: StateStore,
        context: BlockContext,
        balances: Balances,
        token_registry: TokenRegistry,
        xyk: XYK,
        config: LBPConfig = DEFAULT_LBP_CONFIG,
    ) -> None:
        super().__init__(store, context)
        self.balances = balances
        self.token_registry = token_registry
        self.xyk = xyk
        self.config = config
        self.pools: StateMap[AccountId, PoolRecord] = StateMap(store, "lbp.pools")
        self.fee_collected: StateMap[str, int] = StateMap(store, "lbp.fee_collected")

    # --- Lookups ---

    def pool_key(self, token_a: TokenId, token_b: TokenId) -> AccountId:
        """Pool account for a pair, in either order.

        Raises:
            TokensNotDistinct: If token_a == token_b
        """
        if token_a == token_b:
            raise TokensNotDistinct()
        return derive_pool_key(canonicalize(token_a, token_b), self.domain)

    def pool_exists(self, pool_key: AccountId) -> bool:
        return self.pools.has(normalize_address(pool_key))

    def fee_collected_exists(self, key: str) -> bool:
        return self.fee_collected.has(key)

    def get_pool(self, token_a: TokenId, token_b: TokenId) -> PoolRecord | None:
        return self.pools.get(self.pool_key(token_a, token_b))

    def get_fee_collected(self, fee_collector: AccountId, asset: TokenId) -> int:
        key = derive_fee_collector_asset_key(fee_collector, asset, self.domain)
        return self.fee_collected.get_or(key, 0)

    def get_reserves(self, token_a: TokenId, token_b: TokenId) -> tuple[int, int]:
        """Pool balances of token_a and token_b, in argument order."""
        key = self.pool_key(token_a, token_b)
        return (
            self.balances.get_balance(token_a, key),
            self.balances.get_balance(token_b, key),
        )

    # --- Validation helpers ---

    def is_valid_weight(self, weight: int) -> bool:
        return self.config.min_weight <= weight < self.config.max_weight

    def is_pool_running(self, record: PoolRecord) -> bool:
        return record.start <= self.height <= record.end

    # --- Pricing ---

    def get_linear_weight(
        self, start_x: int, end_x: int, start_y: int, end_y: int, at: int
    ) -> int:
        return lbp_math.linear_weight(start_x, end_x, start_y, end_y, at)

    def calculate_token_out_amount_from_reserves(
        self,
        reserve_in: int,
        reserve_out: int,
        amount_in: int,
        weight_in: int,
        weight_out: int,
        start: int,
        end: int,
        at: int | None = None,
    ) -> int:
        return lbp_math.calculate_token_out_amount_from_reserves(
            reserve_in,
            reserve_out,
            amount_in,
            weight_in,
            weight_out,
            start,
            end,
            self.height if at is None else at,
            max_weight=self.config.max_weight,
        )

    def calculate_token_out_amount(
        self,
        token_in: TokenId,
        token_out: TokenId,
        amount_in: int,
        record: PoolRecord,
    ) -> int:
        """Gross output of selling amount_in at the current height, before fees."""
        reserve_in, reserve_out = self.get_reserves(token_in, token_out)
        weight_in, weight_out = record.weights_for(token_in)
        return self.calculate_token_out_amount_from_reserves(
            reserve_in,
            reserve_out,
            amount_in,
            weight_in,
            weight_out,
            record.start,
            record.end,
        )

    def calculate_amount_in_from_reserves(
        self, reserve_in: int, reserve_out: int, amount_out: int
    ) -> int:
        return lbp_math.calculate_amount_in_from_reserves(reserve_in, reserve_out, amount_out)

    def calculate_amount_in(self, token_in: TokenId, token_out: TokenId, amount_out: int) -> int:
        """Quote the input for amount_out on the unweighted curve of the pool."""
        reserve_in, reserve_out = self.get_reserves(token_in, token_out)
        return self.calculate_amount_in_from_reserves(reserve_in, reserve_out, amount_out)

    # --- Fees ---

    def calculate_pool_trade_fee(self, amount: int, numerator: int, denominator: int) -> int:
        return lbp_math.calculate_pool_trade_fee(amount, numerator, denominator)

    def is_repay_fee_applied(self, record: PoolRecord) -> bool:
        """True while the collector has received less than the repay target."""
        collected = self.get_fee_collected(record.fee_collector, record.assets.accumulating)
        return collected < record.repay_target

    def calculate_fees(self, record: PoolRecord, amount: int) -> int:
        fee = self.config.repay_fee if self.is_repay_fee_applied(record) else record.fee
        return self.calculate_pool_trade_fee(amount, fee.numerator, fee.denominator)

    # --- Entry points ---

    def create_pool(
        self,
        creator: AccountId,
        token_a: TokenId,
        token_b: TokenId,
        amount_a: int,
        amount_b: int,
        start: int,
        end: int,
        initial_weight: int,
        final_weight: int,
        fee: FeeSchedule,
        fee_collector: AccountId,
        repay_target: int,
    ) -> PoolRecord:
        """Create a pool selling token_b against token_a.

        token_a is the accumulating asset and token_b the sold asset, in the
        order given; the pool key itself does not depend on that order.

        Returns:
            The stored pool record

        Raises:
            TokensNotDistinct, PoolAlreadyExists, InvalidAddress,
            FeeCollectorAssetInUse, InvalidBlockRange, MaxSaleDurationExceeded, InvalidWeight,
            InvalidFee, InsufficientBalance, LiquidityTokenExists
        """
        if token_a == token_b:
            raise TokensNotDistinct()
        key = self.pool_key(token_a, token_b)
        if self.pool_exists(key):
            raise PoolAlreadyExists()

        fee_collector = normalize_address(fee_collector)
        if not is_valid_address(fee_collector):
            raise InvalidAddress(f"Invalid fee collector: {fee_collector}")
        fee_key = derive_fee_collector_asset_key(fee_collector, token_a, self.domain)
        if self.fee_collected_exists(fee_key):
            raise FeeCollectorAssetInUse()

        if not self.height < start:
            raise InvalidBlockRange(f"Sale must start after block {self.height}, got {start}")
        if not start < end:
            raise InvalidBlockRange(f"Sale must end after it starts: start={start}, end={end}")
        if (S(end) - start) > self.config.max_sale_duration:
            raise MaxSaleDurationExceeded()
        if not self.is_valid_weight(initial_weight):
            raise InvalidWeight(f"Invalid initial weight: {initial_weight}")
        if not self.is_valid_weight(final_weight):
            raise InvalidWeight(f"Invalid final weight: {final_weight}")
        if fee.numerator <= 0:
            raise InvalidFee()

        self.balances.transfer(token_a, creator, key, amount_a)
        self.balances.transfer(token_b, creator, key, amount_b)

        _, lp_token_id = self.token_registry.register_pair(token_a, token_b, self.domain)
        initial_supply = S(amount_a).max(amount_b).value
        self.balances.mint_and_increment_supply(lp_token_id, creator, initial_supply)

        record = PoolRecord(
            owner=normalize_address(creator),
            start=start,
            end=end,
            assets=AssetPair(accumulating=token_a, sold=token_b),
            initial_weight=initial_weight,
            final_weight=final_weight,
            fee=fee,
            fee_collector=fee_collector,
            repay_target=repay_target,
        )
        self.pools.set(key, record)
        self.fee_collected.set(fee_key, 0)

        logger.info(
            "lbp_pool_created",
            pool=short(key),
            owner=short(record.owner),
            accumulating=token_a,
            sold=token_b,
            amount_a=amount_a,
            amount_b=amount_b,
            start=start,
            end=end,
            lp_supply=initial_supply,
        )
        return record

    def sell_path(
        self,
        seller: AccountId,
        token_in: TokenId,
        token_out: TokenId,
        amount_in: int,
        amount_out_min_limit: int,
    ) -> int:
        """Sell amount_in of token_in to the pool for token_out.

        The fee is charged in the accumulating asset, and the seller always
        receives the fee-bearing amount minus the fee:
        - selling the accumulating asset: the fee is computed on amount_in
          and paid by the seller to the collector; amount_out is
          amount_in - fee
        - selling the sold asset: the fee is computed on the gross output
          and paid by the pool; amount_out is gross output - fee

        Returns:
            Amount of token_out received by the seller

        Raises:
            PoolDoesNotExist, SaleIsNotRunning, AmountOutInsufficient,
            InsufficientBalance, DivisionByZero
        """
        key = self.pool_key(token_in, token_out)
        record = self.pools.get(key)
        if record is None:
            raise PoolDoesNotExist()
        if not self.is_pool_running(record):
            raise SaleIsNotRunning(
                f"Sale runs from {record.start} to {record.end}, current block {self.height}"
            )

        gross_out = self.calculate_token_out_amount(token_in, token_out, amount_in, record)

        fee_asset = record.assets.accumulating
        if token_in == fee_asset:
            fee = self.calculate_fees(record, amount_in)
            fee_payer = seller
            amount_out = (S(amount_in) - fee).value
        else:
            fee = self.calculate_fees(record, gross_out)
            fee_payer = key
            amount_out = (S(gross_out) - fee).value

        if amount_out < amount_out_min_limit:
            raise AmountOutInsufficient(
                f"Amount out {amount_out} is below the minimum {amount_out_min_limit}"
            )

        fee_key = derive_fee_collector_asset_key(record.fee_collector, fee_asset, self.domain)
        self.fee_collected.set(fee_key, (S(self.fee_collected.get_or(fee_key, 0)) + fee).value)

        self.balances.transfer(fee_asset, fee_payer, record.fee_collector, fee)
        self.balances.transfer(token_in, seller, key, amount_in)
        self.balances.transfer(token_out, key, seller, amount_out)

        logger.info(
            "lbp_sale",
            pool=short(key),
            seller=short(seller),
            token_in=token_in,
            token_out=token_out,
            amount_in=amount_in,
            gross_out=gross_out,
            amount_out=amount_out,
            fee=fee,
            fee_asset=fee_asset,
            height=self.height,
        )
        return amount_out

    def migrate_pool(self, caller: AccountId, token_a: TokenId, token_b: TokenId) -> int:
        """Move an ended pool's reserves into the XYK pool for the same pair.

        The XYK pool is created if absent, or deposited into otherwise. The
        LBP pool account is the liquidity provider and the LBP pool owner
        receives the XYK liquidity tokens. Any account may migrate.

        Returns:
            XYK liquidity tokens minted to the pool owner

        Raises:
            PoolDoesNotExist, PoolNotEnded, PoolEmpty
        """
        key = self.pool_key(token_a, token_b)
        record = self.pools.get(key)
        if record is None:
            raise PoolDoesNotExist()
        if not self.height > record.end:
            raise PoolNotEnded(f"Pool ends at block {record.end}, current block {self.height}")

        accumulating, sold = record.assets.accumulating, record.assets.sold
        reserve_acc = self.balances.get_balance(accumulating, key)
        reserve_sold = self.balances.get_balance(sold, key)
        if reserve_acc == 0 or reserve_sold == 0:
            raise PoolEmpty()

        # Deposit path of the XYK contract; reachable when XYK created the pool with from_lbp=True
        if self.xyk.pool_exists(accumulating, sold):
            minted = self.xyk.add_liquidity(
                key, accumulating, sold, reserve_acc, reserve_sold, lp_recipient=record.owner
            )
        else:
            xyk_pool = self.xyk.create_pool(
                key,
                accumulating,
                sold,
                reserve_acc,
                reserve_sold,
                lp_recipient=record.owner,
                from_lbp=True,
            )
            minted = self.balances.get_total_supply(xyk_pool.lp_token_id)

        logger.info(
            "lbp_pool_migrated",
            pool=short(key),
            caller=short(caller),
            xyk_pool=short(self.xyk.pool_key(accumulating, sold)),
            amount_accumulating=reserve_acc,
            amount_sold=reserve_sold,
            lp_minted=minted,
        )
        return minted

    # --- Signed runtime methods ---

    @runtime_method
    def create_pool_signed(
        self,
        token_a: TokenId,
        token_b: TokenId,
        amount_a: int,
        amount_b: int,
        start: int,
        end: int,
        initial_weight: int,
        final_weight: int,
        fee: FeeSchedule | tuple[int, int],
        fee_collector: AccountId,
        repay_target: int,
    ) -> None:
        self.create_pool(
            self.context.transaction_sender,
            token_a,
            token_b,
            amount_a,
            amount_b,
            start,
            end,
            initial_weight,
            final_weight,
            as_fee_schedule(fee),
            fee_collector,
            repay_target,
        )

    @runtime_method
    def sell_path_signed(
        self,
        token_in: TokenId,
        token_out: TokenId,
        amount_in: int,
        amount_out_min_limit: int,
    ) -> None:
        self.sell_path(
            self.context.transaction_sender, token_in, token_out, amount_in, amount_out_min_limit
        )

    @runtime_method
    def migrate_pool_signed(self, token_a: TokenId, token_b: TokenId) -> None:
        self.migrate_pool(self.context.transaction_sender, token_a, token_b)
