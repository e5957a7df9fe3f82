"""Constant-product (x*y=k) pool: creation and liquidity deposit.

This is the permanent pool type an LBP migrates into. Only the parts the
migration needs are implemented: creating a pool and depositing into an
existing one. Deposits follow the Uniswap V2 mint rule:

    lp_minted = min(amount_a * supply // reserve_a, amount_b * supply // reserve_b)

Both amounts are always transferred in full; any off-ratio excess stays
in the pool and accrues to existing LP holders.
"""

from __future__ import annotations

import structlog

from appchain.errors import PoolAlreadyExists, PoolDoesNotExist, TokensNotDistinct
from appchain.ledger import Balances
from appchain.models.types import AccountId, TokenId, normalize_address, short
from appchain.module import BlockContext, RuntimeModule, runtime_method
from appchain.pairs import (
    CanonicalTokenPair,
    DomainTag,
    canonicalize,
    derive_pool_key,
)
from appchain.safe_int import S
from appchain.state import StateMap, StateStore
from appchain.token_registry import TokenRegistry
from appchain.xyk.errors import AmountIsZero, ReserveIsZero
from appchain.xyk.pool import XYKPool

logger = structlog.get_logger()


class XYK(RuntimeModule):
    """XYK runtime module."""

    domain = DomainTag.XYK

    def __init__(
        self,
        store: StateStore,
        context: BlockContext,
        balances: Balances,
        token_registry: TokenRegistry,
    ) -> None:
        super().__init__(store, context)
        self.balances = balances
        self.token_registry = token_registry
        self.pools: StateMap[AccountId, XYKPool] = StateMap(store, "xyk.pools")

    def _pair(self, token_a: TokenId, token_b: TokenId) -> CanonicalTokenPair:
        if token_a == token_b:
            raise TokensNotDistinct()
        return canonicalize(token_a, token_b)

    def pool_key(self, token_a: TokenId, token_b: TokenId) -> AccountId:
        return derive_pool_key(self._pair(token_a, token_b), self.domain)

    def pool_exists(self, token_a: TokenId, token_b: TokenId) -> bool:
        return self.pools.has(self.pool_key(token_a, token_b))

    def get_pool(self, token_a: TokenId, token_b: TokenId) -> XYKPool | None:
        return self.pools.get(self.pool_key(token_a, token_b))

    def get_reserves(self, token_a: TokenId, token_b: TokenId) -> tuple[int, int]:
        """Pool balances of token_a and token_b, in argument order."""
        key = self.pool_key(token_a, token_b)
        return (
            self.balances.get_balance(token_a, key),
            self.balances.get_balance(token_b, key),
        )

    def create_pool(
        self,
        provider: AccountId,
        token_a: TokenId,
        token_b: TokenId,
        amount_a: int,
        amount_b: int,
        *,
        lp_recipient: AccountId | None = None,
        from_lbp: bool = False,
    ) -> XYKPool:
        """Create a pool seeded with amount_a / amount_b from provider.

        Args:
            provider: Account the reserves are transferred from
            lp_recipient: Account receiving the initial LP supply (default provider)
            from_lbp: Creation on behalf of an ended LBP pool for the same
                pair; the LBP liquidity token is then not a collision

        Returns:
            The stored pool record

        Raises:
            TokensNotDistinct, PoolAlreadyExists, AmountIsZero,
            LiquidityTokenExists, InsufficientBalance
        """
        pair = self._pair(token_a, token_b)
        key = derive_pool_key(pair, self.domain)
        if self.pools.has(key):
            raise PoolAlreadyExists()
        if amount_a <= 0 or amount_b <= 0:
            raise AmountIsZero()

        recipient = normalize_address(lp_recipient or provider)

        self.balances.transfer(token_a, provider, key, amount_a)
        self.balances.transfer(token_b, provider, key, amount_b)

        _, lp_token_id = self.token_registry.register_pair(
            token_a, token_b, self.domain, check_lbp=not from_lbp
        )
        initial_supply = S(amount_a).max(amount_b).value
        self.balances.mint_and_increment_supply(lp_token_id, recipient, initial_supply)

        pool = XYKPool(owner=recipient, pair=pair, account=key, lp_token_id=lp_token_id)
        self.pools.set(key, pool)

        logger.info(
            "xyk_pool_created",
            pool=short(key),
            token_a=token_a,
            token_b=token_b,
            amount_a=amount_a,
            amount_b=amount_b,
            lp_supply=initial_supply,
            from_lbp=from_lbp,
        )
        return pool

    def add_liquidity(
        self,
        provider: AccountId,
        token_a: TokenId,
        token_b: TokenId,
        amount_a: int,
        amount_b: int,
        *,
        lp_recipient: AccountId | None = None,
    ) -> int:
        """Deposit into an existing pool and mint LP tokens pro rata.

        Returns:
            LP tokens minted

        Raises:
            PoolDoesNotExist, AmountIsZero, ReserveIsZero, InsufficientBalance
        """
        pool = self.get_pool(token_a, token_b)
        if pool is None:
            raise PoolDoesNotExist()
        if amount_a <= 0 or amount_b <= 0:
            raise AmountIsZero()

        reserve_a, reserve_b = self.get_reserves(token_a, token_b)
        if reserve_a == 0 or reserve_b == 0:
            raise ReserveIsZero()

        supply = self.balances.get_total_supply(pool.lp_token_id)
        minted = (
            S(amount_a).mul_div(supply, reserve_a).min(S(amount_b).mul_div(supply, reserve_b))
        ).value

        self.balances.transfer(token_a, provider, pool.account, amount_a)
        self.balances.transfer(token_b, provider, pool.account, amount_b)
        self.balances.mint_and_increment_supply(
            pool.lp_token_id, lp_recipient or provider, minted
        )

        logger.info(
            "xyk_liquidity_added",
            pool=short(pool.account),
            amount_a=amount_a,
            amount_b=amount_b,
            lp_minted=minted,
        )
        return minted

    @runtime_method
    def create_pool_signed(
        self, token_a: TokenId, token_b: TokenId, amount_a: int, amount_b: int
    ) -> None:
        self.create_pool(self.context.transaction_sender, token_a, token_b, amount_a, amount_b)

    @runtime_method
    def add_liquidity_signed(
        self, token_a: TokenId, token_b: TokenId, amount_a: int, amount_b: int
    ) -> None:
        self.add_liquidity(self.context.transaction_sender, token_a, token_b, amount_a, amount_b)
