"""Global registry of liquidity token ids.

Every liquidity token minted by either AMM type is recorded here under an
incrementing index. The registry exists only for duplicate detection: a
pool creation path registers its liquidity token before minting, so a
token id minted by one AMM type is visible to the other.
"""

from __future__ import annotations

import structlog

from appchain.errors import LiquidityTokenExists
from appchain.models.types import TokenId
from appchain.module import BlockContext, RuntimeModule
from appchain.pairs import DomainTag, canonicalize, derive_liquidity_token_id
from appchain.state import State, StateMap, StateStore

logger = structlog.get_logger()


class TokenRegistry(RuntimeModule):
    """Incrementing index -> token id mapping, plus its inverse."""

    def __init__(self, store: StateStore, context: BlockContext) -> None:
        super().__init__(store, context)
        self._last_index: State[int] = State(store, "token_registry.last_index", 0)
        self._by_index: StateMap[int, TokenId] = StateMap(store, "token_registry.by_index")
        self._by_token: StateMap[TokenId, int] = StateMap(store, "token_registry.by_token")

    @property
    def last_index(self) -> int:
        """Number of tokens registered so far."""
        return self._last_index.get()

    def exists(self, token_id: TokenId) -> bool:
        return self._by_token.has(token_id)

    def token_id_at(self, index: int) -> TokenId | None:
        return self._by_index.get(index)

    def index_of(self, token_id: TokenId) -> int | None:
        return self._by_token.get(token_id)

    def register(self, token_id: TokenId) -> int:
        """Append token_id at the next index and return that index.

        Raises:
            LiquidityTokenExists: If token_id is already registered
        """
        if self.exists(token_id):
            raise LiquidityTokenExists(f"Liquidity token id already exists: {token_id:#x}")

        index = self._last_index.get()
        self._by_index.set(index, token_id)
        self._by_token.set(token_id, index)
        self._last_index.set(index + 1)

        logger.debug("liquidity_token_registered", index=index, token_id=f"{token_id:#x}"[:18])
        return index

    def register_pair(
        self,
        token_a: TokenId,
        token_b: TokenId,
        domain: DomainTag,
        *,
        check_lbp: bool = True,
    ) -> tuple[int, TokenId]:
        """Register the liquidity token of a new pool for a pair.

        The liquidity token ids of both AMM types are derived for the pair,
        and creation is refused if either is already known, so one pair
        can never back two live pool types at once. check_lbp=False skips
        only the LBP-domain check; the XYK migration path uses it because
        the LBP pool being migrated is the pair's predecessor.

        Returns:
            (index, liquidity_token_id) for the registered id

        Raises:
            LiquidityTokenExists: On a duplicate or cross-type collision
        """
        pair = canonicalize(token_a, token_b)
        own_id = derive_liquidity_token_id(pair, domain)

        for other in DomainTag:
            if other is domain:
                continue
            if other is DomainTag.LBP and not check_lbp:
                continue
            if self.exists(derive_liquidity_token_id(pair, other)):
                raise LiquidityTokenExists(
                    f"Pair ({pair.token_a}, {pair.token_b}) already has a "
                    f"{other.value} liquidity token"
                )

        return self.register(own_id), own_id
