"""Balance ledger: per-(token, account) balances with supply tracking.

Implements the ledger contract the pool modules rely on:
- transfer(token_id, from_, to, amount) -> raises InsufficientBalance
- mint_and_increment_supply(token_id, to, amount)
- get_balance(token_id, account) -> 0 if absent

Balances never go negative and transfers conserve total supply.
"""

from __future__ import annotations

import structlog

from appchain.errors import InsufficientBalance, InvalidAmount
from appchain.models.types import AccountId, TokenId, normalize_address, short
from appchain.module import BlockContext, RuntimeModule, runtime_method
from appchain.safe_int import S
from appchain.state import StateMap, StateStore

logger = structlog.get_logger()


class Balances(RuntimeModule):
    """Ledger module holding every token balance on the chain."""

    def __init__(self, store: StateStore, context: BlockContext) -> None:
        super().__init__(store, context)
        self.balances: StateMap[tuple[TokenId, AccountId], int] = StateMap(store, "balances")
        self.total_supply: StateMap[TokenId, int] = StateMap(store, "total_supply")

    def get_balance(self, token_id: TokenId, account: AccountId) -> int:
        return self.balances.get_or((token_id, normalize_address(account)), 0)

    def get_total_supply(self, token_id: TokenId) -> int:
        return self.total_supply.get_or(token_id, 0)

    def _set_balance(self, token_id: TokenId, account: AccountId, amount: int) -> None:
        self.balances.set((token_id, normalize_address(account)), amount)

    def transfer(self, token_id: TokenId, from_: AccountId, to: AccountId, amount: int) -> None:
        """Move amount of token_id between two accounts.

        Raises:
            InsufficientBalance: If from_ holds less than amount
            InvalidAmount: If amount is negative
        """
        if amount < 0:
            raise InvalidAmount(f"Transfer amount must be non-negative: {amount}")
        if amount == 0:
            return

        from_balance = self.get_balance(token_id, from_)
        if from_balance < amount:
            raise InsufficientBalance(
                f"Insufficient balance: {short(from_)} holds {from_balance} of token "
                f"{token_id}, needs {amount}"
            )

        if normalize_address(from_) == normalize_address(to):
            return

        self._set_balance(token_id, from_, (S(from_balance) - amount).value)
        self._set_balance(token_id, to, (S(self.get_balance(token_id, to)) + amount).value)

    def mint_and_increment_supply(self, token_id: TokenId, to: AccountId, amount: int) -> None:
        """Credit newly created tokens to an account and grow total supply.

        Raises:
            InvalidAmount: If amount is negative
            Uint256Overflow: If total supply would exceed 2^256-1
        """
        if amount < 0:
            raise InvalidAmount(f"Mint amount must be non-negative: {amount}")

        supply = (S(self.get_total_supply(token_id)) + amount).to_uint256()
        self._set_balance(token_id, to, (S(self.get_balance(token_id, to)) + amount).value)
        self.total_supply.set(token_id, supply)
        logger.debug("minted", token_id=token_id, to=short(to), amount=amount)

    @runtime_method
    def drip(self, token_id: TokenId, amount: int) -> None:
        """Faucet: mint amount of token_id to the transaction sender."""
        self.mint_and_increment_supply(token_id, self.context.transaction_sender, amount)
