"""Factory functions for building chains, pools and transactions in tests.

Usage:
    from tests.helpers import make_chain, create_lbp_pool

    chain = make_chain()
    create_lbp_pool(chain)

Setup helpers write outside of any state transaction, so their writes
commit directly. Use submit() to run a call the way a block would.
"""

from typing import Any

from appchain.lbp.pool import FeeSchedule, PoolRecord
from appchain.runtime import AppChain, TransactionReceipt
from tests.helpers.constants import (
    ALICE,
    BOB,
    END,
    FEE,
    FINAL_WEIGHT,
    INITIAL_LIQUIDITY,
    INITIAL_WEIGHT,
    REPAY_TARGET,
    START,
    TOKEN_A,
    TOKEN_B,
)


def make_chain(start_height: int = 0) -> AppChain:
    return AppChain(start_height=start_height)


def fund(chain: AppChain, account: str, token_id: int, amount: int) -> None:
    """Mint amount of token_id to account."""
    chain.balances.mint_and_increment_supply(token_id, account, amount)


def advance_to(chain: AppChain, height: int) -> None:
    """Move the block clock so the next block is produced at height."""
    chain.context.height = height


def create_lbp_pool(
    chain: AppChain,
    creator: str = ALICE,
    token_a: int = TOKEN_A,
    token_b: int = TOKEN_B,
    amount_a: int = INITIAL_LIQUIDITY,
    amount_b: int = INITIAL_LIQUIDITY,
    start: int = START,
    end: int = END,
    initial_weight: int = INITIAL_WEIGHT,
    final_weight: int = FINAL_WEIGHT,
    fee: FeeSchedule = FEE,
    fee_collector: str = BOB,
    repay_target: int = REPAY_TARGET,
    funding: int | None = None,
) -> PoolRecord:
    """Fund the creator and create an LBP pool with the default test parameters.

    Args:
        funding: Amount of each token minted to the creator first
            (default: 2x the deposited amount, like the sale scenarios use)
    """
    fund(chain, creator, token_a, 2 * amount_a if funding is None else funding)
    fund(chain, creator, token_b, 2 * amount_b if funding is None else funding)
    return chain.lbp.create_pool(
        creator,
        token_a,
        token_b,
        amount_a,
        amount_b,
        start,
        end,
        initial_weight,
        final_weight,
        fee,
        fee_collector,
        repay_target,
    )


def submit(chain: AppChain, sender: str, module: str, method: str, **args: Any) -> TransactionReceipt:
    """Queue one transaction, produce a block and return its receipt."""
    chain.transaction(sender, module, method, **args)
    block = chain.produce_block()
    return block.transactions[-1]
