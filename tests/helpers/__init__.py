"""Test helpers module for shared test utilities.

This module consolidates common test utilities to reduce duplication:
- constants: Accounts, tokens and default pool parameters
- factories: Chain, pool and transaction factory functions
"""

from tests.helpers.constants import (
    ALICE,
    BOB,
    CAROL,
    END,
    FEE,
    FINAL_WEIGHT,
    INITIAL_LIQUIDITY,
    INITIAL_WEIGHT,
    REPAY_TARGET,
    START,
    TOKEN_A,
    TOKEN_B,
    TOKEN_C,
)
from tests.helpers.factories import advance_to, create_lbp_pool, fund, make_chain, submit

__all__ = [
    # Constants
    "ALICE",
    "BOB",
    "CAROL",
    "TOKEN_A",
    "TOKEN_B",
    "TOKEN_C",
    "INITIAL_LIQUIDITY",
    "START",
    "END",
    "INITIAL_WEIGHT",
    "FINAL_WEIGHT",
    "FEE",
    "REPAY_TARGET",
    # Factories
    "make_chain",
    "fund",
    "advance_to",
    "create_lbp_pool",
    "submit",
]
