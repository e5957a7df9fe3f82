"""Liquidity bootstrapping pool.

A time-bounded pool selling one asset against an accumulating asset,
with weights moving linearly from an initial to a final value.
"""

# Runtime module
from .engine import LBP, as_fee_schedule

# Configuration
from .config import DEFAULT_LBP_CONFIG, LBPConfig

# Errors
from .errors import (
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

# Math
from .math import (
    calculate_amount_in_from_reserves,
    calculate_pool_trade_fee,
    calculate_token_out_amount_from_reserves,
    linear_weight,
)

# Pool store records
from .pool import REPAY_FEE, AssetPair, FeeSchedule, PoolRecord

__all__ = [
    # Runtime module
    "LBP",
    "as_fee_schedule",
    # Configuration
    "LBPConfig",
    "DEFAULT_LBP_CONFIG",
    # Errors
    "AmountOutInsufficient",
    "FeeCollectorAssetInUse",
    "InvalidBlockRange",
    "InvalidFee",
    "InvalidWeight",
    "MaxSaleDurationExceeded",
    "PoolEmpty",
    "PoolNotEnded",
    "SaleIsNotRunning",
    # Math
    "calculate_amount_in_from_reserves",
    "calculate_pool_trade_fee",
    "calculate_token_out_amount_from_reserves",
    "linear_weight",
    # Pool store records
    "AssetPair",
    "FeeSchedule",
    "PoolRecord",
    "REPAY_FEE",
]
