"""LBP error classes.

Codes match the error identifiers recorded on failed transaction receipts.
"""

from appchain.errors import AppChainError

# --- Creation-time validation ---


class FeeCollectorAssetInUse(AppChainError):
    """The fee collector already collects fees in this asset for another pool."""

    code = "FeeCollectorAssetInUse"
    message = "Not more than one fee collector per asset id"


class InvalidBlockRange(AppChainError):
    """Sale must start in the future and end after it starts."""

    code = "InvalidBlockRange"
    message = "Invalid block range"


class MaxSaleDurationExceeded(AppChainError):
    code = "MaxSaleDurationExceeded"
    message = "Duration of the LBP sale should not exceed 2 weeks"


class InvalidWeight(AppChainError):
    """Weights must lie in [MAX_WEIGHT / 50, MAX_WEIGHT)."""

    code = "InvalidWeight"
    message = "Invalid weight"


class InvalidFee(AppChainError):
    code = "InvalidFee"
    message = "Invalid fee amount"


# --- Trading ---


class SaleIsNotRunning(AppChainError):
    """Current height is outside the pool's sale window."""

    code = "SaleIsNotRunning"
    message = "Sale is not running"


class AmountOutInsufficient(AppChainError):
    """Net output is below the seller's minimum."""

    code = "AmountOutInsufficient"
    message = "Amount out is insufficient"


# --- Migration ---


class PoolNotEnded(AppChainError):
    code = "PoolNotEnded"
    message = "Pool has not ended yet"


class PoolEmpty(AppChainError):
    """Pool has no liquidity left to migrate."""

    code = "PoolEmpty"
    message = "Pool has no remaining liquidity"
