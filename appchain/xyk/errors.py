"""XYK pool error classes."""

from appchain.errors import AppChainError


class AmountIsZero(AppChainError):
    """Both deposit amounts must be positive."""

    code = "AmountIsZero"
    message = "Amount must be greater than zero"


class ReserveIsZero(AppChainError):
    """A deposit needs existing reserves to price the LP mint."""

    code = "ReserveIsZero"
    message = "Pool reserve is zero"
