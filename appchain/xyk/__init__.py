"""Constant-product pool, the migration target of ended LBP pools."""

from .engine import XYK
from .errors import AmountIsZero, ReserveIsZero
from .pool import XYKPool

__all__ = [
    "XYK",
    "XYKPool",
    "AmountIsZero",
    "ReserveIsZero",
]
