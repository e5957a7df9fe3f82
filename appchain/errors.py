"""Runtime error classes.

Every failure a transaction can hit is an AppChainError subclass. The
class-level ``code`` is the stable identifier recorded on a failed
transaction receipt; ``message`` is the default human-readable text.
Module-specific errors live next to their module (see appchain.lbp.errors
and appchain.xyk.errors) and derive from the classes here.
"""

from __future__ import annotations

from typing import ClassVar


class AppChainError(Exception):
    """Base error for runtime operations."""

    code: ClassVar[str] = "AppChainError"
    message: ClassVar[str] = "Runtime error"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.message)


class UnknownRuntimeMethod(AppChainError):
    """Transaction targets a module or method that is not a runtime method."""

    code = "UnknownRuntimeMethod"
    message = "Unknown runtime method"


class InvalidArguments(AppChainError):
    """Transaction arguments do not match the runtime method signature."""

    code = "InvalidArguments"
    message = "Invalid transaction arguments"


class InvalidAddress(AppChainError):
    code = "InvalidAddress"
    message = "Invalid account address"


# --- Pairs and pools (shared by both AMM types) ---


class InvalidPair(AppChainError):
    """A canonical pair needs two different tokens."""

    code = "InvalidPair"
    message = "Token pair must contain two different tokens"


class TokensNotDistinct(InvalidPair):
    code = "TokensNotDistinct"
    message = "Tokens must be different"


class PoolAlreadyExists(AppChainError):
    code = "PoolAlreadyExists"
    message = "Pool already exists"


class PoolDoesNotExist(AppChainError):
    code = "PoolDoesNotExist"
    message = "Pool does not exist"


# --- Ledger ---


class InsufficientBalance(AppChainError):
    code = "InsufficientBalance"
    message = "Insufficient balance"


class InvalidAmount(AppChainError):
    """Amounts are unsigned."""

    code = "InvalidAmount"
    message = "Amount must be non-negative"


# --- Token registry ---


class LiquidityTokenExists(AppChainError):
    """The liquidity token id is already registered by one of the AMM types."""

    code = "LiquidityTokenExists"
    message = "Liquidity token id already exists"
