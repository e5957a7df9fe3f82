"""Base class and helpers for runtime modules.

A runtime module is a component of the appchain that owns a slice of the
shared state and exposes signed entry points. Entry points are marked
with @runtime_method; only those can be the target of a transaction.
The block context tells a module the current block height and, while a
transaction is executing, who signed it.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeVar

if TYPE_CHECKING:
    from appchain.state import StateStore

F = TypeVar("F", bound=Callable[..., Any])

RUNTIME_METHOD_ATTR = "__runtime_method__"


def runtime_method(fn: F) -> F:
    """Mark a module method as callable from a signed transaction."""
    setattr(fn, RUNTIME_METHOD_ATTR, True)
    return fn


def is_runtime_method(fn: object) -> bool:
    return callable(fn) and getattr(fn, RUNTIME_METHOD_ATTR, False) is True


@dataclass
class BlockContext:
    """Execution environment seen by runtime modules.

    Attributes:
        height: Height of the block being produced (non-decreasing)
        sender: Verified signer of the executing transaction, or None
            outside of transaction execution
    """

    height: int = 0
    sender: str | None = None

    @property
    def transaction_sender(self) -> str:
        """Signer of the executing transaction.

        Raises:
            RuntimeError: If no transaction is executing
        """
        if self.sender is None:
            raise RuntimeError("no transaction is executing")
        return self.sender


class RuntimeModule:
    """Common wiring for modules: shared state store and block context."""

    def __init__(self, store: StateStore, context: BlockContext) -> None:
        self.store = store
        self.context = context

    @property
    def height(self) -> int:
        return self.context.height
