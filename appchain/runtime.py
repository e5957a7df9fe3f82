"""Deterministic execution environment for the runtime modules.

AppChain wires the modules to one shared StateStore and BlockContext and
executes signed transactions in blocks:

    chain = AppChain()
    chain.transaction(alice, "balances", "drip", token_id=0, amount=1_000)
    block = chain.produce_block()
    assert block.transactions[0].status

Transactions are applied one at a time in admission order, each inside
its own state transaction. A transaction that raises a known runtime
error is recorded as failed with that error's code and leaves no writes
behind; the block carries on with the next one.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, get_type_hints

import structlog
from pydantic import TypeAdapter, ValidationError

from appchain.errors import (
    AppChainError,
    InvalidAddress,
    InvalidArguments,
    UnknownRuntimeMethod,
)
from appchain.lbp import DEFAULT_LBP_CONFIG, LBP, LBPConfig
from appchain.ledger import Balances
from appchain.models.types import AccountId, is_valid_address, normalize_address, short
from appchain.module import BlockContext, RuntimeModule, is_runtime_method
from appchain.safe_int import SafeIntError
from appchain.state import StateStore
from appchain.token_registry import TokenRegistry
from appchain.xyk import XYK

logger = structlog.get_logger()


@lru_cache(maxsize=None)
def _adapter(annotation: Any) -> TypeAdapter[Any]:
    return TypeAdapter(annotation)


@dataclass(frozen=True)
class Transaction:
    """A signed call to a runtime method."""

    sender: AccountId
    module: str
    method: str
    args: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class TransactionReceipt:
    """Outcome of one transaction.

    Attributes:
        transaction: The executed transaction
        status: True if all of its writes were committed
        error: Error code on failure (e.g. "SaleIsNotRunning"), else None
        status_message: Human-readable failure message, else None
    """

    transaction: Transaction
    status: bool
    error: str | None = None
    status_message: str | None = None


@dataclass(frozen=True)
class Block:
    height: int
    transactions: list[TransactionReceipt]


class AppChain:
    """In-process appchain: state, block clock, modules and block production."""

    def __init__(self, start_height: int = 0, lbp_config: LBPConfig = DEFAULT_LBP_CONFIG) -> None:
        self.store = StateStore()
        self.context = BlockContext(height=start_height)

        self.balances = Balances(self.store, self.context)
        self.token_registry = TokenRegistry(self.store, self.context)
        self.xyk = XYK(self.store, self.context, self.balances, self.token_registry)
        self.lbp = LBP(
            self.store,
            self.context,
            self.balances,
            self.token_registry,
            self.xyk,
            config=lbp_config,
        )

        self.modules: dict[str, RuntimeModule] = {
            "balances": self.balances,
            "token_registry": self.token_registry,
            "lbp": self.lbp,
            "xyk": self.xyk,
        }
        self.pending: list[Transaction] = []
        self.blocks: list[Block] = []

    @property
    def height(self) -> int:
        """Height of the next block to be produced."""
        return self.context.height

    def transaction(self, sender: AccountId, module: str, method: str, **args: Any) -> Transaction:
        """Queue a signed call for the next block.

        Arguments are validated against the method's type hints and stored
        coerced (e.g. the decimal string "100" for an int becomes 100), so
        a queued transaction never fails on argument types.

        Raises:
            UnknownRuntimeMethod: If module.method is not a runtime method
            InvalidArguments: If args do not fit the method signature
            InvalidAddress: If sender is not an account address
        """
        fn = self._resolve(module, method)
        coerced = self._coerce_args(fn, f"{module}.{method}", args)
        if not isinstance(sender, str) or not is_valid_address(normalize_address(sender)):
            raise InvalidAddress(f"Invalid sender: {sender}")

        tx = Transaction(
            sender=normalize_address(sender),
            module=module,
            method=method,
            args=coerced,
        )
        self.pending.append(tx)
        return tx

    def _resolve(self, module: str, method: str) -> Any:
        target = self.modules.get(module)
        fn = getattr(target, method, None) if target is not None else None
        if not is_runtime_method(fn):
            raise UnknownRuntimeMethod(f"Unknown runtime method: {module}.{method}")
        return fn

    @staticmethod
    def _coerce_args(fn: Any, call: str, args: dict[str, Any]) -> dict[str, Any]:
        try:
            bound = inspect.signature(fn).bind(**args)
        except TypeError as err:
            raise InvalidArguments(f"{call}: {err}") from err

        hints = get_type_hints(fn)
        coerced = {}
        for name, value in bound.arguments.items():
            try:
                coerced[name] = _adapter(hints.get(name, Any)).validate_python(value)
            except ValidationError as err:
                reason = err.errors()[0]["msg"]
                raise InvalidArguments(f"{call}: invalid {name}={value!r}: {reason}") from err
        return coerced

    def _execute(self, tx: Transaction) -> TransactionReceipt:
        fn = self._resolve(tx.module, tx.method)
        self.context.sender = tx.sender
        try:
            with self.store.atomic():
                fn(**tx.args)
        except (AppChainError, SafeIntError) as err:
            logger.warning(
                "transaction_failed",
                height=self.height,
                sender=short(tx.sender),
                call=f"{tx.module}.{tx.method}",
                error=err.code,
                message=str(err),
            )
            return TransactionReceipt(tx, status=False, error=err.code, status_message=str(err))
        except Exception:
            logger.exception(
                "transaction_error",
                height=self.height,
                sender=short(tx.sender),
                call=f"{tx.module}.{tx.method}",
            )
            raise
        finally:
            self.context.sender = None
        return TransactionReceipt(tx, status=True)

    def produce_block(self) -> Block:
        """Execute every queued transaction at the current height.

        The height advances by one after the block is produced, whether
        or not any of its transactions succeeded.
        """
        pending, self.pending = self.pending, []
        receipts = [self._execute(tx) for tx in pending]
        block = Block(height=self.height, transactions=receipts)
        self.blocks.append(block)

        logger.info(
            "block_produced",
            height=block.height,
            transactions=len(receipts),
            failed=sum(1 for r in receipts if not r.status),
        )
        self.context.height += 1
        return block

    def produce_blocks(self, count: int) -> list[Block]:
        return [self.produce_block() for _ in range(count)]


_default_chain: AppChain | None = None


def get_default_chain() -> AppChain:
    """Process-wide chain used by the HTTP node."""
    global _default_chain
    if _default_chain is None:
        _default_chain = AppChain()
    return _default_chain


def set_default_chain(chain: AppChain | None) -> None:
    global _default_chain
    _default_chain = chain
