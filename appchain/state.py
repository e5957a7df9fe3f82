"""Versioned key-value state shared by all runtime modules.

Committed state is a set of namespaces, each a plain dict. While a
transaction runs, writes go to an overlay; reads see the overlay first.
The overlay is merged into committed state only when the transaction
body returns normally, so a failure anywhere leaves no partial writes.

Note: dict iteration order is not part of the state. Nothing in the
runtime iterates a namespace to make a decision.
"""

from __future__ import annotations

from collections.abc import Hashable, Iterator
from contextlib import contextmanager
from typing import Any, Generic, TypeVar

import structlog

logger = structlog.get_logger()

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

_MISSING = object()


class StateStore:
    """Namespaced key-value store with a single write overlay."""

    def __init__(self) -> None:
        self._committed: dict[str, dict[Hashable, Any]] = {}
        self._overlay: dict[str, dict[Hashable, Any]] | None = None
        self.version = 0

    @property
    def in_transaction(self) -> bool:
        return self._overlay is not None

    def get(self, namespace: str, key: Hashable, default: Any = None) -> Any:
        if self._overlay is not None:
            pending = self._overlay.get(namespace)
            if pending is not None and key in pending:
                return pending[key]
        return self._committed.get(namespace, {}).get(key, default)

    def has(self, namespace: str, key: Hashable) -> bool:
        return self.get(namespace, key, _MISSING) is not _MISSING

    def set(self, namespace: str, key: Hashable, value: Any) -> None:
        if self._overlay is None:
            # Writes outside a transaction (genesis, test setup) commit directly
            self._committed.setdefault(namespace, {})[key] = value
            self.version += 1
            return
        self._overlay.setdefault(namespace, {})[key] = value

    @contextmanager
    def atomic(self) -> Iterator[None]:
        """Run a block of writes as one all-or-nothing unit.

        Raises:
            RuntimeError: If a transaction is already open
        """
        if self._overlay is not None:
            raise RuntimeError("nested state transactions are not supported")

        self._overlay = {}
        try:
            yield
        except BaseException:
            discarded = sum(len(m) for m in self._overlay.values())
            self._overlay = None
            logger.debug("state_overlay_discarded", writes=discarded)
            raise

        overlay, self._overlay = self._overlay, None
        for namespace, writes in overlay.items():
            self._committed.setdefault(namespace, {}).update(writes)
        self.version += 1


class StateMap(Generic[K, V]):
    """Typed view of one namespace of a StateStore."""

    def __init__(self, store: StateStore, namespace: str) -> None:
        self._store = store
        self.namespace = namespace

    def get(self, key: K) -> V | None:
        return self._store.get(self.namespace, key)

    def get_or(self, key: K, default: V) -> V:
        return self._store.get(self.namespace, key, default)

    def has(self, key: K) -> bool:
        return self._store.has(self.namespace, key)

    def set(self, key: K, value: V) -> None:
        self._store.set(self.namespace, key, value)


class State(Generic[V]):
    """Single-value slot in a StateStore."""

    _KEY = "value"

    def __init__(self, store: StateStore, namespace: str, default: V) -> None:
        self._store = store
        self.namespace = namespace
        self._default = default

    def get(self) -> V:
        return self._store.get(self.namespace, self._KEY, self._default)

    def set(self, value: V) -> None:
        self._store.set(self.namespace, self._KEY, value)
