"""
Transactional overlay for the keyed store.

A ``Transaction`` buffers every write and removal on top of a parent store.
Reads see the buffered state first. ``commit()`` folds the buffer into the
parent in one step; dropping the transaction without committing discards it.
Transactions stack: a transaction over a transaction behaves as a savepoint.
"""

from __future__ import annotations

import copy
from typing import Any, Dict

from .store import Key, KeyValueStore, MemoryStore


class TransactionClosed(RuntimeError):
    """Raised when a committed or discarded transaction is used again."""


class Transaction:
    def __init__(self, parent: KeyValueStore) -> None:
        self._parent = parent
        self._writes: Dict[Key, Any] = {}
        self._removals: set[Key] = set()
        self._open = True

    @property
    def parent(self) -> KeyValueStore:
        return self._parent

    @property
    def is_open(self) -> bool:
        return self._open

    def _require_open(self) -> None:
        if not self._open:
            raise TransactionClosed("transaction already closed")

    def get(self, key: Key, default: Any = None) -> Any:
        self._require_open()
        if key in self._writes:
            return copy.deepcopy(self._writes[key])
        if key in self._removals:
            return default
        return self._parent.get(key, default)

    def set(self, key: Key, value: Any) -> None:
        self._require_open()
        self._removals.discard(key)
        self._writes[key] = copy.deepcopy(value)

    def has(self, key: Key) -> bool:
        self._require_open()
        if key in self._writes:
            return True
        if key in self._removals:
            return False
        return self._parent.has(key)

    def remove(self, key: Key) -> None:
        self._require_open()
        self._writes.pop(key, None)
        self._removals.add(key)

    @property
    def dirty(self) -> bool:
        return bool(self._writes or self._removals)

    def commit(self) -> None:
        self._require_open()
        parent = self._parent
        if isinstance(parent, MemoryStore):
            parent.apply_batch(self._writes, self._removals)
        else:
            for key in self._removals:
                parent.remove(key)
            for key, value in self._writes.items():
                parent.set(key, value)
        self._open = False

    def discard(self) -> None:
        self._writes.clear()
        self._removals.clear()
        self._open = False

    def __repr__(self) -> str:
        state = "open" if self._open else "closed"
        return f"Transaction({state}, {len(self._writes)} writes, {len(self._removals)} removals)"
