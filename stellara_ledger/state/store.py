"""
Persistent keyed store interface and an in-memory implementation.

Keys are tuples of str/int parts (e.g. ``("vesting", "grant", 7)``); values
are plain data (dicts, ints, bools, strings) produced by the core serializers.
The store never holds live dataclass instances.
"""

from __future__ import annotations

import copy
from typing import Any, Dict, Iterator, Protocol, Tuple, runtime_checkable


Key = Tuple[Any, ...]


@runtime_checkable
class KeyValueStore(Protocol):
    def get(self, key: Key, default: Any = None) -> Any: ...

    def set(self, key: Key, value: Any) -> None: ...

    def has(self, key: Key) -> bool: ...

    def remove(self, key: Key) -> None: ...


class MemoryStore:
    """
    Dict-backed store.

    Values are deep-copied on the way in and out so callers can never mutate
    stored state without going through ``set``.
    """

    def __init__(self) -> None:
        self._data: Dict[Key, Any] = {}

    def get(self, key: Key, default: Any = None) -> Any:
        if key not in self._data:
            return default
        return copy.deepcopy(self._data[key])

    def set(self, key: Key, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)

    def has(self, key: Key) -> bool:
        return key in self._data

    def remove(self, key: Key) -> None:
        self._data.pop(key, None)

    def apply_batch(self, writes: Dict[Key, Any], removals: set[Key]) -> None:
        """Apply a committed transaction's writes and removals in one step."""
        for key in removals:
            self._data.pop(key, None)
        self._data.update(writes)

    def keys(self, prefix: Key = ()) -> Iterator[Key]:
        """Keys starting with ``prefix``, in sorted order."""
        n = len(prefix)
        return iter(sorted((k for k in self._data if k[:n] == prefix), key=repr))

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"MemoryStore({len(self._data)} entries)"
