"""
Sequential id counters.

Each counter is one store entry holding the last issued id (0 = none issued).
``next_id`` performs read-increment-write against whatever store it is given;
callers pass the active transaction so the increment commits or aborts
together with the record it numbers.
"""

from __future__ import annotations

from .store import Key, KeyValueStore
from ..core.fixed_point import U64_MAX, checked_add


def current_id(store: KeyValueStore, key: Key) -> int:
    v = store.get(key, 0)
    if not isinstance(v, int) or isinstance(v, bool) or v < 0:
        raise ValueError(f"invalid stored counter for {key!r}: {v!r}")
    return int(v)


def next_id(store: KeyValueStore, key: Key) -> int:
    nxt = checked_add(current_id(store, key), 1, lo=1, hi=U64_MAX)
    store.set(key, nxt)
    return nxt
