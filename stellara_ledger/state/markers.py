"""
Idempotency markers for redemption-style operations.

A marker is an opaque reference (e.g. an external transaction hash) that may be
consumed exactly once per namespace. ``consume`` is a single check-and-set on
the store it is handed; run it on the active transaction so the marker and the
effect it guards commit together.
"""

from __future__ import annotations

from dataclasses import dataclass

from .store import Key, KeyValueStore
from ..core.errors import AlreadyConsumed


@dataclass(frozen=True)
class MarkerSet:
    namespace: str

    def _key(self, reference: str) -> Key:
        if not isinstance(reference, str) or not reference:
            raise ValueError("marker reference must be a non-empty string")
        return ("marker", self.namespace, reference)

    def is_consumed(self, store: KeyValueStore, reference: str) -> bool:
        return store.has(self._key(reference))

    def consume(self, store: KeyValueStore, reference: str) -> None:
        key = self._key(reference)
        if store.has(key):
            raise AlreadyConsumed(f"{self.namespace}:{reference} already consumed")
        store.set(key, True)
