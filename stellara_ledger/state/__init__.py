"""
State management: keyed store, transactions, counters, idempotency markers
"""

from .counters import current_id, next_id
from .markers import MarkerSet
from .store import Key, KeyValueStore, MemoryStore
from .transaction import Transaction, TransactionClosed

__all__ = [
    "current_id",
    "next_id",
    "MarkerSet",
    "Key",
    "KeyValueStore",
    "MemoryStore",
    "Transaction",
    "TransactionClosed",
]
