"""Tests for the keyed store and its transactional overlay."""

import pytest

from stellara_ledger.state import KeyValueStore, MemoryStore, Transaction, TransactionClosed


# ---------------------------------------------------------------------------
# MemoryStore
# ---------------------------------------------------------------------------

class TestMemoryStore:
    def test_get_default(self):
        assert MemoryStore().get(("x",), 5) == 5

    def test_set_has_remove(self):
        s = MemoryStore()
        s.set(("a", 1), {"v": 1})
        assert s.has(("a", 1))
        s.remove(("a", 1))
        assert not s.has(("a", 1))
        s.remove(("a", 1))  # idempotent

    def test_values_are_copied(self):
        s = MemoryStore()
        value = {"v": [1]}
        s.set(("k",), value)
        value["v"].append(2)
        got = s.get(("k",))
        got["v"].append(3)
        assert s.get(("k",)) == {"v": [1]}

    def test_prefix_keys(self):
        s = MemoryStore()
        s.set(("vesting", "grant", 1), 1)
        s.set(("vesting", "grant", 2), 2)
        s.set(("staking", "pool"), 3)
        assert list(s.keys(("vesting",))) == [("vesting", "grant", 1), ("vesting", "grant", 2)]
        assert len(s) == 3

    def test_protocol(self):
        assert isinstance(MemoryStore(), KeyValueStore)
        assert isinstance(Transaction(MemoryStore()), KeyValueStore)


# ---------------------------------------------------------------------------
# Transaction
# ---------------------------------------------------------------------------

class TestTransaction:
    def test_reads_through_to_parent(self):
        base = MemoryStore()
        base.set(("k",), 1)
        tx = Transaction(base)
        assert tx.get(("k",)) == 1
        assert not tx.dirty

    def test_writes_buffered_until_commit(self):
        base = MemoryStore()
        tx = Transaction(base)
        tx.set(("k",), 2)
        assert tx.get(("k",)) == 2
        assert not base.has(("k",))
        tx.commit()
        assert base.get(("k",)) == 2
        assert not tx.is_open

    def test_removal_shadows_parent(self):
        base = MemoryStore()
        base.set(("k",), 1)
        tx = Transaction(base)
        tx.remove(("k",))
        assert not tx.has(("k",))
        assert tx.get(("k",), "gone") == "gone"
        assert base.has(("k",))
        tx.commit()
        assert not base.has(("k",))

    def test_set_after_remove(self):
        base = MemoryStore()
        base.set(("k",), 1)
        tx = Transaction(base)
        tx.remove(("k",))
        tx.set(("k",), 3)
        tx.commit()
        assert base.get(("k",)) == 3

    def test_discard_leaves_parent(self):
        base = MemoryStore()
        tx = Transaction(base)
        tx.set(("k",), 1)
        tx.discard()
        assert len(base) == 0

    def test_closed_transaction_rejected(self):
        tx = Transaction(MemoryStore())
        tx.commit()
        with pytest.raises(TransactionClosed):
            tx.get(("k",))
        with pytest.raises(TransactionClosed):
            tx.commit()

    def test_nested_savepoint(self):
        base = MemoryStore()
        outer = Transaction(base)
        outer.set(("a",), 1)

        inner = Transaction(outer)
        inner.set(("b",), 2)
        inner.discard()

        inner2 = Transaction(outer)
        inner2.set(("c",), 3)
        inner2.remove(("a",))
        inner2.commit()

        assert not base.has(("c",))
        outer.commit()
        assert base.get(("c",)) == 3
        assert not base.has(("a",))
        assert not base.has(("b",))
