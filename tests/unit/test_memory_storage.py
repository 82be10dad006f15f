"""Unit tests for the in-memory transactional store."""

import itertools

import pytest

from kvshell.components.memory import MemoryStorage
from kvshell.core.errors import (
    KeyNotFoundError,
    StoreError,
    TransactionClosedError,
    WriteConflictError,
)
from kvshell.core.types import KeyValue


def put(storage, key, value):
    with storage.begin() as txn:
        txn.set(key, value)
        txn.commit()


def test_memory_basic_set_get(storage):
    """Test that committed writes are readable by later transactions."""
    put(storage, b"key1", b"value1")

    with storage.begin() as txn:
        assert txn.get(b"key1") == b"value1"
        with pytest.raises(KeyNotFoundError):
            txn.get(b"nonexistent")


def test_memory_uncommitted_writes_invisible(storage):
    """Test that writes are isolated until commit."""
    writer = storage.begin()
    writer.set(b"k", b"v")

    with storage.begin() as reader:
        with pytest.raises(KeyNotFoundError):
            reader.get(b"k")

    writer.commit()

    with storage.begin() as reader:
        assert reader.get(b"k") == b"v"


def test_memory_reads_own_writes(storage):
    """Test that a transaction sees its own buffered writes and deletes."""
    put(storage, b"gone", b"1")

    with storage.begin() as txn:
        txn.set(b"new", b"2")
        txn.delete(b"gone")
        assert txn.get(b"new") == b"2"
        with pytest.raises(KeyNotFoundError):
            txn.get(b"gone")


def test_memory_rollback_on_exit(storage):
    """Test that leaving the context without commit discards writes."""
    with storage.begin() as txn:
        txn.set(b"k", b"v")

    with storage.begin() as txn:
        with pytest.raises(KeyNotFoundError):
            txn.get(b"k")


def test_memory_rollback_on_error(storage):
    """Test that an exception inside the context discards writes."""
    with pytest.raises(RuntimeError):
        with storage.begin() as txn:
            txn.set(b"k", b"v")
            raise RuntimeError("boom")

    with storage.begin() as txn:
        with pytest.raises(KeyNotFoundError):
            txn.get(b"k")


def test_memory_delete_hides_key(storage):
    """Test that a committed delete removes the key from reads and seeks."""
    put(storage, b"a", b"1")
    put(storage, b"b", b"2")

    with storage.begin() as txn:
        txn.delete(b"a")
        txn.commit()

    with storage.begin() as txn:
        with pytest.raises(KeyNotFoundError):
            txn.get(b"a")
        with txn.seek(b"") as cursor:
            assert list(cursor) == [KeyValue(b"b", b"2")]


def test_memory_write_conflict(storage):
    """Test that the later of two overlapping writers fails to commit."""
    put(storage, b"k", b"base")
    first = storage.begin()
    second = storage.begin()

    second.set(b"k", b"second")
    second.commit()

    first.set(b"k", b"first")
    with pytest.raises(WriteConflictError):
        first.commit()

    with storage.begin() as txn:
        assert txn.get(b"k") == b"second"


def test_memory_conflict_with_delete(storage):
    """Test that a committed delete still conflicts with an older writer."""
    put(storage, b"k", b"v")
    older = storage.begin()

    with storage.begin() as txn:
        txn.delete(b"k")
        txn.commit()

    older.set(b"k", b"again")
    with pytest.raises(WriteConflictError):
        older.commit()


def test_memory_failed_commit_applies_nothing(storage):
    """Test that a conflicting commit writes none of its keys."""
    stale = storage.begin()
    put(storage, b"b", b"winner")

    stale.set(b"a", b"1")
    stale.set(b"b", b"2")
    with pytest.raises(WriteConflictError):
        stale.commit()

    with storage.begin() as txn:
        with pytest.raises(KeyNotFoundError):
            txn.get(b"a")
        assert txn.get(b"b") == b"winner"


def test_memory_disjoint_writers_both_commit(storage):
    """Test that transactions touching different keys do not conflict."""
    first = storage.begin()
    second = storage.begin()
    first.set(b"a", b"1")
    second.set(b"b", b"2")

    first.commit()
    second.commit()

    with storage.begin() as txn:
        assert txn.get(b"a") == b"1"
        assert txn.get(b"b") == b"2"


def test_memory_reads_are_read_committed(storage):
    """Test that an open transaction sees data committed after it began."""
    reader = storage.begin()
    with storage.begin() as writer:
        writer.set(b"late", b"1")
        writer.commit()

    assert reader.get(b"late") == b"1"
    with reader.seek(b"") as cursor:
        assert [kv.key for kv in cursor] == [b"late"]


def test_memory_seek_merges_buffered_and_committed(storage):
    """Test that seek sees buffered writes over committed data in key order."""
    for key in (b"a", b"c", b"e"):
        put(storage, key, b"old")

    with storage.begin() as txn:
        txn.set(b"b", b"new")
        txn.set(b"c", b"new")
        txn.delete(b"e")
        with txn.seek(b"b") as cursor:
            items = list(cursor)

    assert items == [KeyValue(b"b", b"new"), KeyValue(b"c", b"new")]


def test_memory_seek_is_lazy_and_closable(storage):
    """Test that a closed cursor yields nothing further."""
    for i in range(5):
        put(storage, f"key{i}".encode(), b"v")

    with storage.begin() as txn:
        cursor = txn.seek(b"key1")
        assert [kv.key for kv in itertools.islice(cursor, 2)] == [b"key1", b"key2"]
        cursor.close()
        assert cursor.closed
        assert list(cursor) == []


def test_memory_transaction_finished_after_commit(storage):
    """Test that a committed transaction rejects further use."""
    txn = storage.begin()
    txn.set(b"k", b"v")
    txn.commit()

    with pytest.raises(TransactionClosedError):
        txn.set(b"k", b"v2")
    with pytest.raises(TransactionClosedError):
        txn.commit()


def test_memory_empty_value_rejected(storage):
    """Test that empty values cannot be stored."""
    with storage.begin() as txn:
        with pytest.raises(StoreError, match="can not set nil value"):
            txn.set(b"k", b"")


def test_memory_closed_storage_rejects_begin():
    """Test that begin fails once the storage is closed."""
    s = MemoryStorage()
    s.close()

    with pytest.raises(StoreError, match="closed"):
        s.begin()
