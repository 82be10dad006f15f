"""In-process transactional store.

Uses sortedcontainers.SortedDict for ordered keys, so seeks behave like the
remote store's. Selected with ``-pd memory://`` and used as the test double.
"""

from __future__ import annotations

import heapq
import logging
import threading
from typing import TYPE_CHECKING

from sortedcontainers import SortedDict

from ..core.errors import (
    KeyNotFoundError,
    StoreError,
    TransactionClosedError,
    WriteConflictError,
)
from ..core.types import KeyValue

if TYPE_CHECKING:
    from collections.abc import Iterator

    from ..core.types import Key, Timestamp, Value

logger = logging.getLogger(__name__)


class MemoryStorage:
    """Ordered key-value store with optimistic transactions.

    Committed state maps key -> (value_or_none, commit_ts). A value of None is
    a tombstone left by a delete. Only the latest version of each key is kept,
    so reads and cursors are read-committed: they see data committed after the
    transaction began. Only write-write conflicts are detected, at commit.

    Invariants:
        - Keys are always maintained in sorted order
        - Commit timestamps are monotonically increasing
        - A commit applies its whole write set under the lock, or nothing
    """

    def __init__(self):
        self._data: SortedDict = SortedDict()
        self._lock = threading.Lock()
        self._ts: Timestamp = 0
        self._closed = False

    def begin(self) -> MemoryTransaction:
        """Start a transaction reading at the current commit timestamp."""
        if self._closed:
            raise StoreError("storage is closed")
        with self._lock:
            start_ts = self._ts
        return MemoryTransaction(self, start_ts)

    def close(self) -> None:
        self._closed = True

    def _read(self, key: Key) -> Value | None:
        with self._lock:
            entry = self._data.get(key)
        if entry is None:
            return None
        return entry[0]

    def _iter_from(self, start: Key) -> Iterator[tuple[Key, Value | None]]:
        """Iterate committed records (tombstones included) from start."""
        for key in self._data.irange(minimum=start):
            entry = self._data.get(key)
            if entry is not None:
                yield key, entry[0]

    def _commit(self, writes: SortedDict, start_ts: Timestamp) -> Timestamp:
        """Apply a write set atomically.

        Raises:
            WriteConflictError: If a key in writes was committed after start_ts
        """
        with self._lock:
            for key in writes:
                entry = self._data.get(key)
                if entry is not None and entry[1] > start_ts:
                    logger.warning(f"Write conflict on key {key!r} (start_ts={start_ts})")
                    raise WriteConflictError(
                        f"write conflict on key {key.decode('utf-8', errors='replace')}"
                    )

            self._ts += 1
            for key, value in writes.items():
                self._data[key] = (value, self._ts)
            logger.debug(f"Committed {len(writes)} writes at ts={self._ts}")
            return self._ts


class MemoryTransaction:
    """Transaction that buffers writes until commit.

    Reads see this transaction's own writes first, then committed data.
    """

    def __init__(self, storage: MemoryStorage, start_ts: Timestamp):
        self._storage = storage
        self.start_ts = start_ts
        self._writes: SortedDict = SortedDict()
        self._finished = False

    def _check_open(self) -> None:
        if self._finished:
            raise TransactionClosedError("transaction already finished")

    def get(self, key: Key) -> Value:
        self._check_open()
        if key in self._writes:
            value = self._writes[key]
        else:
            value = self._storage._read(key)
        if value is None:
            raise KeyNotFoundError(key)
        return value

    def set(self, key: Key, value: Value) -> None:
        self._check_open()
        if not value:
            raise StoreError("can not set nil value")
        self._writes[key] = value

    def delete(self, key: Key) -> None:
        self._check_open()
        self._writes[key] = None

    def seek(self, start: Key) -> MemoryCursor:
        self._check_open()
        return MemoryCursor(self._merged_from(start))

    def _merged_from(self, start: Key) -> Iterator[KeyValue]:
        # Buffered entries sort before committed ones for the same key
        buffered = ((key, 0, self._writes[key]) for key in self._writes.irange(minimum=start))
        committed = ((key, 1, value) for key, value in self._storage._iter_from(start))

        last_key = None
        for key, _source, value in heapq.merge(buffered, committed):
            if key == last_key:
                continue
            last_key = key
            if value is not None:
                yield KeyValue(key, value)

    def commit(self) -> None:
        self._check_open()
        self._finished = True
        if not self._writes:
            return
        self._storage._commit(self._writes, self.start_ts)

    def rollback(self) -> None:
        self._finished = True
        self._writes.clear()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if not self._finished:
            self.rollback()
        return False


class MemoryCursor:
    """Lazy forward-only cursor over a merged record stream."""

    def __init__(self, records: Iterator[KeyValue]):
        self._records = records
        self.closed = False

    def __iter__(self):
        return self

    def __next__(self) -> KeyValue:
        if self.closed:
            raise StopIteration
        return next(self._records)

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            self._records.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
