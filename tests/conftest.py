"""Shared fixtures: in-memory store, dispatcher and a failure-injecting store."""

import pytest

from kvshell.components.memory import MemoryStorage
from kvshell.core.dispatcher import Dispatcher
from kvshell.core.errors import StoreError


class FlakyStorage:
    """Wraps a storage, records calls and fails a chosen operation.

    fail_on names the operation ("begin", "get", "set", "delete", "seek",
    "commit"); fail_after lets that many calls succeed first.
    """

    def __init__(self, inner, fail_on=None, fail_after=0):
        self.inner = inner
        self.fail_on = fail_on
        self.fail_after = fail_after
        self.calls = []
        self.cursors = []
        self.transactions = 0

    def check(self, op):
        self.calls.append(op)
        if op == self.fail_on:
            if self.fail_after <= 0:
                raise StoreError(f"injected {op} failure")
            self.fail_after -= 1

    def begin(self):
        self.check("begin")
        self.transactions += 1
        return FlakyTransaction(self, self.inner.begin())

    def close(self):
        self.inner.close()


class FlakyTransaction:
    def __init__(self, storage, txn):
        self._storage = storage
        self._txn = txn

    def get(self, key):
        self._storage.check("get")
        return self._txn.get(key)

    def set(self, key, value):
        self._storage.check("set")
        self._txn.set(key, value)

    def delete(self, key):
        self._storage.check("delete")
        self._txn.delete(key)

    def seek(self, start):
        self._storage.check("seek")
        cursor = self._txn.seek(start)
        self._storage.cursors.append(cursor)
        return cursor

    def commit(self):
        self._storage.check("commit")
        self._txn.commit()

    def rollback(self):
        self._txn.rollback()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        return self._txn.__exit__(exc_type, exc_val, exc_tb)


@pytest.fixture
def storage():
    """Create empty in-memory storage for tests."""
    s = MemoryStorage()
    yield s
    s.close()


@pytest.fixture
def dispatcher(storage):
    return Dispatcher(storage)


@pytest.fixture
def make_flaky(storage):
    """Factory for a recording storage over the shared in-memory one."""

    def make(fail_on=None, fail_after=0):
        return FlakyStorage(storage, fail_on=fail_on, fail_after=fail_after)

    return make


@pytest.fixture
def read_value(storage):
    """Read a committed value outside the dispatcher, None if missing."""

    def read(key):
        with storage.begin() as txn:
            try:
                return txn.get(key)
            except StoreError:
                return None

    return read
