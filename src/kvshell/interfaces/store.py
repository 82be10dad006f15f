"""Protocol definitions for the transactional store client."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Protocol

from ..core.types import Key, KeyValue, Value


class Cursor(Protocol):
    """Forward-only cursor over committed and buffered records."""

    def __iter__(self) -> Iterator[KeyValue]:
        """Yield records in ascending key order from the seek position."""
        ...

    def __next__(self) -> KeyValue:
        ...

    def close(self) -> None:
        """Release the cursor. Further iteration yields nothing."""
        ...

    def __enter__(self) -> Cursor:
        ...

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        ...


class Transaction(Protocol):
    """One begin-to-commit unit of work.

    Invariants:
        - Writes are invisible to other transactions until commit
        - commit() applies all writes or none
        - A transaction is finished after commit() or rollback()
    """

    def get(self, key: Key) -> Value:
        """Return the value for key.

        Raises:
            KeyNotFoundError: If the key does not exist
            StoreError: On any other store failure
        """
        ...

    def set(self, key: Key, value: Value) -> None:
        """Buffer a write of key -> value."""
        ...

    def delete(self, key: Key) -> None:
        """Buffer a deletion of key."""
        ...

    def seek(self, start: Key) -> Cursor:
        """Open a cursor positioned at the first key >= start."""
        ...

    def commit(self) -> None:
        """Atomically apply all buffered writes."""
        ...

    def rollback(self) -> None:
        """Discard buffered writes and finish the transaction."""
        ...

    def __enter__(self) -> Transaction:
        ...

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        """Roll back unless the transaction was committed."""
        ...


class Storage(Protocol):
    """Handle to a transactional key-value store."""

    def begin(self) -> Transaction:
        """Start a new transaction."""
        ...

    def close(self) -> None:
        """Release the connection."""
        ...
