"""TiKV store adapter.

Wraps ``tikv_client.TransactionClient`` (the ``tikv`` extra) behind the
Storage / Transaction / Cursor protocols. Every driver exception is wrapped
into StoreError with the original chained as its cause.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ..core.errors import (
    KeyNotFoundError,
    StoreError,
    StoreOpenError,
    TransactionClosedError,
)
from ..core.types import KeyValue

if TYPE_CHECKING:
    from ..core.types import Key, Value

logger = logging.getLogger(__name__)


def _connect(pd_endpoints: list[str]) -> Any:
    try:
        from tikv_client import TransactionClient
    except ImportError as e:
        raise StoreOpenError(
            "tikv-client is not installed (pip install 'kvshell[tikv]')"
        ) from e

    try:
        return TransactionClient.connect(pd_endpoints)
    except Exception as e:
        raise StoreOpenError(f"cannot connect to pd {','.join(pd_endpoints)}: {e}") from e


class TiKVStorage:
    """Storage backed by a TiKV cluster.

    Args:
        pd_endpoints: PD addresses, e.g. ["localhost:2379"]
        scan_batch_size: Keys fetched per scan round-trip
        client: Pre-built transaction client (skips connecting)
    """

    def __init__(
        self,
        pd_endpoints: list[str],
        scan_batch_size: int = 256,
        client: Any = None,
    ):
        if scan_batch_size < 1:
            raise ValueError("scan_batch_size must be positive")  # noqa: TRY003
        self.pd_endpoints = list(pd_endpoints)
        self.scan_batch_size = scan_batch_size
        self._client = client if client is not None else _connect(self.pd_endpoints)
        logger.info(f"Connected to TiKV via pd {','.join(self.pd_endpoints)}")

    def begin(self) -> TiKVTransaction:
        if self._client is None:
            raise StoreError("storage is closed")
        try:
            txn = self._client.begin(pessimistic=False)
        except Exception as e:
            raise StoreError(str(e)) from e
        return TiKVTransaction(txn, self.scan_batch_size)

    def close(self) -> None:
        logger.info("Closing TiKV storage")
        self._client = None


class TiKVTransaction:
    """Optimistic TiKV transaction."""

    def __init__(self, txn: Any, scan_batch_size: int):
        self._txn = txn
        self._scan_batch_size = scan_batch_size
        self._finished = False

    def _check_open(self) -> None:
        if self._finished:
            raise TransactionClosedError("transaction already finished")

    def get(self, key: Key) -> Value:
        self._check_open()
        try:
            value = self._txn.get(key)
        except Exception as e:
            raise StoreError(str(e)) from e
        if value is None:
            raise KeyNotFoundError(key)
        return bytes(value)

    def set(self, key: Key, value: Value) -> None:
        self._check_open()
        try:
            self._txn.put(key, value)
        except Exception as e:
            raise StoreError(str(e)) from e

    def delete(self, key: Key) -> None:
        self._check_open()
        try:
            self._txn.delete(key)
        except Exception as e:
            raise StoreError(str(e)) from e

    def seek(self, start: Key) -> TiKVCursor:
        self._check_open()
        return TiKVCursor(self._txn, start, self._scan_batch_size)

    def commit(self) -> None:
        self._check_open()
        self._finished = True
        try:
            self._txn.commit()
        except Exception as e:
            try:
                self._abort()
            except Exception as abort_err:
                logger.warning(f"Failed to roll back TiKV transaction: {abort_err}")
            raise StoreError(str(e)) from e
        logger.debug("Committed TiKV transaction")

    def rollback(self) -> None:
        """Discard the transaction, releasing it in the driver when supported.

        Raises:
            StoreError: If the driver fails to roll back
        """
        self._finished = True
        try:
            self._abort()
        except Exception as e:
            raise StoreError(str(e)) from e

    def _abort(self) -> None:
        txn, self._txn = self._txn, None
        # Older drivers keep optimistic writes in the client buffer only
        rollback = getattr(txn, "rollback", None)
        if rollback is not None:
            rollback()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if not self._finished:
            self.rollback()
        return False


class TiKVCursor:
    """Lazy cursor that pages through ``scan`` results.

    The first page includes the start key; each following page starts just
    after the last key seen. A page shorter than the batch size ends the scan.
    """

    def __init__(self, txn: Any, start: Key, batch_size: int):
        self._txn = txn
        self._next_start = start
        self._include_start = True
        self._batch_size = batch_size
        self._page: list[KeyValue] = []
        self._exhausted = False
        self.closed = False

    def _fetch(self) -> None:
        try:
            pairs = self._txn.scan(
                self._next_start,
                end=None,
                limit=self._batch_size,
                include_start=self._include_start,
            )
            page = [KeyValue(bytes(k), bytes(v)) for k, v in pairs]
        except Exception as e:
            raise StoreError(str(e)) from e

        if len(page) < self._batch_size:
            self._exhausted = True
        if page:
            self._next_start = page[-1].key
            self._include_start = False
        self._page = page[::-1]

    def __iter__(self):
        return self

    def __next__(self) -> KeyValue:
        if self.closed:
            raise StopIteration
        if not self._page:
            if self._exhausted:
                raise StopIteration
            self._fetch()
            if not self._page:
                raise StopIteration
        return self._page.pop()

    def close(self) -> None:
        self.closed = True
        self._page = []
        self._txn = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
