"""Command dispatcher - maps shell commands onto store transactions.

Each command runs in exactly one transaction: writes are committed once,
reads are rolled back when done. Argument checks happen before the
transaction is opened, so a rejected command never touches the store.
"""

from __future__ import annotations

import itertools
import logging
import sys
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING

from .errors import ArgumentError, UsageError
from .types import Empty, KeyValue, Many, Result, Single

if TYPE_CHECKING:
    from ..interfaces.store import Storage
    from .types import Key, Value

logger = logging.getLogger(__name__)

COMMANDS = ("put", "puts", "get", "seek", "del")
USAGE = "usage: " + " | ".join(COMMANDS)


def parse_line(line: str) -> tuple[str, list[bytes]] | None:
    """Split a line into a lowercase command name and byte-string arguments.

    Fields are separated by ASCII whitespace. Returns None for a blank line.
    Undecodable terminal bytes (surrogate escapes) pass through unchanged.
    """
    fields = line.encode("utf-8", errors="surrogateescape").split()
    if not fields:
        return None
    name = fields[0].decode("utf-8", errors="surrogateescape").lower()
    return name, fields[1:]


def _parse_limit(raw: bytes) -> int:
    text = raw.decode("utf-8", errors="replace")
    if not text.isascii() or not text.isdigit():
        raise ArgumentError(f"invalid seek limit: {text}")
    limit = int(text)
    if limit > sys.maxsize:
        raise ArgumentError(f"invalid seek limit: {text}")
    return limit


class Dispatcher:
    """Run shell commands against a store.

    Args:
        storage: Store handle; one transaction is opened per command

    Public API:
        - dispatch(name, args): Run one command, return a Result
        - execute(line): Parse and dispatch a raw input line
    """

    def __init__(self, storage: Storage):
        self.storage = storage
        self._handlers: dict[str, Callable[[Sequence[bytes]], Result]] = {
            "put": self.do_put,
            "puts": self.do_puts,
            "get": self.do_get,
            "seek": self.do_seek,
            "del": self.do_del,
        }

    def dispatch(self, name: str, args: Sequence[bytes]) -> Result:
        """Run the named command.

        Raises:
            UsageError: Unknown command
            ArgumentError: Wrong arity or malformed argument
            StoreError: Any failure of the store client
        """
        handler = self._handlers.get(name)
        if handler is None:
            raise UsageError(USAGE)
        logger.debug(f"Dispatching {name} with {len(args)} args")
        return handler(args)

    def execute(self, line: str) -> Result | None:
        """Parse and dispatch a line; None for a blank line."""
        parsed = parse_line(line)
        if parsed is None:
            return None
        name, args = parsed
        return self.dispatch(name, args)

    def _write(self, pairs: Sequence[tuple[Key, Value]] = (), deletes: Sequence[Key] = ()) -> None:
        """Apply writes and deletes in a single committed transaction."""
        with self.storage.begin() as txn:
            for key, value in pairs:
                txn.set(key, value)
            for key in deletes:
                txn.delete(key)
            txn.commit()

    def do_put(self, args: Sequence[bytes]) -> Result:
        if len(args) != 2:
            raise ArgumentError("put [key] [value]")
        self._write(pairs=[(args[0], args[1])])
        return Empty()

    def do_puts(self, args: Sequence[bytes]) -> Result:
        if not args or len(args) % 2 != 0:
            raise ArgumentError("puts [key1] [value1] [key2] [value2] ... [key N] [value N]")
        self._write(pairs=list(zip(args[0::2], args[1::2])))
        return Empty()

    def do_get(self, args: Sequence[bytes]) -> Result:
        if len(args) != 1:
            raise ArgumentError("get [key]")
        key = args[0]
        with self.storage.begin() as txn:
            value = txn.get(key)
        return Single(KeyValue(key, value))

    def do_seek(self, args: Sequence[bytes]) -> Result:
        if len(args) != 2:
            raise ArgumentError("seek [start key] [limit]")
        start = args[0]
        limit = _parse_limit(args[1])

        with self.storage.begin() as txn, txn.seek(start) as cursor:
            items = tuple(itertools.islice(cursor, limit))
        return Many(items)

    def do_del(self, args: Sequence[bytes]) -> Result:
        if not args:
            raise ArgumentError("del [key 1] ... [key N]")
        self._write(deletes=list(args))
        return Empty()
