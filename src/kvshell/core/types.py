"""Common type definitions for the shell.

Defines the key-value record and the tagged result returned by commands.
"""

from __future__ import annotations

from dataclasses import dataclass

# Core primitive types
Key = bytes
Value = bytes
Timestamp = int


@dataclass(frozen=True)
class KeyValue:
    """A key and its value as read from the store."""

    key: Key
    value: Value

    def __str__(self) -> str:
        key_text = self.key.decode("utf-8", errors="replace")
        value_text = self.value.decode("utf-8", errors="replace")
        return f"{key_text} => {value_text} ({format_bytes(self.value)})"


@dataclass(frozen=True)
class Empty:
    """Result of a command that returns no value (put, puts, del)."""


@dataclass(frozen=True)
class Single:
    """Result holding exactly one record (get)."""

    item: KeyValue


@dataclass(frozen=True)
class Many:
    """Result holding an ordered sequence of records (seek)."""

    items: tuple[KeyValue, ...] = ()


Result = Empty | Single | Many


def format_bytes(data: bytes) -> str:
    """Render bytes as a bracketed list of decimal byte values, e.g. ``[49 48]``."""
    return "[" + " ".join(str(b) for b in data) + "]"
