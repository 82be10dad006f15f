"""kvshell - interactive command shell for a transactional key-value store."""

from .components import MemoryStorage, TiKVStorage, open_storage
from .core.config import ShellConfig
from .core.dispatcher import Dispatcher, parse_line
from .core.errors import (
    ArgumentError,
    KeyNotFoundError,
    ShellError,
    StoreError,
    StoreOpenError,
    TransactionClosedError,
    UsageError,
    WriteConflictError,
)
from .core.types import Empty, Key, KeyValue, Many, Result, Single, Value

__all__ = [
    "ShellConfig",
    "Dispatcher",
    "parse_line",
    "MemoryStorage",
    "TiKVStorage",
    "open_storage",
    "ShellError",
    "ArgumentError",
    "UsageError",
    "StoreError",
    "KeyNotFoundError",
    "WriteConflictError",
    "TransactionClosedError",
    "StoreOpenError",
    "Key",
    "Value",
    "KeyValue",
    "Empty",
    "Single",
    "Many",
    "Result",
]
