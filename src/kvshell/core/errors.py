"""Exception hierarchy for the shell.

Defines all custom exceptions raised by the dispatcher and the store backends.
"""

from __future__ import annotations


class ShellError(Exception):
    """Base exception for errors reported to the user by the shell."""
    pass


class ArgumentError(ShellError):
    """Raised when a command gets the wrong number of arguments or a malformed one."""
    pass


class UsageError(ShellError):
    """Raised when the command name is not recognized."""
    pass


class StoreError(ShellError):
    """Raised when the underlying store client fails."""
    pass


class KeyNotFoundError(StoreError):
    """Raised when a key read by ``get`` does not exist."""

    def __init__(self, key: bytes):
        super().__init__("key not exist")
        self.key = key


class WriteConflictError(StoreError):
    """Raised when a commit loses a write-write race with another transaction."""
    pass


class TransactionClosedError(StoreError):
    """Raised when a transaction is used after commit or rollback."""
    pass


class StoreOpenError(ShellError):
    """Raised when the store cannot be opened at startup (fatal)."""
    pass
