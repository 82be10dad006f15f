"""Shell core: types, errors, configuration and the command dispatcher."""

from .dispatcher import Dispatcher
from .config import ShellConfig

__all__ = ["Dispatcher", "ShellConfig"]
