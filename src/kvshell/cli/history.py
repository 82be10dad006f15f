"""Readline history persisted to a fixed file."""

from __future__ import annotations

import logging
import readline
from pathlib import Path

logger = logging.getLogger(__name__)


class History:
    """Load history at startup and append each accepted line to the file.

    Appending per line (instead of writing on exit) keeps the history even
    when the process is ended by a signal.
    """

    def __init__(self, path: str | Path, length: int = 1000):
        self.path = Path(path)
        self.length = length

    def load(self) -> None:
        readline.set_history_length(self.length)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.touch(exist_ok=True)
            readline.read_history_file(self.path)
        except OSError as e:
            logger.warning(f"Cannot load history from {self.path}: {e}")

    def append(self, line: str) -> None:
        # input() adds to the in-memory history only when attached to a tty
        count = readline.get_current_history_length()
        if count == 0 or readline.get_history_item(count) != line:
            readline.add_history(line)
        try:
            readline.append_history_file(1, self.path)
        except OSError as e:
            logger.warning(f"Cannot write history to {self.path}: {e}")
