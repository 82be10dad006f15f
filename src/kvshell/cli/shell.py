"""Interactive read-eval-print loop."""

from __future__ import annotations

import logging
import signal
import sys
from collections.abc import Callable
from typing import TYPE_CHECKING, TextIO

from ..core.errors import ShellError
from ..core.types import Empty, Many, Result, Single

if TYPE_CHECKING:
    from ..core.dispatcher import Dispatcher
    from .history import History

logger = logging.getLogger(__name__)

EXIT_COMMAND = "exit"


def render(result: Result) -> list[str]:
    """Return the output lines for a command result."""
    if isinstance(result, Single):
        return [str(result.item)]
    if isinstance(result, Many):
        return [str(kv) for kv in result.items]
    if isinstance(result, Empty):
        return ["OK"]
    raise TypeError(f"Unknown result type: {type(result).__name__}")


class Shell:
    """Read lines, dispatch them and print results until EOF or interrupt.

    Args:
        dispatcher: Runs parsed commands against the store
        prompt: Prompt shown before each line
        history: Persistent history, or None to disable it
        input_func: Line reader, ``input`` by default
        out: Output stream, stdout by default
        on_interrupt: Called with SIGINT when Ctrl-C arrives while a command
            is running; the interrupt propagates when not set
    """

    def __init__(
        self,
        dispatcher: Dispatcher,
        *,
        prompt: str = "tikv> ",
        history: History | None = None,
        input_func: Callable[[str], str] | None = None,
        out: TextIO | None = None,
        on_interrupt: Callable[[int], object] | None = None,
    ):
        self.dispatcher = dispatcher
        self.prompt = prompt
        self.history = history
        self._input = input_func if input_func is not None else input
        self._out = out
        self._on_interrupt = on_interrupt

    def _print(self, text: str) -> None:
        print(text, file=self._out if self._out is not None else sys.stdout)

    def run(self) -> int:
        """Run the loop. Returns 0 on EOF or interrupt at the prompt.

        Raises:
            SystemExit: With status 0 when the user types ``exit``
        """
        if self.history is not None:
            self.history.load()

        while True:
            try:
                line = self._input(self.prompt)
            except KeyboardInterrupt:
                self._print("^C")
                break
            except EOFError:
                self._print("^D")
                break
            except (OSError, UnicodeDecodeError) as e:
                logger.warning(f"Failed to read line: {e}")
                continue

            if self.history is not None and line.strip():
                self.history.append(line)

            if line.strip() == EXIT_COMMAND:
                raise SystemExit(0)

            try:
                self.run_line(line)
            except KeyboardInterrupt:
                if self._on_interrupt is None:
                    raise
                self._on_interrupt(signal.SIGINT)

        return 0

    def run_line(self, line: str) -> None:
        """Dispatch one line and print its result or error."""
        try:
            result = self.dispatcher.execute(line)
        except ShellError as e:
            self._print(str(e))
            return

        if result is None:
            return
        for text in render(result):
            self._print(text)
