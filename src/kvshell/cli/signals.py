"""Process termination signals.

A daemon thread waits for SIGHUP, SIGTERM and SIGQUIT and ends the process.
SIGINT stays with the main thread, where it surfaces as KeyboardInterrupt.
"""

from __future__ import annotations

import logging
import os
import signal
import sys
import threading
from collections.abc import Callable
from typing import TextIO

logger = logging.getLogger(__name__)

TERMINATION_SIGNALS = tuple(
    sig
    for sig in (
        getattr(signal, "SIGHUP", None),
        signal.SIGTERM,
        getattr(signal, "SIGQUIT", None),
    )
    if sig is not None
)


def exit_code_for(sig: int) -> int:
    """SIGTERM is a normal shutdown request; anything else is a failure."""
    return 0 if sig == signal.SIGTERM else 1


class SignalListener:
    """Wait for termination signals and exit the process.

    Args:
        signals: Signals to wait for
        exit_func: Called with the exit status; os._exit by default since
            sys.exit only ends the calling thread
        out: Stream the notice is printed to
    """

    def __init__(
        self,
        signals: tuple[int, ...] = TERMINATION_SIGNALS,
        exit_func: Callable[[int], object] = os._exit,
        out: TextIO | None = None,
    ):
        self.signals = signals
        self._exit = exit_func
        self._out = out
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        """Route the signals to the listener.

        Must run in the main thread before other threads start, so that they
        inherit the blocked signal mask.
        """
        if hasattr(signal, "sigwait") and hasattr(signal, "pthread_sigmask"):
            signal.pthread_sigmask(signal.SIG_BLOCK, self.signals)
            self._thread = threading.Thread(
                target=self._wait, daemon=True, name="SignalListener"
            )
            self._thread.start()
        else:
            for sig in self.signals:
                signal.signal(sig, lambda signum, _frame: self.handle(signum))
        logger.debug(f"Listening for signals {[signal.Signals(s).name for s in self.signals]}")

    def _wait(self) -> None:
        sig = signal.sigwait(self.signals)
        self.handle(sig)

    def handle(self, sig: int) -> None:
        """Print a notice and exit with the status for sig."""
        out = self._out if self._out is not None else sys.stdout
        print(f"\nGot signal [{signal.Signals(sig).name}] to exit.", file=out, flush=True)
        logger.info(f"Exiting on signal {signal.Signals(sig).name}")
        self._exit(exit_code_for(sig))
