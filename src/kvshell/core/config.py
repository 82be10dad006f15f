"""Configuration for the shell.

Defines the tunable parameters for the REPL and the store connection.
"""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_PD_ADDR = "localhost:2379"
TIKV_SCHEME = "tikv"
MEMORY_SCHEME = "memory"


@dataclass
class ShellConfig:
    """Configuration parameters for the shell.

    Attributes:
        pd_addr: PD endpoint(s), comma separated, or a backend URL
            such as ``tikv://host:2379`` or ``memory://``
        history_file: Readline history file, shared across sessions
        history_length: Maximum number of history entries kept
        prompt: Prompt shown before each line
        scan_batch_size: Number of keys fetched per scan round-trip
        log_level: Level name for the diagnostic log on stderr
    """

    pd_addr: str = DEFAULT_PD_ADDR
    history_file: str = "/tmp/readline.tmp"
    history_length: int = 1000
    prompt: str = "tikv> "
    scan_batch_size: int = 256
    log_level: str = "WARNING"

    @property
    def scheme(self) -> str:
        """Backend scheme; bare addresses are TiKV PD endpoints."""
        if "://" in self.pd_addr:
            return self.pd_addr.split("://", 1)[0].lower()
        return TIKV_SCHEME

    @property
    def store_url(self) -> str:
        """Normalized backend URL, e.g. ``tikv://localhost:2379``."""
        if "://" in self.pd_addr:
            return self.pd_addr
        return f"{TIKV_SCHEME}://{self.pd_addr}"

    @property
    def pd_endpoints(self) -> list[str]:
        """PD endpoints listed in the address."""
        rest = self.store_url.split("://", 1)[1]
        return [ep.strip() for ep in rest.split(",") if ep.strip()]
