# Interactive TiKV shell entry point: parse flags, open the store, run the loop.
from __future__ import annotations

import argparse
import logging
import os
import sys
from collections.abc import Mapping, Sequence

from kvshell.cli.history import History
from kvshell.cli.shell import Shell
from kvshell.cli.signals import SignalListener
from kvshell.components import open_storage
from kvshell.core.config import DEFAULT_PD_ADDR, ShellConfig
from kvshell.core.dispatcher import Dispatcher
from kvshell.core.errors import StoreOpenError

PD_ADDR_ENV = "PD_ADDR"
LOG_LEVEL_ENV = "KVSHELL_LOG_LEVEL"

EXIT_OPEN_FAILED = 2


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="kvshell", description="Interactive shell for a TiKV cluster"
    )
    p.add_argument(
        "-pd",
        dest="pd_addr",
        default=DEFAULT_PD_ADDR,
        help=f"pd address (default: {DEFAULT_PD_ADDR}); memory:// for a local sandbox",
    )
    return p


def load_config(argv: Sequence[str], environ: Mapping[str, str]) -> ShellConfig:
    """Build the config from flags; a non-empty PD_ADDR overrides -pd."""
    argv = list(argv)
    pd_addr = environ.get(PD_ADDR_ENV, "")
    if pd_addr:
        argv += ["-pd", pd_addr]
    args = build_parser().parse_args(argv)

    return ShellConfig(
        pd_addr=args.pd_addr,
        log_level=environ.get(LOG_LEVEL_ENV, "WARNING").upper(),
    )


def setup_logging(level_name: str) -> None:
    """Diagnostics go to stderr so they never mix with command output."""
    logging.basicConfig(
        level=getattr(logging, level_name, logging.WARNING),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def main(argv: list[str] | None = None, environ: Mapping[str, str] | None = None) -> int:
    argv = argv if argv is not None else sys.argv[1:]
    environ = environ if environ is not None else os.environ
    config = load_config(argv, environ)
    setup_logging(config.log_level)

    try:
        storage = open_storage(config)
    except StoreOpenError as e:
        print(f"Error opening store: {e}", file=sys.stderr)
        return EXIT_OPEN_FAILED

    listener = SignalListener()
    listener.start()

    shell = Shell(
        Dispatcher(storage),
        prompt=config.prompt,
        history=History(config.history_file, config.history_length),
        on_interrupt=listener.handle,
    )
    try:
        return shell.run()
    finally:
        storage.close()


if __name__ == "__main__":
    raise SystemExit(main())
