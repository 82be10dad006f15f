"""Interactive loop, history, signals and the command-line entry point."""
