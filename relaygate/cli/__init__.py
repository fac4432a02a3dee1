"""RelayGate CLI — Typer-based command-line interface.

Provides the ``relaygate`` command with subcommands for running the bot,
managing approvals offline and sending a one-off broadcast from a file.

All output uses Rich for formatted terminal display.
"""
