"""Logging setup for the command-line entry points."""

from __future__ import annotations

import logging

from rich.logging import RichHandler


def configure_logging(level: str = "INFO") -> None:
    """Route all log records through a single ``RichHandler``.

    Safe to call more than once; the root handlers are replaced.
    """
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )
    # httpx logs every request at INFO, which would leak the bot token in URLs.
    logging.getLogger("httpx").setLevel(logging.WARNING)
