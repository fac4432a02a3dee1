"""Main Typer application — imports and registers all CLI commands.

Entry point: ``relaygate`` (configured via pyproject.toml project.scripts).
"""

from __future__ import annotations

import typer

from relaygate import __version__
from relaygate.cli.commands.run_cmd import run_cmd
from relaygate.cli.commands.send import send_cmd
from relaygate.cli.commands.users import approve_cmd, remove_cmd, users_cmd

app = typer.Typer(
    name="relaygate",
    help="RelayGate: approval-gated bulk SMS relay.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# Register subcommands
app.command(name="run", help="Start the Telegram bot.")(run_cmd)
app.command(name="approve", help="Approve a user (offline registry edit).")(approve_cmd)
app.command(name="remove", help="Remove a user (offline registry edit).")(remove_cmd)
app.command(name="users", help="List approved users.")(users_cmd)
app.command(name="send", help="Send a message to every number in a file.")(send_cmd)


@app.command(name="version", help="Show the RelayGate version.")
def version_cmd() -> None:
    typer.echo(f"relaygate {__version__}")


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
