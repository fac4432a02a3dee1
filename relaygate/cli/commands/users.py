"""``relaygate approve|remove|users`` — offline registry management.

These edit the same JSON file the bot uses.  The bot reads the file only
at startup, so restart it to pick up offline changes.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from relaygate.config import RelayConfig
from relaygate.core.registry import ApprovalRegistry
from relaygate.errors import MalformedInputError

console = Console()

_REGISTRY_HELP = "Path to the approved-users JSON file (defaults to RELAYGATE_REGISTRY_PATH)."


def _open_registry(registry_path: Optional[Path]) -> ApprovalRegistry:
    return ApprovalRegistry(registry_path or RelayConfig().registry_path)


def approve_cmd(
    user_id: str = typer.Argument(..., help="The Telegram chat id to approve."),
    registry_path: Optional[Path] = typer.Option(None, "--registry", "-r", help=_REGISTRY_HELP),
) -> None:
    """Approve a user."""
    registry = _open_registry(registry_path)
    try:
        added = registry.approve(user_id)
    except MalformedInputError as exc:
        console.print(f"[bold red]Invalid user id:[/bold red] {exc}")
        raise typer.Exit(code=1)
    if added:
        console.print(f"[green]User {user_id.strip()} approved.[/green]")
    else:
        console.print(f"[yellow]User {user_id.strip()} is already approved.[/yellow]")


def remove_cmd(
    user_id: str = typer.Argument(..., help="The Telegram chat id to remove."),
    registry_path: Optional[Path] = typer.Option(None, "--registry", "-r", help=_REGISTRY_HELP),
) -> None:
    """Remove a user."""
    registry = _open_registry(registry_path)
    try:
        removed = registry.remove(user_id)
    except MalformedInputError as exc:
        console.print(f"[bold red]Invalid user id:[/bold red] {exc}")
        raise typer.Exit(code=1)
    if removed:
        console.print(f"[red]User {user_id.strip()} removed.[/red]")
    else:
        console.print(f"[yellow]User {user_id.strip()} was not approved.[/yellow]")


def users_cmd(
    registry_path: Optional[Path] = typer.Option(None, "--registry", "-r", help=_REGISTRY_HELP),
) -> None:
    """List approved users."""
    registry = _open_registry(registry_path)
    approved = registry.list_approved()
    if not approved:
        console.print("[dim]No approved users.[/dim]")
        return

    table = Table(title=f"Approved users ({registry.path})")
    table.add_column("#", justify="right", style="dim")
    table.add_column("User id", style="cyan")
    for i, ident in enumerate(approved, 1):
        table.add_row(str(i), ident)
    console.print(table)
