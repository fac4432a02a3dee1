"""``relaygate send FILE MESSAGE`` — one-off broadcast from a local file.

Runs the same dispatch engine the bot uses, without the approval gate:
whoever can run the CLI already has the operator's credentials.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import httpx
import typer
from rich.console import Console
from rich.panel import Panel

from relaygate.bot.app import build_sender
from relaygate.config import RelayConfig
from relaygate.core.engine import DispatchEngine
from relaygate.core.recipients import RecipientListStore
from relaygate.log import configure_logging
from relaygate.models.dispatch import DeliveryOutcome, DispatchResult, RecipientList

console = Console()


def send_cmd(
    recipients_file: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        readable=True,
        help="Text file with one phone number per line.",
    ),
    message: str = typer.Argument(..., help="The message body to send."),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        "-n",
        help="Buffer messages in memory instead of sending them.",
    ),
    delay: Optional[float] = typer.Option(
        None,
        "--delay",
        "-d",
        min=0.0,
        help="Seconds between sends (defaults to RELAYGATE_SEND_DELAY_SECONDS).",
    ),
) -> None:
    """Send MESSAGE to every number in RECIPIENTS_FILE."""
    config = RelayConfig()
    configure_logging(config.log_level)

    if not dry_run and not config.has_sms_credentials:
        console.print(
            "[bold red]Twilio credentials are not configured.[/bold red] "
            "[dim]Use --dry-run to preview.[/dim]"
        )
        raise typer.Exit(code=1)

    store = RecipientListStore()
    recipients = store.set_from_upload(recipients_file.read_bytes())
    console.print(f"[dim]Loaded {len(recipients)} recipient(s) from {recipients_file}.[/dim]")

    delay_seconds = config.send_delay_seconds if delay is None else delay
    result = asyncio.run(_broadcast(config, recipients, message, delay_seconds, dry_run))
    _print_result(result, dry_run)
    if result.failed:
        raise typer.Exit(code=2)


async def _broadcast(
    config: RelayConfig,
    recipients: RecipientList,
    message: str,
    delay_seconds: float,
    dry_run: bool,
) -> DispatchResult:
    async with httpx.AsyncClient(timeout=config.http_timeout_seconds) as http:
        sender = build_sender(config, http, dry_run=dry_run)
        engine = DispatchEngine(sender, delay_seconds=delay_seconds)
        return await engine.dispatch(message, recipients, on_progress=_print_progress)


def _print_progress(outcome: DeliveryOutcome, position: int, total: int) -> None:
    if outcome.success:
        console.print(f"[green]{position}/{total}[/green] {outcome.address} [dim]{outcome.confirmation_id}[/dim]")
    else:
        console.print(f"[red]{position}/{total}[/red] {outcome.address} [red]{outcome.error}[/red]")


def _print_result(result: DispatchResult, dry_run: bool) -> None:
    mode = "DRY RUN" if dry_run else "LIVE"
    colour = "green" if result.failed == 0 else "yellow"
    console.print()
    console.print(
        Panel(
            "\n".join([
                f"[bold {colour}]{result.summary()}[/bold {colour}]",
                "",
                f"  [bold]Attempted:[/bold] {result.attempted}",
                f"  [bold]Sent:[/bold]      {result.succeeded}",
                f"  [bold]Failed:[/bold]    {result.failed}",
                f"  [bold]Duration:[/bold]  {result.duration_seconds:.1f}s",
            ]),
            title=f"RelayGate dispatch ({mode})",
            border_style=colour,
        )
    )
