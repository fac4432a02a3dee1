"""``relaygate run`` — start the bot and poll until interrupted."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console

from relaygate.bot.app import build_application
from relaygate.config import RelayConfig
from relaygate.core.production_guard import (
    ProductionConfigError,
    enforce_production_constraints,
)
from relaygate.log import configure_logging

console = Console()


def run_cmd(
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        "-n",
        help="Buffer outbound SMS in memory instead of sending them.",
    ),
) -> None:
    """Start the Telegram bot.

    Settings come from RELAYGATE_* environment variables or a .env file.
    """
    config = RelayConfig()
    configure_logging(config.log_level)

    try:
        enforce_production_constraints(config)
    except ProductionConfigError as exc:
        console.print(f"[bold red]{exc}[/bold red]")
        raise typer.Exit(code=1)

    if not config.telegram_bot_token:
        console.print("[bold red]RELAYGATE_TELEGRAM_BOT_TOKEN is not set.[/bold red]")
        raise typer.Exit(code=1)
    if not dry_run and not config.has_sms_credentials:
        console.print(
            "[bold red]Twilio credentials are not configured.[/bold red] "
            "[dim]Use --dry-run to run without sending SMS.[/dim]"
        )
        raise typer.Exit(code=1)

    application = build_application(config, dry_run=dry_run)
    console.print(
        f"[bold green]RelayGate running[/bold green] "
        f"[dim](admin={config.admin_id or 'none'}, "
        f"approved={len(application.registry)}, "
        f"delay={config.send_delay_seconds}s)[/dim]"
    )
    try:
        asyncio.run(application.run())
    except KeyboardInterrupt:
        console.print("[dim]Stopped.[/dim]")
