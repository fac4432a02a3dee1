"""Composition root — builds the relay from a ``RelayConfig``.

The registry and recipient list store are constructed once here and
handed to the router and engine; nothing else holds process-wide state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from relaygate.bot.poller import BotRunner
from relaygate.bot.router import CommandRouter
from relaygate.config import RelayConfig
from relaygate.core.engine import DispatchEngine
from relaygate.core.gate import AccessGate
from relaygate.core.recipients import RecipientListStore
from relaygate.core.registry import ApprovalRegistry
from relaygate.transports import MessageSender
from relaygate.transports.memory import InMemorySender
from relaygate.transports.sms import TwilioSmsSender
from relaygate.transports.telegram import TelegramBotClient

logger = logging.getLogger(__name__)


@dataclass
class Application:
    """Everything a running relay owns."""

    config: RelayConfig
    http: httpx.AsyncClient
    registry: ApprovalRegistry
    store: RecipientListStore
    engine: DispatchEngine
    router: CommandRouter
    runner: BotRunner

    async def run(self) -> None:
        try:
            await self.runner.run_forever()
        finally:
            await self.http.aclose()


def build_sender(
    config: RelayConfig,
    http: httpx.AsyncClient,
    *,
    dry_run: bool = False,
) -> MessageSender:
    """Return the Twilio sender, or an in-memory one for dry runs."""
    if dry_run:
        logger.warning("Dry-run mode — no SMS will be delivered.")
        return InMemorySender()
    return TwilioSmsSender(
        config.twilio_account_sid,
        config.twilio_auth_token,
        config.twilio_from_number,
        api_base=config.twilio_api_base,
        client=http,
    )


def build_application(config: RelayConfig, *, dry_run: bool = False) -> Application:
    """Wire registry, gate, store, engine, router and poll loop."""
    http = httpx.AsyncClient(timeout=config.http_timeout_seconds)
    telegram = TelegramBotClient(
        config.telegram_bot_token,
        api_base=config.telegram_api_base,
        client=http,
        timeout=config.http_timeout_seconds,
    )
    registry = ApprovalRegistry(config.registry_path)
    gate = AccessGate(registry, config.admin_id)
    store = RecipientListStore()
    engine = DispatchEngine(
        build_sender(config, http, dry_run=dry_run),
        delay_seconds=config.send_delay_seconds,
    )
    router = CommandRouter(registry, gate, store, engine, notifier=telegram, fetcher=telegram)
    runner = BotRunner(
        telegram,
        router,
        poll_timeout=config.poll_timeout_seconds,
        error_pause=config.poll_error_pause_seconds,
    )
    if not config.admin_id:
        logger.warning("No admin id configured — /approve and /remove are disabled.")
    return Application(
        config=config,
        http=http,
        registry=registry,
        store=store,
        engine=engine,
        router=router,
        runner=runner,
    )
