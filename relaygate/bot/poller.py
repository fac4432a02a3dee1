"""Long-poll loop — pulls updates from Telegram and feeds the router."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, Protocol

from relaygate.bot.router import CommandRouter
from relaygate.errors import TransportError

logger = logging.getLogger(__name__)


class UpdateSource(Protocol):
    async def get_updates(self, offset: int | None = None, timeout: int = 30) -> list[dict[str, Any]]:
        ...


class BotRunner:
    """Polls for updates and hands each one to the command router.

    Parameters
    ----------
    source:
        Anything with ``get_updates`` (normally ``TelegramBotClient``).
    router:
        The command router.
    poll_timeout:
        Server-side long-poll window in seconds.
    error_pause:
        Pause after a failed poll before trying again.
    """

    def __init__(
        self,
        source: UpdateSource,
        router: CommandRouter,
        *,
        poll_timeout: int = 30,
        error_pause: float = 5.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._source = source
        self._router = router
        self._poll_timeout = poll_timeout
        self._error_pause = error_pause
        self._sleep = sleep
        self._offset: int | None = None

    @property
    def offset(self) -> int | None:
        return self._offset

    async def run_once(self) -> int:
        """Fetch one batch of updates and handle them; return how many."""
        updates = await self._source.get_updates(offset=self._offset, timeout=self._poll_timeout)
        for update in updates:
            update_id = update.get("update_id")
            if isinstance(update_id, int):
                self._offset = update_id + 1
            try:
                await self._router.handle_update(update)
            except Exception:  # noqa: BLE001
                logger.exception("Unhandled error while processing update %s.", update_id)
        return len(updates)

    async def run_forever(self, stop: asyncio.Event | None = None) -> None:
        """Poll until *stop* is set (or forever), then drain the dispatch."""
        stop = stop or asyncio.Event()
        logger.info("Bot polling started.")
        try:
            while not stop.is_set():
                try:
                    await self.run_once()
                except TransportError as exc:
                    logger.error("Polling failed: %s — retrying in %.1fs", exc, self._error_pause)
                    await self._sleep(self._error_pause)
        finally:
            if self._router.dispatch_in_flight:
                logger.info("Waiting for in-flight dispatch to finish.")
            await self._router.wait_idle()
            logger.info("Bot polling stopped.")
