"""Telegram Bot API client — inbound updates, uploads and notifications.

Implements the ``Notifier`` and ``FileFetcher`` protocols over
``httpx.AsyncClient``.  Every Bot API reply is an ``{"ok": ..., "result": ...}``
object; ``ok=false`` replies and HTTP failures both surface as
``TransportError``.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict

from relaygate.errors import TransportError

logger = logging.getLogger(__name__)

TELEGRAM_API_BASE = "https://api.telegram.org"


class TelegramPayload(BaseModel):
    """A Telegram Bot API sendMessage payload."""

    model_config = ConfigDict(frozen=True)

    chat_id: str
    text: str
    disable_web_page_preview: bool = True


class TelegramBotClient:
    """Thin async client for the handful of Bot API methods the relay uses.

    Parameters
    ----------
    bot_token:
        The bot token issued by BotFather.
    api_base:
        Bot API root.  Overridable for a self-hosted Bot API server.
    client:
        An ``httpx.AsyncClient`` to reuse.  When omitted one is created
        and closed by ``aclose()``.
    timeout:
        Request timeout in seconds for non-polling calls.
    """

    def __init__(
        self,
        bot_token: str,
        *,
        api_base: str = TELEGRAM_API_BASE,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        if not bot_token:
            raise ValueError("A Telegram bot token is required")
        self._token = bot_token
        self._api_base = api_base.rstrip("/")
        self._timeout = timeout
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # -- Bot API methods ----------------------------------------------------

    async def get_updates(self, offset: int | None = None, timeout: int = 30) -> list[dict[str, Any]]:
        """Long-poll for new updates starting at *offset*."""
        params: dict[str, Any] = {"timeout": timeout, "allowed_updates": '["message"]'}
        if offset is not None:
            params["offset"] = offset
        # The HTTP timeout must outlast the server-side long-poll window.
        result = await self._call("getUpdates", params=params, timeout=timeout + self._timeout)
        return list(result or [])

    async def send_message(self, chat_id: str, text: str) -> dict[str, Any]:
        payload = TelegramPayload(chat_id=chat_id, text=text)
        return await self._call("sendMessage", json=payload.model_dump())

    async def get_file(self, file_id: str) -> dict[str, Any]:
        return await self._call("getFile", params={"file_id": file_id})

    async def download_file(self, file_path: str) -> bytes:
        url = f"{self._api_base}/file/bot{self._token}/{file_path}"
        try:
            response = await self._client.get(url, timeout=self._timeout)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise TransportError(
                f"Error downloading file {file_path}: {exc}",
                user_message="There was an error downloading the file.",
            ) from exc
        return response.content

    # -- Protocol implementations ------------------------------------------

    async def notify(self, identity: str, text: str) -> None:
        await self.send_message(identity, text)

    async def fetch(self, file_id: str) -> bytes:
        info = await self.get_file(file_id)
        file_path = info.get("file_path")
        if not file_path:
            raise TransportError(
                f"getFile returned no file_path for {file_id}",
                user_message="There was an error downloading the file.",
            )
        data = await self.download_file(file_path)
        logger.debug("Downloaded %d byte(s) for file %s.", len(data), file_id)
        return data

    # -- Internals ----------------------------------------------------------

    def _method_url(self, method: str) -> str:
        return f"{self._api_base}/bot{self._token}/{method}"

    async def _call(self, method: str, *, timeout: float | None = None, **kwargs: Any) -> Any:
        try:
            response = await self._client.post(
                self._method_url(method),
                timeout=timeout or self._timeout,
                **kwargs,
            )
        except httpx.HTTPError as exc:
            raise TransportError(f"Telegram {method} failed: {exc}") from exc

        try:
            body = response.json()
        except ValueError as exc:
            raise TransportError(
                f"Telegram {method} returned non-JSON (HTTP {response.status_code})"
            ) from exc

        if not body.get("ok"):
            raise TransportError(
                f"Telegram {method} rejected: {body.get('error_code')} "
                f"{body.get('description', 'unknown error')}"
            )
        return body.get("result")
