"""Command router — maps inbound bot messages onto gate checks and core calls.

Commands
--------
``/start``            anyone; reports the caller's approval status.
``/approve <id>``     admin only; approves *id* and welcomes them.
``/remove <id>``      admin only; revokes *id*.
document upload       approved only; replaces the live recipient list.
``/send <message>``   approved only; broadcasts to the live list.

Every ``RelayError`` raised while handling a message is turned into its
``user_message`` and sent back to the originating chat.  Dispatches run
as a background task so the bot keeps answering while a batch is sending.
"""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Awaitable, Callable
from typing import Any

from relaygate.core.engine import DispatchEngine
from relaygate.core.gate import AccessGate
from relaygate.core.recipients import RecipientListStore
from relaygate.core.registry import ApprovalRegistry
from relaygate.errors import (
    DispatchInProgressError,
    MalformedInputError,
    RelayError,
    TransportError,
)
from relaygate.models.access import AccessState, Action
from relaygate.models.dispatch import DispatchJob, DispatchResult
from relaygate.models.identity import Identity, canonical_identity
from relaygate.models.inbound import DocumentRef, InboundMessage
from relaygate.transports import FileFetcher, Notifier

logger = logging.getLogger(__name__)

_COMMAND_RE = re.compile(r"^/(?P<name>[A-Za-z_]+)(?:@\w+)?(?:\s+(?P<arg>.*))?$", re.DOTALL)

WELCOME_TEXT = "Welcome! Your access is being verified."
STATUS_TEXT: dict[AccessState, str] = {
    AccessState.APPROVED: "You are approved to use this bot.",
    AccessState.PENDING: "You are not approved to use this bot. Please contact the admin.",
    AccessState.REMOVED: "Your access has been removed. Please contact the admin.",
}
APPROVED_NOTICE = (
    "You have been approved to use the bot. "
    "You can now upload a .txt file containing phone numbers."
)


def parse_command(text: str) -> tuple[str, str] | None:
    """Split ``/name arg`` into ``(name, arg)``; ``None`` if not a command.

    >>> parse_command("/send Hello there")
    ('send', 'Hello there')
    >>> parse_command("/start@relay_bot")
    ('start', '')
    """
    match = _COMMAND_RE.match(text.strip())
    if match is None:
        return None
    return match.group("name").lower(), (match.group("arg") or "").strip()


class CommandRouter:
    """Routes inbound messages to the registry, list store and engine."""

    def __init__(
        self,
        registry: ApprovalRegistry,
        gate: AccessGate,
        store: RecipientListStore,
        engine: DispatchEngine,
        notifier: Notifier,
        fetcher: FileFetcher,
    ) -> None:
        self._registry = registry
        self._gate = gate
        self._store = store
        self._engine = engine
        self._notifier = notifier
        self._fetcher = fetcher
        self._active_dispatch: asyncio.Task[DispatchResult | None] | None = None
        self._commands: dict[str, Callable[[Identity, str], Awaitable[None]]] = {
            "start": self._handle_start,
            "approve": self._handle_approve,
            "remove": self._handle_remove,
            "send": self._handle_send,
        }

    @property
    def dispatch_in_flight(self) -> bool:
        return self._active_dispatch is not None and not self._active_dispatch.done()

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    async def handle_update(self, update: dict[str, Any]) -> None:
        """Handle one raw Bot API update."""
        try:
            message = InboundMessage.from_update(update)
        except MalformedInputError as exc:
            logger.warning("Skipping malformed update: %s", exc)
            return
        if message is None:
            logger.debug("Ignoring non-message update %s", update.get("update_id"))
            return
        await self.handle_message(message)

    async def handle_message(self, message: InboundMessage) -> None:
        """Handle one parsed message, replying with any user-facing error."""
        try:
            if message.document is not None:
                await self._handle_upload(message.chat_id, message.document)
                return
            parsed = parse_command(message.text)
            if parsed is None:
                logger.debug("Ignoring non-command text from %s", message.chat_id)
                return
            name, arg = parsed
            handler = self._commands.get(name)
            if handler is None:
                logger.debug("Ignoring unknown command /%s from %s", name, message.chat_id)
                return
            await handler(message.chat_id, arg)
        except RelayError as exc:
            logger.info("Request from %s refused: %s", message.chat_id, exc)
            await self._reply(message.chat_id, exc.user_message)

    async def wait_idle(self) -> DispatchResult | None:
        """Wait for the in-flight dispatch, if any, and return its result."""
        task = self._active_dispatch
        if task is None:
            return None
        return await task

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    async def _handle_start(self, chat_id: Identity, arg: str) -> None:
        self._gate.require(Action.BOOTSTRAP, chat_id)
        await self._reply(chat_id, WELCOME_TEXT)
        await self._reply(chat_id, STATUS_TEXT[self._registry.state(chat_id)])

    async def _handle_approve(self, chat_id: Identity, arg: str) -> None:
        self._gate.require(Action.MUTATE_REGISTRY, chat_id)
        target = self._target_identity(arg, "approve")
        if self._registry.approve(target):
            await self._reply(target, APPROVED_NOTICE)
            await self._reply(chat_id, f"User {target} has been approved.")
        else:
            await self._reply(chat_id, f"User {target} is already approved.")

    async def _handle_remove(self, chat_id: Identity, arg: str) -> None:
        self._gate.require(Action.MUTATE_REGISTRY, chat_id)
        target = self._target_identity(arg, "remove")
        if self._registry.remove(target):
            await self._reply(chat_id, f"User {target} has been removed.")
        else:
            await self._reply(chat_id, f"User {target} was not approved.")

    async def _handle_upload(self, chat_id: Identity, document: DocumentRef) -> None:
        self._gate.require(Action.UPLOAD, chat_id)
        logger.info(
            "Received file %s from chat %s",
            document.file_name or document.file_id,
            chat_id,
        )
        data = await self._fetcher.fetch(document.file_id)
        recipients = self._store.set_from_upload(data, uploaded_by=chat_id)
        await self._reply(
            chat_id,
            f"File received with {len(recipients)} number(s). "
            "Use the command /send <message> to send bulk SMS.",
        )

    async def _handle_send(self, chat_id: Identity, arg: str) -> None:
        self._gate.require(Action.DISPATCH, chat_id)
        if not arg:
            raise MalformedInputError(
                "Empty /send message", user_message="Usage: /send <message>"
            )
        if self.dispatch_in_flight or self._engine.busy:
            raise DispatchInProgressError(f"Dispatch requested by {chat_id} while busy")

        recipients = self._store.require_current()
        job = DispatchJob(message=arg, recipients=recipients, requested_by=chat_id)
        await self._reply(
            chat_id, f"Sending your message to {len(recipients)} recipient(s)..."
        )
        self._active_dispatch = asyncio.create_task(
            self._run_dispatch(job), name=f"dispatch-{chat_id}"
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _run_dispatch(self, job: DispatchJob) -> DispatchResult | None:
        requested_by = job.requested_by or ""
        try:
            result = await self._engine.run_job(job)
        except RelayError as exc:
            await self._reply(requested_by, exc.user_message)
            return None
        except Exception:
            logger.exception("Dispatch for %s aborted unexpectedly.", requested_by)
            await self._reply(requested_by, RelayError.default_user_message)
            return None
        await self._reply(requested_by, result.summary())
        return result

    @staticmethod
    def _target_identity(arg: str, command: str) -> Identity:
        if not arg:
            raise MalformedInputError(
                f"/{command} without an argument",
                user_message=f"Usage: /{command} <user_id>",
            )
        return canonical_identity(arg.split()[0])

    async def _reply(self, chat_id: Identity, text: str) -> None:
        if not chat_id:
            return
        try:
            await self._notifier.notify(chat_id, text)
        except TransportError:
            logger.exception("Failed to deliver status message to %s.", chat_id)
