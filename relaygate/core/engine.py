"""Dispatch engine — sequential, throttled, failure-isolating fan-out.

Recipients are contacted one at a time in upload order.  Consecutive send
attempts are spaced by at least ``delay_seconds`` to respect the outbound
provider's throughput limit.  Each recipient gets exactly one attempt; a
failure is logged and counted, and the loop moves on.

This module's logger is the operational log: one INFO line per delivered
message (with the confirmation id) and one ERROR line per failure.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from typing import Any

from relaygate.errors import DispatchInProgressError
from relaygate.models.dispatch import (
    DeliveryOutcome,
    DispatchJob,
    DispatchResult,
    RecipientList,
)
from relaygate.transports import MessageSender

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[DeliveryOutcome, int, int], Any]


class DispatchEngine:
    """Sends one message to every address of a recipient list.

    At most one dispatch runs at a time; a second call while one is in
    flight raises ``DispatchInProgressError`` instead of interleaving.

    Parameters
    ----------
    sender:
        The outbound transport.
    delay_seconds:
        Minimum spacing between consecutive send attempts.
    sleep:
        Coroutine used to wait between sends.  Injected by tests.
    clock:
        Monotonic clock used to enforce the spacing.  Injected by tests.
    """

    def __init__(
        self,
        sender: MessageSender,
        *,
        delay_seconds: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if delay_seconds < 0:
            raise ValueError(f"delay_seconds must be >= 0, got {delay_seconds}")
        self._sender = sender
        self._delay = delay_seconds
        self._sleep = sleep
        self._clock = clock
        self._busy = False

    @property
    def busy(self) -> bool:
        """Whether a dispatch is currently in flight."""
        return self._busy

    @property
    def delay_seconds(self) -> float:
        return self._delay

    @property
    def sender(self) -> MessageSender:
        return self._sender

    async def run_job(
        self,
        job: DispatchJob,
        on_progress: ProgressCallback | None = None,
    ) -> DispatchResult:
        """Run a ``DispatchJob``."""
        logger.info(
            "Dispatch requested by %s for %d recipient(s).",
            job.requested_by or "unknown",
            len(job.recipients),
        )
        return await self.dispatch(job.message, job.recipients, on_progress)

    async def dispatch(
        self,
        message: str,
        recipients: RecipientList,
        on_progress: ProgressCallback | None = None,
    ) -> DispatchResult:
        """Send *message* to every address in *recipients*, in order.

        An empty list is legal and yields a zero-count result.  No error
        raised by the sender escapes this method.

        Raises
        ------
        DispatchInProgressError
            If another dispatch is still running.
        """
        if self._busy:
            raise DispatchInProgressError("A dispatch is already running")
        self._busy = True
        try:
            return await self._run(message, recipients.addresses, on_progress)
        finally:
            self._busy = False

    async def _run(
        self,
        message: str,
        addresses: tuple[str, ...],
        on_progress: ProgressCallback | None,
    ) -> DispatchResult:
        started_at = datetime.now(timezone.utc)
        total = len(addresses)
        succeeded = 0
        failed = 0
        last_attempt: float | None = None

        for index, address in enumerate(addresses):
            if last_attempt is not None:
                await self._wait_for_slot(last_attempt)
            last_attempt = self._clock()

            outcome = await self._send_one(address, message)
            if outcome.success:
                succeeded += 1
            else:
                failed += 1

            if on_progress is not None:
                await self._report_progress(on_progress, outcome, index + 1, total)

        result = DispatchResult(
            attempted=total,
            succeeded=succeeded,
            failed=failed,
            started_at=started_at,
            completed_at=datetime.now(timezone.utc),
        )
        logger.info(
            "Dispatch complete: %d attempted, %d sent, %d failed.",
            result.attempted,
            result.succeeded,
            result.failed,
        )
        return result

    async def _wait_for_slot(self, last_attempt: float) -> None:
        remaining = self._delay - (self._clock() - last_attempt)
        if remaining > 0:
            await self._sleep(remaining)

    async def _send_one(self, address: str, message: str) -> DeliveryOutcome:
        try:
            confirmation_id = await self._sender.send(address, message)
        except Exception as exc:  # noqa: BLE001
            logger.error("Error sending message to %s: %s", address, exc)
            return DeliveryOutcome(address=address, success=False, error=str(exc))
        logger.info("Message sent to %s: %s", address, confirmation_id)
        return DeliveryOutcome(
            address=address,
            success=True,
            confirmation_id=str(confirmation_id),
        )

    @staticmethod
    async def _report_progress(
        callback: ProgressCallback,
        outcome: DeliveryOutcome,
        position: int,
        total: int,
    ) -> None:
        try:
            ret = callback(outcome, position, total)
            if inspect.isawaitable(ret):
                await ret
        except Exception:  # noqa: BLE001
            logger.exception("Progress callback failed at %d/%d.", position, total)
