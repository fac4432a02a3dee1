"""In-memory transports — buffer payloads instead of delivering them.

Used for ``relaygate send --dry-run`` and by the test suite.  Nothing
leaves the process; call ``flush()`` to retrieve and clear what was
buffered.
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict

from relaygate.errors import TransportError

logger = logging.getLogger(__name__)


class OutboundRecord(BaseModel):
    """One buffered delivery."""

    model_config = ConfigDict(frozen=True)

    address: str
    body: str
    confirmation_id: str


class InMemorySender:
    """A ``MessageSender`` that records sends and fabricates confirmation ids.

    Parameters
    ----------
    failing_addresses:
        Addresses for which ``send`` raises ``TransportError``.
    """

    def __init__(self, failing_addresses: Iterable[str] = ()) -> None:
        self._failing = set(failing_addresses)
        self._counter = itertools.count(1)
        self._pending: list[OutboundRecord] = []
        self.attempts: list[str] = []

    async def send(self, address: str, body: str) -> str:
        self.attempts.append(address)
        if address in self._failing:
            raise TransportError(f"Simulated failure for {address}")
        record = OutboundRecord(
            address=address,
            body=body,
            confirmation_id=f"DRY{next(self._counter):08d}",
        )
        self._pending.append(record)
        logger.debug("InMemorySender: buffered message to %s", address)
        return record.confirmation_id

    def flush(self) -> list[OutboundRecord]:
        """Return and clear all buffered sends."""
        records = list(self._pending)
        self._pending.clear()
        return records

    @property
    def pending_count(self) -> int:
        return len(self._pending)


class InMemoryNotifier:
    """A ``Notifier`` and ``FileFetcher`` backed by dicts and lists."""

    def __init__(self, files: dict[str, bytes] | None = None) -> None:
        self._files = dict(files or {})
        self._pending: list[tuple[str, str]] = []

    def add_file(self, file_id: str, data: bytes) -> None:
        self._files[file_id] = data

    async def notify(self, identity: str, text: str) -> None:
        self._pending.append((identity, text))

    async def fetch(self, file_id: str) -> bytes:
        try:
            return self._files[file_id]
        except KeyError:
            raise TransportError(
                f"Unknown file {file_id}",
                user_message="There was an error downloading the file.",
            ) from None

    def flush(self) -> list[tuple[str, str]]:
        """Return and clear all buffered notifications."""
        messages = list(self._pending)
        self._pending.clear()
        return messages

    def messages_for(self, identity: str) -> list[str]:
        """Buffered notification texts for *identity*, without clearing."""
        return [text for ident, text in self._pending if ident == identity]

    @property
    def pending_count(self) -> int:
        return len(self._pending)
