"""Recipient list store — the single live recipient list.

Exactly one list is live at a time and it belongs to no particular
uploader: the last successful upload wins.  Lists are immutable, so a
dispatch that grabbed the current list keeps sending to it even if a new
upload replaces it mid-batch.
"""

from __future__ import annotations

import logging
import threading

from relaygate.errors import NotFoundError
from relaygate.models.dispatch import RecipientList
from relaygate.models.identity import canonical_identity

logger = logging.getLogger(__name__)


def parse_recipients(raw: bytes | str) -> tuple[str, ...]:
    """Split an uploaded payload into addresses, dropping blank lines.

    >>> parse_recipients("+1555\\n\\n+1556\\n")
    ('+1555', '+1556')
    """
    if isinstance(raw, bytes):
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            logger.warning(
                "Upload is not valid UTF-8 (%s); undecodable bytes replaced. "
                "Expect delivery failures for the affected lines.",
                exc,
            )
            text = raw.decode("utf-8", errors="replace")
    else:
        text = raw
    if "\x00" in text:
        logger.warning(
            "Upload contains NUL characters; it may be UTF-16 or binary rather than plain text."
        )
    # Strip a UTF-8 BOM left behind by some editors.
    text = text.lstrip("\ufeff")
    return tuple(line.strip() for line in text.splitlines() if line.strip())


class RecipientListStore:
    """Holds the most recently uploaded recipient list."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._current: RecipientList | None = None

    def set_from_upload(
        self,
        raw: bytes | str,
        uploaded_by: int | str | None = None,
    ) -> RecipientList:
        """Parse *raw* and make it the live list, replacing any previous one."""
        recipients = RecipientList(
            addresses=parse_recipients(raw),
            uploaded_by=canonical_identity(uploaded_by) if uploaded_by is not None else None,
        )
        with self._lock:
            self._current = recipients
        logger.info(
            "Stored recipient list with %d address(es) from %s.",
            len(recipients),
            recipients.uploaded_by or "unknown",
        )
        return recipients

    def get_current(self) -> RecipientList | None:
        """Return the live list, or ``None`` if nothing has been uploaded."""
        with self._lock:
            return self._current

    def require_current(self) -> RecipientList:
        """Return the live list or raise ``NotFoundError``."""
        current = self.get_current()
        if current is None:
            raise NotFoundError("No recipient list has been uploaded")
        return current

    def clear(self) -> None:
        with self._lock:
            self._current = None
