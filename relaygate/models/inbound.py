"""Inbound event models parsed from Telegram Bot API updates."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict

from relaygate.errors import MalformedInputError
from relaygate.models.identity import Identity, canonical_identity


class DocumentRef(BaseModel):
    """An uploaded document, referenced by its opaque Telegram file id."""

    model_config = ConfigDict(frozen=True)

    file_id: str
    file_name: str = ""
    mime_type: str = ""


class InboundMessage(BaseModel):
    """A single message from a user: command text and/or a document."""

    model_config = ConfigDict(frozen=True)

    update_id: int = 0
    chat_id: Identity
    text: str = ""
    document: DocumentRef | None = None

    @classmethod
    def from_update(cls, update: dict[str, Any]) -> InboundMessage | None:
        """Build an ``InboundMessage`` from a raw update.

        Returns ``None`` for updates that carry no message (edits, callback
        queries, channel posts).  Raises ``MalformedInputError`` if a
        message is present but has no chat id.
        """
        message = update.get("message")
        if not isinstance(message, dict):
            return None
        chat = message.get("chat") or {}
        if "id" not in chat:
            raise MalformedInputError(
                f"Update {update.get('update_id')} has a message without a chat id"
            )

        document = None
        raw_doc = message.get("document")
        if isinstance(raw_doc, dict) and raw_doc.get("file_id"):
            document = DocumentRef(
                file_id=raw_doc["file_id"],
                file_name=raw_doc.get("file_name", ""),
                mime_type=raw_doc.get("mime_type", ""),
            )

        return cls(
            update_id=int(update.get("update_id", 0)),
            chat_id=canonical_identity(chat["id"]),
            text=message.get("text") or message.get("caption") or "",
            document=document,
        )
