"""Transport protocols for the relay's external collaborators.

The core depends only on these three capabilities:

* ``MessageSender`` — deliver one message to one address (outbound SMS).
* ``Notifier`` — send a status message to an identity (bot chat).
* ``FileFetcher`` — download the raw bytes of an uploaded document.

Concrete backends live in the sibling modules: ``telegram`` (Bot API),
``sms`` (Twilio REST API) and ``memory`` (in-process buffers for dry runs
and tests).
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class MessageSender(Protocol):
    """Protocol for one-shot outbound delivery."""

    async def send(self, address: str, body: str) -> str:
        """Deliver *body* to *address*.

        Returns
        -------
        str
            The provider-assigned confirmation id.

        Raises
        ------
        relaygate.errors.TransportError
            If the provider rejects the message or cannot be reached.
        """
        ...


@runtime_checkable
class Notifier(Protocol):
    """Protocol for status messages sent back to an identity."""

    async def notify(self, identity: str, text: str) -> None:
        ...


@runtime_checkable
class FileFetcher(Protocol):
    """Protocol for retrieving an uploaded document by opaque reference."""

    async def fetch(self, file_id: str) -> bytes:
        ...
