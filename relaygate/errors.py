"""Error taxonomy for the relay.

Every error carries a ``user_message``: the plain status text the command
router sends back to the originating identity.  Only the router turns
errors into messages; the core raises them and never talks to users.
"""

from __future__ import annotations


class RelayError(RuntimeError):
    """Base class for all relay errors."""

    default_user_message = "Something went wrong. Please try again later."

    def __init__(self, message: str = "", *, user_message: str | None = None) -> None:
        super().__init__(message or self.default_user_message)
        self.user_message = user_message or self.default_user_message


class AuthorizationError(RelayError):
    """The acting identity lacks the role the action requires.

    Non-fatal; no state is changed.
    """

    default_user_message = "You are not authorized to do that."


class NotFoundError(RelayError):
    """A dispatch was requested but no recipient list has been uploaded."""

    default_user_message = "No recipient list uploaded yet. Upload a .txt file first."


class PersistenceError(RelayError):
    """Flushing the approved-identity set to storage failed.

    Logged only; the in-memory registry stays authoritative.
    """

    default_user_message = "Approval state could not be saved."


class TransportError(RelayError):
    """An outbound or inbound transport call failed."""

    default_user_message = "The message provider rejected the request."


class MalformedInputError(RelayError):
    """Input (stored state, an identity, an update) could not be parsed."""

    default_user_message = "That input could not be understood."


class DispatchInProgressError(RelayError):
    """A dispatch was requested while another one is still sending."""

    default_user_message = "A dispatch is already in progress. Try again when it finishes."
