"""Core of the relay: approval registry, access gate, recipient list store, dispatch engine."""

from relaygate.core.engine import DispatchEngine
from relaygate.core.gate import AccessGate
from relaygate.core.recipients import RecipientListStore, parse_recipients
from relaygate.core.registry import ApprovalRegistry

__all__ = [
    "AccessGate",
    "ApprovalRegistry",
    "DispatchEngine",
    "RecipientListStore",
    "parse_recipients",
]
