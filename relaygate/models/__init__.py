"""RelayGate data models — Pydantic v2, frozen where they cross component seams."""

from relaygate.models.access import AccessState, Action
from relaygate.models.dispatch import (
    DeliveryOutcome,
    DispatchJob,
    DispatchResult,
    RecipientList,
)
from relaygate.models.identity import Identity, canonical_identity
from relaygate.models.inbound import DocumentRef, InboundMessage

__all__ = [
    "AccessState",
    "Action",
    "DeliveryOutcome",
    "DispatchJob",
    "DispatchResult",
    "DocumentRef",
    "Identity",
    "InboundMessage",
    "RecipientList",
    "canonical_identity",
]
