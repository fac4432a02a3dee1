"""Access-control models — approval states and gated actions."""

from __future__ import annotations

from enum import Enum


class AccessState(str, Enum):
    """Approval state of a requester."""

    PENDING = "pending"
    APPROVED = "approved"
    REMOVED = "removed"


class Action(str, Enum):
    """Actions the access gate decides on."""

    BOOTSTRAP = "bootstrap"
    MUTATE_REGISTRY = "mutate_registry"
    UPLOAD = "upload"
    DISPATCH = "dispatch"
