"""Access gate — stateless authorization decisions.

The admin and approved-sender roles are distinct: the admin identity may
mutate the registry without being approved, but must be approved like
anyone else to upload or dispatch.
"""

from __future__ import annotations

import logging

from relaygate.core.registry import ApprovalRegistry
from relaygate.errors import AuthorizationError, MalformedInputError
from relaygate.models.access import Action
from relaygate.models.identity import Identity, canonical_identity

logger = logging.getLogger(__name__)

_DENIAL_MESSAGES: dict[Action, str] = {
    Action.MUTATE_REGISTRY: "You are not authorized to manage users.",
    Action.UPLOAD: "You are not authorized to upload files.",
    Action.DISPATCH: "You are not authorized to send messages.",
}


class AccessGate:
    """Answers whether an identity may perform an action.

    Parameters
    ----------
    registry:
        The approval registry consulted for upload and dispatch.
    admin_id:
        The single admin identity.  Empty means no one may mutate the
        registry.
    """

    def __init__(self, registry: ApprovalRegistry, admin_id: int | str = "") -> None:
        self._registry = registry
        self._admin_id: Identity = canonical_identity(admin_id) if admin_id != "" else ""

    @property
    def admin_id(self) -> Identity:
        return self._admin_id

    def can_bootstrap(self, identity: int | str) -> bool:
        return True

    def can_mutate_registry(self, identity: int | str) -> bool:
        if not self._admin_id:
            return False
        try:
            return canonical_identity(identity) == self._admin_id
        except MalformedInputError:
            return False

    def can_upload(self, identity: int | str) -> bool:
        return self._registry.is_approved(identity)

    def can_dispatch(self, identity: int | str) -> bool:
        return self._registry.is_approved(identity)

    def is_permitted(self, action: Action, identity: int | str) -> bool:
        """Dispatch to the per-action decision."""
        checks = {
            Action.BOOTSTRAP: self.can_bootstrap,
            Action.MUTATE_REGISTRY: self.can_mutate_registry,
            Action.UPLOAD: self.can_upload,
            Action.DISPATCH: self.can_dispatch,
        }
        return checks[action](identity)

    def require(self, action: Action, identity: int | str) -> None:
        """Raise ``AuthorizationError`` unless *identity* may perform *action*."""
        if self.is_permitted(action, identity):
            return
        logger.warning("Denied %s for identity %s.", action.value, identity)
        raise AuthorizationError(
            f"Identity {identity} may not perform {action.value}",
            user_message=_DENIAL_MESSAGES.get(action),
        )
