"""Approval registry — the durable set of approved identities.

The registry is a local JSON file (a flat array of identity strings, by
default ``.relaygate/approved_users.json``).  It is hydrated once at
construction and fully rewritten after every mutation, before the caller
gets a chance to answer the requester.

The in-memory set is the operational truth.  A failed flush is logged and
never rolls back the mutation.
A missing or unreadable file yields an empty registry so the admin can
always bootstrap approvals.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path

from relaygate.errors import MalformedInputError, PersistenceError
from relaygate.models.access import AccessState
from relaygate.models.identity import Identity, canonical_identity

logger = logging.getLogger(__name__)


class ApprovalRegistry:
    """Durable set of approved identities.

    Parameters
    ----------
    registry_path:
        Path to the registry JSON file.  Created on first ``persist()``
        if it does not yet exist.

    Examples
    --------
    >>> from pathlib import Path
    >>> registry = ApprovalRegistry(Path("/tmp/relaygate_doc.json"))
    >>> registry.approve(42)
    True
    >>> registry.is_approved("42")
    True
    """

    def __init__(self, registry_path: Path = Path(".relaygate/approved_users.json")) -> None:
        self._registry_path = Path(registry_path)
        self._lock = threading.RLock()
        self._approved: set[Identity] = set()
        # Identities removed during this process lifetime (not persisted).
        self._removed: set[Identity] = set()
        self.reload()

    @property
    def path(self) -> Path:
        return self._registry_path

    # -- Mutation -----------------------------------------------------------

    def approve(self, identity: int | str) -> bool:
        """Approve *identity* and persist.

        Returns ``True`` if the identity was newly added, ``False`` if it
        was already approved (a no-op, not an error).
        """
        ident = canonical_identity(identity)
        with self._lock:
            if ident in self._approved:
                logger.debug("Identity %s already approved.", ident)
                return False
            self._approved.add(ident)
            self._removed.discard(ident)
            self._flush()
        logger.info("User %s approved.", ident)
        return True

    def remove(self, identity: int | str) -> bool:
        """Revoke approval for *identity* and persist.

        Returns ``True`` if the identity was present, ``False`` otherwise.
        """
        ident = canonical_identity(identity)
        with self._lock:
            if ident not in self._approved:
                logger.debug("Identity %s not approved — nothing to remove.", ident)
                return False
            self._approved.discard(ident)
            self._removed.add(ident)
            self._flush()
        logger.info("User %s removed.", ident)
        return True

    # -- Lookup -------------------------------------------------------------

    def is_approved(self, identity: int | str) -> bool:
        """Return ``True`` if *identity* is currently approved."""
        try:
            ident = canonical_identity(identity)
        except MalformedInputError:
            return False
        with self._lock:
            return ident in self._approved

    def state(self, identity: int | str) -> AccessState:
        """Return the approval state of *identity*.

        ``REMOVED`` is only reported for identities removed since this
        process started; after a restart they read as ``PENDING``.
        """
        ident = canonical_identity(identity)
        with self._lock:
            if ident in self._approved:
                return AccessState.APPROVED
            if ident in self._removed:
                return AccessState.REMOVED
        return AccessState.PENDING

    def list_approved(self) -> list[Identity]:
        """Return the approved identities, sorted."""
        with self._lock:
            return sorted(self._approved)

    def __contains__(self, identity: object) -> bool:
        if not isinstance(identity, (int, str)):
            return False
        return self.is_approved(identity)

    def __len__(self) -> int:
        with self._lock:
            return len(self._approved)

    # -- Persistence --------------------------------------------------------

    def persist(self) -> None:
        """Write the full approved set to the registry file.

        Raises
        ------
        PersistenceError
            If the file cannot be written.
        """
        with self._lock:
            data = sorted(self._approved)
        try:
            self._registry_path.parent.mkdir(parents=True, exist_ok=True)
            self._registry_path.write_text(
                json.dumps(data, indent=2),
                encoding="utf-8",
            )
        except OSError as exc:
            raise PersistenceError(
                f"Failed to write registry to {self._registry_path}: {exc}"
            ) from exc
        logger.debug("Persisted %d approved identities to %s.", len(data), self._registry_path)

    def load(self) -> set[Identity]:
        """Read the approved set from the registry file.

        Returns an empty set if the file is missing or cannot be parsed;
        loading is never fatal.
        """
        if not self._registry_path.exists():
            logger.debug("No registry file at %s — starting empty.", self._registry_path)
            return set()
        try:
            return self._parse(self._registry_path.read_text(encoding="utf-8"))
        except (OSError, ValueError, MalformedInputError):
            logger.exception(
                "Failed to load registry from %s — starting empty.", self._registry_path
            )
            return set()

    def reload(self) -> None:
        """Replace the in-memory set with the contents of the registry file."""
        loaded = self.load()
        with self._lock:
            self._approved = loaded
        logger.info("Loaded %d approved identities from %s.", len(loaded), self._registry_path)

    def _flush(self) -> None:
        try:
            self.persist()
        except PersistenceError:
            logger.exception("Registry flush failed — in-memory state kept.")

    @staticmethod
    def _parse(text: str) -> set[Identity]:
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as exc:
            raise MalformedInputError(f"Registry is not valid JSON: {exc}") from exc
        if not isinstance(raw, list):
            raise MalformedInputError(
                f"Registry must be a JSON array, got {type(raw).__name__}"
            )
        return {canonical_identity(item) for item in raw}
