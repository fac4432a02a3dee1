"""Identity canonicalisation.

Telegram hands out chat ids as integers, command arguments arrive as text
and the registry file may hold either.  Every ingress path funnels through
``canonical_identity`` so set membership never diverges between ``42``
and ``"42"``.
"""

from __future__ import annotations

from relaygate.errors import MalformedInputError

Identity = str


def canonical_identity(value: int | str) -> Identity:
    """Return the canonical textual form of an identity.

    Examples
    --------
    >>> canonical_identity(42)
    '42'
    >>> canonical_identity("  42 ")
    '42'
    """
    # bool is an int subclass; True must not become "1".
    if isinstance(value, bool):
        raise MalformedInputError(f"Invalid identity: {value!r}")
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        text = value.strip()
        if text:
            return text
    raise MalformedInputError(f"Invalid identity: {value!r}")
