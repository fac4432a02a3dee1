"""Production configuration guard — enforces hard constraints in production.

Runs once at startup and fails hard (raises ``ProductionConfigError``) if
the relay would start in production without an admin, without
credentials, or with a send delay below the provider's rate limit.
"""

from __future__ import annotations

import logging

from relaygate.config import RelayConfig

logger = logging.getLogger(__name__)

# Provider throughput contract: at most one send per second.
MIN_PRODUCTION_SEND_DELAY = 1.0

PRODUCTION_REQUIRED_SETTINGS: list[str] = [
    "admin_id",
    "telegram_bot_token",
    "twilio_account_sid",
    "twilio_auth_token",
    "twilio_from_number",
]


class ProductionConfigError(RuntimeError):
    """Raised when production configuration constraints are violated.

    The process should exit; this must not be caught and ignored.
    """


def enforce_production_constraints(config: RelayConfig) -> None:
    """Validate all production-critical configuration constraints.

    Constraints enforced
    --------------------
    1. Admin id, bot token and Twilio credentials must be configured.
    2. ``send_delay_seconds`` must be at least ``MIN_PRODUCTION_SEND_DELAY``.

    Raises
    ------
    ProductionConfigError
        If any production constraint is violated.
    """
    if not config.is_production:
        return

    violations: list[str] = []

    for name in PRODUCTION_REQUIRED_SETTINGS:
        if not getattr(config, name, ""):
            violations.append(
                f"'{name}' is required in production but not configured. "
                f"Set RELAYGATE_{name.upper()}."
            )

    if config.send_delay_seconds < MIN_PRODUCTION_SEND_DELAY:
        violations.append(
            f"send_delay_seconds={config.send_delay_seconds} is below the "
            f"provider limit of {MIN_PRODUCTION_SEND_DELAY}s."
        )

    # Report all violations at once
    if violations:
        msg = (
            "Production configuration guard failed.\n"
            + "\n".join(f"  - {v}" for v in violations)
        )
        logger.critical(msg)
        raise ProductionConfigError(msg)

    logger.info("Production configuration guard passed.")
