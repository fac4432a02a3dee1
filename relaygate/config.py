"""Runtime configuration — env-driven via pydantic-settings.

Reads from a .env file and RELAYGATE_* environment variables.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from relaygate.errors import MalformedInputError
from relaygate.models.identity import canonical_identity


class RelayConfig(BaseSettings):
    """Relay configuration with environment variable overrides.

    Examples
    --------
    Override via environment::

        export RELAYGATE_ADMIN_ID=123456789
        export RELAYGATE_TELEGRAM_BOT_TOKEN=...
        export RELAYGATE_SEND_DELAY_SECONDS=1.5

    Or via .env file::

        RELAYGATE_ENVIRONMENT=production
        RELAYGATE_TWILIO_ACCOUNT_SID=AC...
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="RELAYGATE_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Runtime environment
    environment: str = "development"
    log_level: str = "INFO"

    # Access control
    admin_id: str = ""
    registry_path: Path = Path(".relaygate/approved_users.json")

    # Minimum spacing between consecutive sends
    send_delay_seconds: float = Field(default=1.0, ge=0.0)

    # Telegram (inbound commands, uploads, notifications)
    telegram_bot_token: str = ""
    telegram_api_base: str = "https://api.telegram.org"
    poll_timeout_seconds: int = 30
    poll_error_pause_seconds: float = 5.0

    # Twilio (outbound SMS)
    twilio_account_sid: str = ""
    twilio_auth_token: str = ""
    twilio_from_number: str = ""
    twilio_api_base: str = "https://api.twilio.com"

    http_timeout_seconds: float = 30.0

    @field_validator("admin_id", mode="before")
    @classmethod
    def _canonical_admin(cls, value: object) -> str:
        if value is None or (isinstance(value, str) and not value.strip()):
            return ""
        try:
            return canonical_identity(value)  # type: ignore[arg-type]
        except MalformedInputError as exc:
            raise ValueError(str(exc)) from exc

    @property
    def is_production(self) -> bool:
        """Whether running in production mode."""
        return self.environment == "production"

    @property
    def has_sms_credentials(self) -> bool:
        return bool(
            self.twilio_account_sid
            and self.twilio_auth_token
            and self.twilio_from_number
        )
