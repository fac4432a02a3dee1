"""Dispatch models — recipient lists, jobs, per-recipient outcomes, results."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

from relaygate.models.identity import Identity


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RecipientList(BaseModel):
    """An ordered sequence of destination addresses.

    Addresses are opaque strings; syntax is the outbound provider's concern.
    """

    model_config = ConfigDict(frozen=True)

    addresses: tuple[str, ...] = ()
    uploaded_by: Identity | None = None
    uploaded_at: datetime = Field(default_factory=_utc_now)

    def __len__(self) -> int:
        return len(self.addresses)


class DeliveryOutcome(BaseModel):
    """Outcome of a single send attempt."""

    model_config = ConfigDict(frozen=True)

    address: str
    success: bool
    confirmation_id: str = ""
    error: str = ""


class DispatchJob(BaseModel):
    """One message bound for the current recipient list."""

    model_config = ConfigDict(frozen=True)

    message: str
    recipients: RecipientList
    requested_by: Identity | None = None


class DispatchResult(BaseModel):
    """Aggregate outcome of one dispatch run.

    Individual failures go to the operational log; only counts are
    carried here.
    """

    model_config = ConfigDict(frozen=True)

    attempted: int = 0
    succeeded: int = 0
    failed: int = 0
    started_at: datetime = Field(default_factory=_utc_now)
    completed_at: datetime | None = None

    @property
    def duration_seconds(self) -> float:
        if self.completed_at is None:
            return 0.0
        return (self.completed_at - self.started_at).total_seconds()

    def summary(self) -> str:
        """Format a one-line, human-readable summary."""
        text = (
            f"Bulk SMS sending completed: {self.attempted} recipient(s) processed, "
            f"{self.succeeded} sent, {self.failed} failed."
        )
        return text
