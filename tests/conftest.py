"""Shared test fixtures for RelayGate."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

import pytest

from relaygate.core.engine import DispatchEngine
from relaygate.core.gate import AccessGate
from relaygate.core.recipients import RecipientListStore
from relaygate.core.registry import ApprovalRegistry
from relaygate.errors import TransportError
from relaygate.transports.memory import InMemoryNotifier, InMemorySender

ADMIN_ID = "1000"


class FakeClock:
    """Deterministic monotonic clock; ``sleep`` advances it instead of waiting."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class ClockedSender:
    """A ``MessageSender`` that records (address, time) for every attempt.

    Parameters
    ----------
    clock:
        The fake clock to read timestamps from.
    failing:
        Addresses whose send raises ``TransportError``.
    send_duration:
        How far each send advances the clock (simulated network latency).
    """

    def __init__(
        self,
        clock: FakeClock,
        failing: Iterable[str] = (),
        send_duration: float = 0.0,
    ) -> None:
        self._clock = clock
        self._failing = set(failing)
        self._send_duration = send_duration
        self.attempts: list[tuple[str, float]] = []

    async def send(self, address: str, body: str) -> str:
        self.attempts.append((address, self._clock()))
        self._clock.now += self._send_duration
        if address in self._failing:
            raise TransportError(f"Invalid 'To' Phone Number: {address}")
        return f"SM{len(self.attempts):04d}"

    @property
    def addresses(self) -> list[str]:
        return [address for address, _ in self.attempts]


@pytest.fixture
def tmp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test artifacts."""
    return tmp_path


@pytest.fixture
def registry_path(tmp_dir: Path) -> Path:
    return tmp_dir / "approved_users.json"


@pytest.fixture
def registry(registry_path: Path) -> ApprovalRegistry:
    """Provide a fresh, empty ApprovalRegistry backed by a temp file."""
    return ApprovalRegistry(registry_path)


@pytest.fixture
def gate(registry: ApprovalRegistry) -> AccessGate:
    """Provide an AccessGate with ADMIN_ID as the admin."""
    return AccessGate(registry, ADMIN_ID)


@pytest.fixture
def store() -> RecipientListStore:
    return RecipientListStore()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_clocked_sender(clock: FakeClock) -> Callable[..., ClockedSender]:
    """Factory fixture: build a ClockedSender bound to the test clock."""

    def _factory(**kwargs: Any) -> ClockedSender:
        return ClockedSender(clock, **kwargs)

    return _factory


@pytest.fixture
def make_engine(clock: FakeClock) -> Callable[..., DispatchEngine]:
    """Factory fixture: build a DispatchEngine driven by the fake clock."""

    def _factory(sender: Any, delay_seconds: float = 1.0) -> DispatchEngine:
        return DispatchEngine(
            sender,
            delay_seconds=delay_seconds,
            sleep=clock.sleep,
            clock=clock,
        )

    return _factory


@pytest.fixture
def sender() -> InMemorySender:
    return InMemorySender()


@pytest.fixture
def notifier() -> InMemoryNotifier:
    return InMemoryNotifier()


@pytest.fixture
def admin_id() -> str:
    return ADMIN_ID
