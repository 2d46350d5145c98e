"""
Shared fixtures for the test suite.

Centralizes reusable test infrastructure so individual test files
don't need to repeat override/fake boilerplate.
"""

from __future__ import annotations

import threading

import pytest
from fastapi.testclient import TestClient

from api.deps import get_orchestrator
from api.main import app
from core.config import EtudeServiceConfig
from core.etudes.types import EtudeParameters, InstrumentProfile
from core.etudes.validation import parse_etude_path
from infrastructure.artifact_store import MemoryArtifactStore
from infrastructure.orchestrator import GenerationOrchestrator

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

PENTATONIC_PATH = "c/pentatonic/none/none/none/acoustic_grand_piano/on/120/3/0"
PENTATONIC_KEY = "c_pentatonic_none_none_none_acoustic_grand_piano_on_120_3_0.mid"

FAKE_MIDI = b"MThd\x00\x00\x00\x06\x00\x01\x00\x03\x01\xe0fake-etude"
"""Bytes returned by ``FakeGenerator``; only the header looks like MIDI."""


# ---------------------------------------------------------------------------
# Fake clock and generator
# ---------------------------------------------------------------------------


class FakeClock:
    """Manually advanced time source shared by store and orchestrator."""

    def __init__(self, start: float = 1_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeGenerator:
    """Deterministic generator that counts calls.

    ``gate`` (if set) blocks every call until released, so tests can hold a
    generation in flight. ``error`` (if set) is raised instead of returning.
    """

    def __init__(self, data: bytes = FAKE_MIDI) -> None:
        self.data = data
        self.calls: list[EtudeParameters] = []
        self.error: Exception | None = None
        self.gate: threading.Event | None = None
        self.entered = threading.Event()
        self._lock = threading.Lock()

    @property
    def call_count(self) -> int:
        with self._lock:
            return len(self.calls)

    def compose(self, params: EtudeParameters, profile: InstrumentProfile) -> bytes:
        with self._lock:
            self.calls.append(params)
        self.entered.set()
        if self.gate is not None:
            self.gate.wait(5.0)
        if self.error is not None:
            raise self.error
        return self.data


# ---------------------------------------------------------------------------
# Core fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def memory_store(clock: FakeClock) -> MemoryArtifactStore:
    return MemoryArtifactStore(clock=clock)


@pytest.fixture()
def fake_generator() -> FakeGenerator:
    return FakeGenerator()


@pytest.fixture()
def service_config() -> EtudeServiceConfig:
    return EtudeServiceConfig(
        max_age_seconds=3600.0,
        store_backend="memory",
        generation_timeout_seconds=2.0,
    )


@pytest.fixture()
def orchestrator(
    memory_store: MemoryArtifactStore,
    fake_generator: FakeGenerator,
    service_config: EtudeServiceConfig,
    clock: FakeClock,
) -> GenerationOrchestrator:
    return GenerationOrchestrator(memory_store, fake_generator, service_config, clock=clock)


@pytest.fixture()
def pentatonic_params() -> EtudeParameters:
    return parse_etude_path(PENTATONIC_PATH)


# ---------------------------------------------------------------------------
# FastAPI test client fixture
# ---------------------------------------------------------------------------


@pytest.fixture()
def api_client(orchestrator: GenerationOrchestrator):
    """FastAPI ``TestClient`` wired to an in-memory orchestrator.

    The orchestrator (and through it the fake generator and store) is
    available as ``client.orchestrator`` for assertions.
    """
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    client = TestClient(app)
    client.orchestrator = orchestrator  # type: ignore[attr-defined]
    yield client
    app.dependency_overrides.clear()
