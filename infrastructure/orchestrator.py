"""Single-flight generation orchestrator for etude artifacts.

For each artifact key at most one generation runs at a time. Concurrent
requests for the same key wait on the in-flight ``GenerationTicket`` and
receive its outcome: success (the artifact is published) or the very same
``GenerationError`` the owner saw.

Request flow::

    stat ─→ FRESH ───────────────────────────────────────→ hit
      │
      └─→ STALE / MISSING ─→ ticket table (check-or-insert)
                               ├─ ticket exists ─→ wait ──→ joined | error
                               └─ new ticket ───→ re-check ─→ hit
                                                   └─ compose ─→ publish ─→ generated | error

Completion order is publish → remove ticket → wake waiters, so a request
arriving after removal re-runs the freshness check and sees the new file.
The table lock guards only the dictionary; generation and storage I/O run
outside it, so different keys never wait on each other.

Usage::

    from infrastructure.orchestrator import GenerationOrchestrator

    orchestrator = GenerationOrchestrator(store, composer, config)
    outcome = orchestrator.ensure(params)
    body = store.read(outcome.key)
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from core.config import EtudeServiceConfig
from core.etudes.catalog import instrument_profile
from core.etudes.errors import (
    GenerationError,
    GenerationTimeoutError,
    InvariantViolation,
    StorageError,
)
from core.etudes.keys import derive_artifact_key
from core.etudes.staleness import classify_artifact
from core.etudes.types import EtudeGenerator, EtudeParameters, Freshness, InstrumentProfile
from infrastructure import metrics
from infrastructure.artifact_store import ArtifactStore

logger = logging.getLogger(__name__)


class OutcomeStatus(Enum):
    """How a request's artifact became available."""

    HIT = "hit"  # already fresh, no generation
    GENERATED = "generated"  # this request ran the generator
    JOINED = "joined"  # waited on another request's generation
    STALE = "stale"  # regeneration failed, stale artifact served


@dataclass(frozen=True)
class ArtifactOutcome:
    """Result of ``GenerationOrchestrator.ensure``."""

    key: str
    status: OutcomeStatus


@dataclass
class OrchestratorStats:
    """Runtime counters for an orchestrator instance."""

    hits: int = 0
    generated: int = 0
    joined: int = 0
    failures: int = 0
    stale_served: int = 0


class GenerationTicket:
    """In-flight generation record for one key.

    Created and removed only by the orchestrator. Waiters hold a reference
    and block in ``wait``; leaving early does not cancel the generation.
    """

    def __init__(self, key: str) -> None:
        self.key = key
        self._done = threading.Event()
        self._error: GenerationError | None = None
        self._lock = threading.Lock()
        self._waiters = 0

    @property
    def done(self) -> bool:
        return self._done.is_set()

    @property
    def waiters(self) -> int:
        with self._lock:
            return self._waiters

    def join(self) -> None:
        with self._lock:
            self._waiters += 1

    def _leave(self) -> None:
        with self._lock:
            self._waiters -= 1

    def succeed(self) -> None:
        self._done.set()

    def fail(self, error: GenerationError) -> None:
        self._error = error
        self._done.set()

    def wait(self, timeout: float) -> None:
        """Block until the ticket completes.

        Raises:
            GenerationTimeoutError: if the ticket is still open after ``timeout``.
            GenerationError: the owner's failure, same instance for every waiter.
        """
        try:
            finished = self._done.wait(timeout)
        finally:
            self._leave()
        if not finished:
            raise GenerationTimeoutError(
                f"generation of {self.key} did not finish within {timeout:.1f}s"
            )
        if self._error is not None:
            raise self._error


class GenerationOrchestrator:
    """Resolve parameters to a fresh stored artifact, generating at most once per key.

    Args:
        store: Artifact store used for metadata, publish and reads.
        generator: Produces artifact bytes from parameters + instrument profile.
        config: Service configuration (max age, wait timeout, stale fallback).
        profiles: Instrument profile lookup (default: the static catalog).
        clock: Time source for staleness checks (default: ``time.time``).
    """

    def __init__(
        self,
        store: ArtifactStore,
        generator: EtudeGenerator,
        config: EtudeServiceConfig,
        *,
        profiles: Callable[[str], InstrumentProfile] = instrument_profile,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store
        self._generator = generator
        self._config = config
        self._profiles = profiles
        self._clock = clock
        self._tickets: dict[str, GenerationTicket] = {}
        self._table_lock = threading.Lock()
        self._stats_lock = threading.Lock()
        self.stats = OrchestratorStats()

    # -- public API ---------------------------------------------------------

    def ensure(self, params: EtudeParameters) -> ArtifactOutcome:
        """
        Make sure a fresh artifact for ``params`` is stored.

        Args:
            params: Validated etude parameters.

        Returns:
            ArtifactOutcome naming the key to read and how it was obtained.

        Raises:
            GenerationError: generation, publish or wait failed and no stale
                fallback applied. StorageError if the metadata query failed.
            InvariantViolation: ticket bookkeeping is inconsistent.
        """
        key = derive_artifact_key(params)
        freshness = self._freshness(key)
        if freshness is Freshness.FRESH:
            self._count("hits")
            return ArtifactOutcome(key, OutcomeStatus.HIT)

        with self._table_lock:
            ticket = self._tickets.get(key)
            owner = ticket is None
            if ticket is None:
                ticket = GenerationTicket(key)
                self._tickets[key] = ticket
            else:
                ticket.join()

        try:
            if owner:
                status = self._run(ticket, params)
            else:
                logger.debug("Orchestrator: joining in-flight generation of %s", key)
                ticket.wait(self._config.generation_timeout_seconds)
                self._count("joined")
                status = OutcomeStatus.JOINED
        except GenerationError as exc:
            return self._fallback(key, freshness, exc)
        return ArtifactOutcome(key, status)

    def in_flight(self) -> list[str]:
        """Keys with a generation currently running."""
        with self._table_lock:
            return sorted(self._tickets)

    def status(self) -> dict[str, Any]:
        """Return a snapshot of counters and in-flight keys."""
        with self._stats_lock:
            counters = {
                "hits": self.stats.hits,
                "generated": self.stats.generated,
                "joined": self.stats.joined,
                "failures": self.stats.failures,
                "stale_served": self.stats.stale_served,
            }
        return {
            "in_flight": self.in_flight(),
            "max_age_seconds": self._config.max_age_seconds,
            **counters,
        }

    # -- internals ----------------------------------------------------------

    def _count(self, field: str) -> None:
        with self._stats_lock:
            setattr(self.stats, field, getattr(self.stats, field) + 1)

    def _freshness(self, key: str) -> Freshness:
        try:
            metadata = self.store.stat(key)
        except StorageError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise StorageError(f"cannot stat {key}: {exc}") from exc
        return classify_artifact(
            metadata,
            max_age_seconds=self._config.max_age_seconds,
            now=self._clock(),
        )

    def _run(self, ticket: GenerationTicket, params: EtudeParameters) -> OutcomeStatus:
        """Owner path: re-check, generate, publish, then release the ticket."""
        error: GenerationError | None = GenerationError(f"generation of {ticket.key} aborted")
        status = OutcomeStatus.GENERATED
        try:
            # A ticket may have published between our first check and the insert.
            if self._freshness(ticket.key) is Freshness.FRESH:
                status = OutcomeStatus.HIT
            else:
                self._generate_and_publish(ticket.key, params)
            error = None
        except GenerationError as exc:
            error = exc
        finally:
            self._release(ticket, error)

        if error is not None:
            self._count("failures")
            raise error
        self._count("hits" if status is OutcomeStatus.HIT else "generated")
        return status

    def _generate_and_publish(self, key: str, params: EtudeParameters) -> None:
        logger.info("Orchestrator: generating %s", key)
        metrics.inflight_generation_started()
        timer = metrics.LatencyTimer()
        try:
            with timer:
                try:
                    profile = self._profiles(params.instrument)
                    data = self._generator.compose(params, profile)
                except GenerationError:
                    raise
                except Exception as exc:  # noqa: BLE001
                    raise GenerationError(f"generator failed for {key}: {exc}") from exc
                if not data:
                    raise GenerationError(f"generator returned no data for {key}")

                try:
                    self.store.write_atomic(key, data)
                except StorageError:
                    raise
                except Exception as exc:  # noqa: BLE001
                    raise StorageError(f"cannot publish {key}: {exc}") from exc
        except GenerationError as exc:
            kind = "storage_error" if isinstance(exc, StorageError) else "error"
            metrics.record_generation(status=kind, latency_seconds=timer.elapsed)
            logger.error("Orchestrator: generation of %s failed: %s", key, exc)
            raise
        finally:
            metrics.inflight_generation_finished()

        metrics.record_generation(status="success", latency_seconds=timer.elapsed)
        logger.info(
            "Orchestrator: published %s (%d bytes in %.3fs)", key, len(data), timer.elapsed
        )

    def _release(self, ticket: GenerationTicket, error: GenerationError | None) -> None:
        """Remove the ticket from the table, then wake its waiters."""
        with self._table_lock:
            current = self._tickets.pop(ticket.key, None)
            if current is not None and current is not ticket:
                self._tickets[ticket.key] = current

        if current is not ticket:
            ticket.fail(GenerationError(f"ticket for {ticket.key} was lost"))
            raise InvariantViolation(
                f"ticket table does not hold the active ticket for {ticket.key}"
            )

        if error is None:
            ticket.succeed()
        else:
            ticket.fail(error)

    def _fallback(
        self, key: str, freshness: Freshness, exc: GenerationError
    ) -> ArtifactOutcome:
        """Serve the previous artifact if policy allows and it is still readable."""
        if self._config.serve_stale_on_failure and freshness is Freshness.STALE:
            try:
                still_stored = self.store.stat(key).exists
            except Exception:  # noqa: BLE001
                still_stored = False
            if still_stored:
                logger.warning("Orchestrator: serving stale %s after failure: %s", key, exc)
                self._count("stale_served")
                return ArtifactOutcome(key, OutcomeStatus.STALE)
        raise exc
