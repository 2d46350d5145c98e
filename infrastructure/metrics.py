"""Prometheus metrics for the etude service.

Metrics:
    etude_requests_total                Counter by outcome
                                        (hit/generated/joined/stale/rejected/error)
    etude_request_latency_seconds       Histogram of end-to-end /etude latency
    etude_generations_total             Counter by status (success/error/storage_error)
    etude_generation_latency_seconds    Histogram of compose + publish time
    etude_inflight_generations          Gauge of generations currently running

Usage::

    from infrastructure.metrics import LatencyTimer, record_request

    with LatencyTimer() as t:
        outcome = orchestrator.ensure(params)
    record_request(outcome=outcome.status.value, latency_seconds=t.elapsed)
"""

from __future__ import annotations

import time

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

_REGISTRY = CollectorRegistry()

etude_requests_total = Counter(
    "etude_requests_total",
    "Total /etude requests by outcome",
    ["outcome"],
    registry=_REGISTRY,
)

etude_request_latency_seconds = Histogram(
    "etude_request_latency_seconds",
    "End-to-end /etude latency in seconds (before streaming the body)",
    ["outcome"],
    buckets=[0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0],
    registry=_REGISTRY,
)

etude_generations_total = Counter(
    "etude_generations_total",
    "Generator invocations by status",
    ["status"],
    registry=_REGISTRY,
)

etude_generation_latency_seconds = Histogram(
    "etude_generation_latency_seconds",
    "Time to compose and publish one etude",
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0],
    registry=_REGISTRY,
)

etude_inflight_generations = Gauge(
    "etude_inflight_generations",
    "Generations currently running",
    registry=_REGISTRY,
)


def record_request(*, outcome: str, latency_seconds: float) -> None:
    """Record a completed /etude request.

    Args:
        outcome: One of "hit", "generated", "joined", "stale", "rejected", "error".
        latency_seconds: Wall-clock time until the response was ready.
    """
    etude_requests_total.labels(outcome=outcome).inc()
    etude_request_latency_seconds.labels(outcome=outcome).observe(latency_seconds)


def record_generation(*, status: str, latency_seconds: float) -> None:
    """Record one generator invocation.

    Args:
        status: "success", "error" or "storage_error".
        latency_seconds: Compose + publish time.
    """
    etude_generations_total.labels(status=status).inc()
    etude_generation_latency_seconds.observe(latency_seconds)


def inflight_generation_started() -> None:
    etude_inflight_generations.inc()


def inflight_generation_finished() -> None:
    etude_inflight_generations.dec()


def get_metrics_response() -> tuple[bytes, str]:
    """Generate Prometheus text exposition format.

    Returns:
        Tuple of (body_bytes, content_type_string).
    """
    return generate_latest(_REGISTRY), CONTENT_TYPE_LATEST


class LatencyTimer:
    """Context manager for measuring latency.

    Usage::

        with LatencyTimer() as t:
            data = composer.compose(params, profile)
        record_generation(status="success", latency_seconds=t.elapsed)
    """

    def __init__(self) -> None:
        """Initialize timer."""
        self._start: float = 0.0
        self.elapsed: float = 0.0

    def __enter__(self) -> LatencyTimer:
        """Start timing."""
        self._start = time.perf_counter()
        return self

    def __exit__(self, *_: object) -> None:
        """Stop timing and record elapsed."""
        self.elapsed = time.perf_counter() - self._start
