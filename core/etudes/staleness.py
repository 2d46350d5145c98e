"""
core/etudes/staleness.py — Fresh / stale / missing classification.

An artifact exactly ``max_age_seconds`` old is stale: the boundary is
inclusive on the stale side.
"""

from __future__ import annotations

from core.etudes.types import ArtifactMetadata, Freshness


def classify_artifact(
    metadata: ArtifactMetadata,
    *,
    max_age_seconds: float,
    now: float,
) -> Freshness:
    """
    Classify a stored artifact against the configured maximum age.

    Args:
        metadata: Existence flag and last-modified time from the store.
        max_age_seconds: Maximum artifact age before regeneration.
        now: Current time in epoch seconds.

    Returns:
        Freshness.MISSING if the artifact does not exist,
        Freshness.STALE if ``now - last_modified >= max_age_seconds``,
        Freshness.FRESH otherwise.
    """
    if not metadata.exists or metadata.last_modified is None:
        return Freshness.MISSING
    if now - metadata.last_modified >= max_age_seconds:
        return Freshness.STALE
    return Freshness.FRESH
