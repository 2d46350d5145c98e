"""
Configuration dataclass for the etude service.

The config object is built once at bootstrap and passed explicitly to the
store and orchestrator. Nothing downstream reads the process environment.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

# Allowlist of artifact store backends.
VALID_STORE_BACKENDS: frozenset[str] = frozenset({"file", "memory"})

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


@dataclass(frozen=True)
class EtudeServiceConfig:
    """
    Configuration for artifact caching and generation.

    Attributes:
        max_age_seconds: Age at which a stored etude is regenerated.
            Defaults to one day, so each etude is rewritten daily.
        artifact_dir: Directory holding published MIDI files
            (``file`` backend only).
        store_backend: ``"file"`` or ``"memory"``.
        generation_timeout_seconds: How long a waiter blocks on an
            in-flight generation before giving up.
        serve_stale_on_failure: Serve a still-present stale artifact when
            its regeneration fails instead of returning an error.

    Example:
        >>> config = EtudeServiceConfig(max_age_seconds=3600, store_backend="memory")
    """

    max_age_seconds: float = 86_400.0
    artifact_dir: Path = Path("etudes")
    store_backend: str = "file"
    generation_timeout_seconds: float = 30.0
    serve_stale_on_failure: bool = True

    def __post_init__(self) -> None:
        """Validate configuration parameters."""
        if not math.isfinite(self.max_age_seconds) or self.max_age_seconds <= 0:
            raise ValueError(
                f"max_age_seconds must be positive and finite, got {self.max_age_seconds}"
            )
        if (
            not math.isfinite(self.generation_timeout_seconds)
            or self.generation_timeout_seconds <= 0
        ):
            raise ValueError(
                "generation_timeout_seconds must be positive and finite, "
                f"got {self.generation_timeout_seconds}"
            )
        if self.store_backend not in VALID_STORE_BACKENDS:
            raise ValueError(
                f"Unknown store_backend {self.store_backend!r}, "
                f"valid options: {sorted(VALID_STORE_BACKENDS)}"
            )
        if not isinstance(self.artifact_dir, Path):
            object.__setattr__(self, "artifact_dir", Path(self.artifact_dir))


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean flag, got {raw!r}")


def _parse_float(name: str, raw: str) -> float:
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


def config_from_env(env: Mapping[str, str]) -> EtudeServiceConfig:
    """
    Build a config from environment-style variables.

    Recognized keys (all optional):
        ETUDE_MAX_AGE_SECONDS, ETUDE_ARTIFACT_DIR, ETUDE_STORE,
        ETUDE_GENERATION_TIMEOUT_SECONDS, ETUDE_SERVE_STALE_ON_FAILURE

    Args:
        env: Mapping to read from, usually ``os.environ``.

    Returns:
        A validated EtudeServiceConfig.

    Raises:
        ValueError: if a value is malformed or out of range.
    """
    kwargs: dict[str, object] = {}
    if raw := env.get("ETUDE_MAX_AGE_SECONDS"):
        kwargs["max_age_seconds"] = _parse_float("ETUDE_MAX_AGE_SECONDS", raw)
    if raw := env.get("ETUDE_ARTIFACT_DIR"):
        kwargs["artifact_dir"] = Path(raw)
    if raw := env.get("ETUDE_STORE"):
        kwargs["store_backend"] = raw.strip().lower()
    if raw := env.get("ETUDE_GENERATION_TIMEOUT_SECONDS"):
        kwargs["generation_timeout_seconds"] = _parse_float(
            "ETUDE_GENERATION_TIMEOUT_SECONDS", raw
        )
    if raw := env.get("ETUDE_SERVE_STALE_ON_FAILURE"):
        kwargs["serve_stale_on_failure"] = _parse_bool("ETUDE_SERVE_STALE_ON_FAILURE", raw)
    return EtudeServiceConfig(**kwargs)  # type: ignore[arg-type]


DEFAULT_CONFIG = EtudeServiceConfig()
"""Default configuration: one-day max age, file store under ./etudes."""
