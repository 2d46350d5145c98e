"""
FastAPI dependency providers.

The service configuration is read once, on first use, from the process
environment (after loading ``.env``) and then passed explicitly into the
artifact store and orchestrator. Everything here is a lazily created
singleton so all request threads share one ticket table.

``configure()`` replaces the configuration before the first request; the
CLI entry point uses it to apply command-line overrides.
"""

from __future__ import annotations

import logging
import os
import threading

from dotenv import load_dotenv

from composition.composer import MidiEtudeComposer
from core.config import EtudeServiceConfig, config_from_env
from core.etudes.types import EtudeGenerator
from infrastructure.artifact_store import ArtifactStore, FileArtifactStore, MemoryArtifactStore
from infrastructure.orchestrator import GenerationOrchestrator

logger = logging.getLogger(__name__)

_init_lock = threading.Lock()

_config: EtudeServiceConfig | None = None


def configure(config: EtudeServiceConfig) -> None:
    """Install ``config`` and drop any singletons built from an older one."""
    global _config, _store, _generator, _orchestrator  # noqa: PLW0603
    with _init_lock:
        _config = config
        _store = None
        _generator = None
        _orchestrator = None
    logger.info(
        "Etude service configured: store=%s max_age=%.0fs dir=%s",
        config.store_backend,
        config.max_age_seconds,
        config.artifact_dir,
    )


def get_config() -> EtudeServiceConfig:
    """
    Return the service configuration singleton.

    Loads ``.env`` (without overriding variables already set) and parses
    ``ETUDE_*`` variables on first call.
    """
    global _config  # noqa: PLW0603
    with _init_lock:
        if _config is None:
            load_dotenv(override=False)
            _config = config_from_env(os.environ)
        return _config


_store: ArtifactStore | None = None


def get_artifact_store() -> ArtifactStore:
    """Return the artifact store singleton for the configured backend."""
    global _store  # noqa: PLW0603
    config = get_config()
    with _init_lock:
        if _store is None:
            if config.store_backend == "memory":
                _store = MemoryArtifactStore()
            else:
                _store = FileArtifactStore(config.artifact_dir)
        return _store


_generator: EtudeGenerator | None = None


def get_generator() -> EtudeGenerator:
    """Return the etude composer singleton."""
    global _generator  # noqa: PLW0603
    with _init_lock:
        if _generator is None:
            _generator = MidiEtudeComposer()
        return _generator


_orchestrator: GenerationOrchestrator | None = None


def get_orchestrator() -> GenerationOrchestrator:
    """
    Return the generation orchestrator singleton.

    Shared across all requests so concurrent requests for the same etude
    meet on the same ticket table.
    """
    global _orchestrator  # noqa: PLW0603
    config = get_config()
    store = get_artifact_store()
    generator = get_generator()
    with _init_lock:
        if _orchestrator is None:
            _orchestrator = GenerationOrchestrator(store, generator, config)
        return _orchestrator
