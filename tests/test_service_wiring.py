"""Tests for service wiring: api/deps.py, infrastructure/log_config.py and
the scripts/serve_etudes.py entry point.

uvicorn is never started; ``uvicorn.run`` is patched out.
"""

from __future__ import annotations

import logging
from pathlib import Path
from unittest.mock import patch

import pytest

from api import deps
from core.config import EtudeServiceConfig
from infrastructure.artifact_store import FileArtifactStore, MemoryArtifactStore
from infrastructure.log_config import configure_logging, parse_level


@pytest.fixture()
def reset_deps():
    yield
    with deps._init_lock:
        deps._config = None
        deps._store = None
        deps._generator = None
        deps._orchestrator = None


# ---------------------------------------------------------------------------
# Dependency providers
# ---------------------------------------------------------------------------


class TestDeps:
    def test_memory_backend(self, reset_deps) -> None:
        deps.configure(EtudeServiceConfig(store_backend="memory"))
        assert isinstance(deps.get_artifact_store(), MemoryArtifactStore)

    def test_file_backend_uses_artifact_dir(self, reset_deps, tmp_path: Path) -> None:
        deps.configure(EtudeServiceConfig(artifact_dir=tmp_path / "etudes"))
        store = deps.get_artifact_store()
        assert isinstance(store, FileArtifactStore)
        assert store.root == tmp_path / "etudes"

    def test_orchestrator_is_singleton(self, reset_deps) -> None:
        deps.configure(EtudeServiceConfig(store_backend="memory"))
        first = deps.get_orchestrator()
        assert deps.get_orchestrator() is first
        assert first.store is deps.get_artifact_store()

    def test_configure_replaces_singletons(self, reset_deps) -> None:
        deps.configure(EtudeServiceConfig(store_backend="memory"))
        first = deps.get_orchestrator()
        deps.configure(EtudeServiceConfig(store_backend="memory", max_age_seconds=60))
        second = deps.get_orchestrator()
        assert second is not first
        assert second.status()["max_age_seconds"] == 60

    def test_config_read_from_environment(self, reset_deps, monkeypatch) -> None:
        monkeypatch.setenv("ETUDE_STORE", "memory")
        monkeypatch.setenv("ETUDE_MAX_AGE_SECONDS", "120")
        config = deps.get_config()
        assert config.store_backend == "memory"
        assert config.max_age_seconds == 120.0


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


class TestLogConfig:
    def test_parse_level(self) -> None:
        assert parse_level("debug") == logging.DEBUG
        assert parse_level(" WARNING ") == logging.WARNING

    def test_parse_level_unknown(self) -> None:
        with pytest.raises(ValueError, match="Unknown log level"):
            parse_level("chatty")

    def test_configure_logging_installs_single_handler(self) -> None:
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        try:
            configure_logging(logging.DEBUG)
            configure_logging(logging.DEBUG)
            assert len(root.handlers) == 1
            assert root.level == logging.DEBUG
            assert logging.getLogger("uvicorn.access").level == logging.WARNING
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


class TestServeEtudesCli:
    def test_flags_override_environment(self, reset_deps, monkeypatch, tmp_path: Path) -> None:
        from scripts import serve_etudes

        monkeypatch.setenv("ETUDE_MAX_AGE_SECONDS", "999")
        with (
            patch.object(serve_etudes, "configure_logging"),
            patch.object(serve_etudes.uvicorn, "run") as mock_run,
        ):
            code = serve_etudes.main(
                [
                    "--port",
                    "9000",
                    "--max-age",
                    "30",
                    "--artifact-dir",
                    str(tmp_path),
                    "--store",
                    "memory",
                ]
            )
        assert code == 0
        assert mock_run.call_args.kwargs["port"] == 9000
        config = deps.get_config()
        assert config.max_age_seconds == 30.0
        assert config.artifact_dir == tmp_path
        assert config.store_backend == "memory"

    def test_invalid_config_exits_2(self, reset_deps, monkeypatch) -> None:
        from scripts import serve_etudes

        monkeypatch.setenv("ETUDE_MAX_AGE_SECONDS", "soon")
        with (
            patch.object(serve_etudes, "configure_logging"),
            patch.object(serve_etudes.uvicorn, "run") as mock_run,
        ):
            assert serve_etudes.main([]) == 2
        mock_run.assert_not_called()

    def test_bad_log_level_exits_2(self, reset_deps) -> None:
        from scripts import serve_etudes

        with patch.object(serve_etudes.uvicorn, "run") as mock_run:
            assert serve_etudes.main(["--log-level", "chatty"]) == 2
        mock_run.assert_not_called()

    @pytest.mark.parametrize("value", ["nan", "inf"])
    def test_non_finite_max_age_exits_2(self, reset_deps, value: str) -> None:
        from scripts import serve_etudes

        with (
            patch.object(serve_etudes, "configure_logging"),
            patch.object(serve_etudes.uvicorn, "run") as mock_run,
        ):
            assert serve_etudes.main(["--max-age", value]) == 2
        mock_run.assert_not_called()
