"""Durable byte storage for generated etudes.

Two backends satisfy the same ``ArtifactStore`` protocol:

    FileArtifactStore    one file per key under a directory; publish is
                         write-to-temp + ``os.replace`` so a reader sees the
                         old file or the new one, never a partial write.
    MemoryArtifactStore  dict of key → (bytes, mtime) behind a lock; used for
                         tests and single-process deployments.

Usage::

    from infrastructure.artifact_store import FileArtifactStore

    store = FileArtifactStore(Path("etudes"))
    meta = store.stat(key)
    store.write_atomic(key, midi_bytes)
    for chunk in store.read(key):
        ...
"""

from __future__ import annotations

import logging
import os
import tempfile
import threading
import time
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import BinaryIO, Protocol, runtime_checkable

from core.etudes.errors import StorageError
from core.etudes.types import ArtifactMetadata

logger = logging.getLogger(__name__)

_READ_CHUNK_BYTES = 64 * 1024
_TEMP_PREFIX = ".tmp-"


@runtime_checkable
class ArtifactStore(Protocol):
    """Storage contract consumed by the generation orchestrator."""

    def stat(self, key: str) -> ArtifactMetadata:
        """Return existence and last-modified time for ``key``."""
        ...

    def write_atomic(self, key: str, data: bytes) -> None:
        """Publish ``data`` under ``key``; visible entirely or not at all."""
        ...

    def read(self, key: str) -> Iterator[bytes]:
        """Return the stored bytes as a chunk iterator."""
        ...


def _check_key(key: str) -> None:
    """Reject keys that are not a single safe path component."""
    if not key or key in {".", ".."} or "/" in key or "\\" in key or key.startswith("."):
        raise StorageError(f"invalid artifact key {key!r}")


def _iter_file(handle: BinaryIO, chunk_size: int) -> Iterator[bytes]:
    with handle:
        while chunk := handle.read(chunk_size):
            yield chunk


class FileArtifactStore:
    """Filesystem-backed artifact store.

    Args:
        root: Directory for published artifacts. Created if missing.
        chunk_size: Read chunk size for streaming responses.
    """

    def __init__(self, root: Path, chunk_size: int = _READ_CHUNK_BYTES) -> None:
        """Create the artifact directory if it does not exist."""
        self.root = Path(root)
        self._chunk_size = chunk_size
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageError(f"cannot create artifact directory {self.root}: {exc}") from exc
        logger.info("FileArtifactStore: serving artifacts from %s", self.root)

    def _path(self, key: str) -> Path:
        _check_key(key)
        return self.root / key

    def stat(self, key: str) -> ArtifactMetadata:
        """Return metadata from the file's mtime; missing files are not errors."""
        path = self._path(key)
        try:
            st = path.stat()
        except FileNotFoundError:
            return ArtifactMetadata.missing()
        except OSError as exc:
            raise StorageError(f"cannot stat {key}: {exc}") from exc
        return ArtifactMetadata(exists=True, last_modified=st.st_mtime)

    def write_atomic(self, key: str, data: bytes) -> None:
        """Write to a temp file in the same directory, fsync, then rename."""
        path = self._path(key)
        tmp_name: str | None = None
        try:
            fd, tmp_name = tempfile.mkstemp(prefix=_TEMP_PREFIX, dir=self.root)
            with os.fdopen(fd, "wb") as tmp:
                tmp.write(data)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, path)
            tmp_name = None
        except OSError as exc:
            raise StorageError(f"cannot publish {key}: {exc}") from exc
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    logger.warning("FileArtifactStore: could not remove temp file %s", tmp_name)
        logger.debug("FileArtifactStore: published %s (%d bytes)", key, len(data))

    def read(self, key: str) -> Iterator[bytes]:
        """Open the file now and stream it lazily.

        Opening eagerly makes a missing file fail before a response starts.
        """
        path = self._path(key)
        try:
            handle = path.open("rb")
        except OSError as exc:
            raise StorageError(f"cannot read {key}: {exc}") from exc
        return _iter_file(handle, self._chunk_size)


class MemoryArtifactStore:
    """In-process artifact store with the same contract as the file store.

    Args:
        clock: Time source for last-modified stamps (default: ``time.time``).
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        """Initialize an empty store."""
        self._clock = clock
        self._items: dict[str, tuple[bytes, float]] = {}
        self._lock = threading.Lock()

    def stat(self, key: str) -> ArtifactMetadata:
        _check_key(key)
        with self._lock:
            item = self._items.get(key)
        if item is None:
            return ArtifactMetadata.missing()
        return ArtifactMetadata(exists=True, last_modified=item[1])

    def write_atomic(self, key: str, data: bytes) -> None:
        _check_key(key)
        with self._lock:
            self._items[key] = (bytes(data), self._clock())

    def read(self, key: str) -> Iterator[bytes]:
        _check_key(key)
        with self._lock:
            item = self._items.get(key)
        if item is None:
            raise StorageError(f"cannot read {key}: not stored")
        return iter((item[0],))

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)
