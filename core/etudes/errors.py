"""
core/etudes/errors.py — Exception taxonomy for the etude pipeline.

    EtudeError
    ├── ValidationError          client sent a malformed or unknown tuple (400)
    ├── GenerationError          generator could not produce the artifact (500)
    │   ├── StorageError         metadata query or atomic publish failed
    │   └── GenerationTimeoutError  waiter gave up on an in-flight ticket
    └── InvariantViolation       orchestrator bookkeeping is inconsistent
"""

from __future__ import annotations


class EtudeError(Exception):
    """Base class for all etude pipeline errors."""


class ValidationError(EtudeError):
    """Raised when a requested parameter tuple is malformed or unknown.

    Args:
        field: Name of the offending field, or ``"path"`` for a
            wrong segment count.
        value: The raw value that was rejected.
        reason: Human-readable explanation.
    """

    def __init__(self, field: str, value: object, reason: str) -> None:
        """Initialize with the rejected field, value and reason."""
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"invalid {field} {value!r}: {reason}")


class GenerationError(EtudeError):
    """Raised when an artifact could not be generated for a valid tuple."""


class StorageError(GenerationError):
    """Raised when the artifact store cannot stat, write or read a key."""


class GenerationTimeoutError(GenerationError):
    """Raised to a waiter whose in-flight generation exceeded its timeout."""


class InvariantViolation(EtudeError):
    """Raised when orchestrator state contradicts its own locking rules."""
