"""
core/etudes/ — Pure request-to-artifact resolution rules.

Exports:
    Types:      EtudeParameters, InstrumentProfile, ArtifactMetadata,
                Freshness, Metronome, EtudeGenerator
    Errors:     EtudeError, ValidationError, GenerationError, StorageError,
                GenerationTimeoutError, InvariantViolation
    Validation: parse_etude_segments, parse_etude_path
    Keys:       derive_artifact_key, download_filename
    Staleness:  classify_artifact
"""

from core.etudes.errors import (
    EtudeError,
    GenerationError,
    GenerationTimeoutError,
    InvariantViolation,
    StorageError,
    ValidationError,
)
from core.etudes.keys import derive_artifact_key, download_filename
from core.etudes.staleness import classify_artifact
from core.etudes.types import (
    ArtifactMetadata,
    EtudeGenerator,
    EtudeParameters,
    Freshness,
    InstrumentProfile,
    Metronome,
)
from core.etudes.validation import parse_etude_path, parse_etude_segments

__all__ = [
    # Types
    "ArtifactMetadata",
    "EtudeGenerator",
    "EtudeParameters",
    "Freshness",
    "InstrumentProfile",
    "Metronome",
    # Errors
    "EtudeError",
    "GenerationError",
    "GenerationTimeoutError",
    "InvariantViolation",
    "StorageError",
    "ValidationError",
    # Functions
    "classify_artifact",
    "derive_artifact_key",
    "download_filename",
    "parse_etude_path",
    "parse_etude_segments",
]
