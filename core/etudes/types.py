"""
core/etudes/types.py — Frozen value objects for the etude pipeline.

All types are immutable frozen dataclasses — safe to hash, share across
threads, and use as dict keys. No I/O, no side effects.

Types:
    Metronome          — click track mode (on / downbeat / off)
    InstrumentProfile  — GM program + playable pitch range for an instrument
    EtudeParameters    — a validated, canonical ten-field request tuple
    ArtifactMetadata   — existence + mtime of a stored artifact
    Freshness          — staleness classification (fresh / stale / missing)
    EtudeGenerator     — protocol every artifact generator satisfies
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol, runtime_checkable


class Metronome(Enum):
    """Metronome click mode after the one-bar count-in."""

    ON = "on"
    DOWNBEAT = "downbeat"
    OFF = "off"


class Freshness(Enum):
    """Staleness classification of a stored artifact."""

    FRESH = "fresh"
    STALE = "stale"
    MISSING = "missing"


@dataclass(frozen=True)
class InstrumentProfile:
    """A General MIDI instrument and the pitch range etudes may use.

    Attributes:
        name:          URL name, e.g. ``"acoustic_grand_piano"``
        display_name:  Menu label, e.g. ``"Piano"``
        program:       GM program number (0-127)
        lowest_pitch:  Lowest MIDI note the instrument plays
        highest_pitch: Highest MIDI note the instrument plays
    """

    name: str
    display_name: str
    program: int
    lowest_pitch: int
    highest_pitch: int

    def __post_init__(self) -> None:
        if not (0 <= self.program <= 127):
            raise ValueError(f"program must be in [0, 127], got {self.program}")
        for pitch in (self.lowest_pitch, self.highest_pitch):
            if not (0 <= pitch <= 127):
                raise ValueError(f"MIDI pitch {pitch} out of range [0, 127]")
        if self.lowest_pitch >= self.highest_pitch:
            raise ValueError(
                f"lowest_pitch ({self.lowest_pitch}) must be below "
                f"highest_pitch ({self.highest_pitch})"
            )

    def contains(self, pitch: int) -> bool:
        """True if ``pitch`` lies inside the playable range."""
        return self.lowest_pitch <= pitch <= self.highest_pitch


@dataclass(frozen=True)
class EtudeParameters:
    """A validated request tuple in canonical form.

    Instances are built by ``core.etudes.validation.parse_etude_segments``;
    that function is the only place the catalog rules are enforced. In
    canonical form, interval slots the pattern does not use hold ``"none"``
    and interval-based patterns carry the ``"none"`` tonic.
    """

    tonic: str
    pattern: str
    interval1: str
    interval2: str
    interval3: str
    instrument: str
    metronome: Metronome
    tempo: int
    repeats: int
    silence: int

    @property
    def intervals(self) -> tuple[str, str, str]:
        """The three interval slots in positional order."""
        return (self.interval1, self.interval2, self.interval3)

    def segments(self) -> tuple[str, ...]:
        """The ten fields as path-segment strings, in schema order."""
        return (
            self.tonic,
            self.pattern,
            self.interval1,
            self.interval2,
            self.interval3,
            self.instrument,
            self.metronome.value,
            str(self.tempo),
            str(self.repeats),
            str(self.silence),
        )


@dataclass(frozen=True)
class ArtifactMetadata:
    """Existence flag and last-modified time (epoch seconds) of an artifact."""

    exists: bool
    last_modified: float | None = None

    @classmethod
    def missing(cls) -> ArtifactMetadata:
        return cls(exists=False, last_modified=None)


@runtime_checkable
class EtudeGenerator(Protocol):
    """Structural protocol for artifact generators.

    Implementations return the complete artifact bytes and raise on
    failure. They never touch the artifact store; persistence belongs
    to the orchestrator.
    """

    def compose(self, params: EtudeParameters, profile: InstrumentProfile) -> bytes:
        """Produce the artifact for ``params`` played on ``profile``."""
        ...
