"""
core/etudes/validation.py — Parse path segments into EtudeParameters.

Validation and construction are one step: ``parse_etude_segments`` either
returns a canonical ``EtudeParameters`` or raises ``ValidationError``. A
request is rejected as a whole on the first invalid field.

Segment order:
    tonic / pattern / interval1 / interval2 / interval3 /
    instrument / metronome / tempo / repeats / silence
"""

from __future__ import annotations

from collections.abc import Sequence

from core.etudes.catalog import (
    INSTRUMENTS,
    INTERVALS,
    NO_SELECTION,
    PATTERNS,
    REPEATS_RANGE,
    SILENCE_RANGE,
    TEMPO_RANGE,
    TONICS,
)
from core.etudes.errors import ValidationError
from core.etudes.types import EtudeParameters, Metronome

SEGMENT_COUNT = 10

_INTERVAL_SLOTS = ("interval1", "interval2", "interval3")


def _parse_bounded_int(field: str, raw: str, bounds: tuple[int, int]) -> int:
    """Parse a plain ASCII decimal and check it against inclusive bounds."""
    if not raw or not raw.isascii() or not raw.isdigit():
        raise ValidationError(field, raw, "must be a non-negative decimal integer")
    value = int(raw)
    low, high = bounds
    if not (low <= value <= high):
        raise ValidationError(field, raw, f"must be in [{low}, {high}]")
    return value


def _check_interval_slots(pattern: str, raw_slots: Sequence[str]) -> tuple[str, str, str]:
    """Validate interval slots against the pattern and return canonical slots.

    Required slots must hold a real interval name. Unused slots must be a
    catalog member or the sentinel; they are canonicalized to the sentinel.
    """
    required = PATTERNS[pattern].interval_count
    canonical: list[str] = []
    for position, (field, raw) in enumerate(zip(_INTERVAL_SLOTS, raw_slots)):
        if raw != NO_SELECTION and raw not in INTERVALS:
            raise ValidationError(field, raw, "unknown interval name")
        if position < required:
            if raw == NO_SELECTION:
                raise ValidationError(field, raw, f"pattern {pattern!r} requires an interval here")
            canonical.append(raw)
        else:
            canonical.append(NO_SELECTION)
    return canonical[0], canonical[1], canonical[2]


def parse_etude_segments(segments: Sequence[str]) -> EtudeParameters:
    """
    Validate raw path segments and build canonical parameters.

    Args:
        segments: The ten segments following ``/etude/``.

    Returns:
        EtudeParameters in canonical form.

    Raises:
        ValidationError: on a wrong segment count or any invalid field.
    """
    if len(segments) != SEGMENT_COUNT:
        raise ValidationError(
            "path", "/".join(segments), f"expected {SEGMENT_COUNT} path segments, got {len(segments)}"
        )
    (
        tonic,
        pattern,
        interval1,
        interval2,
        interval3,
        instrument,
        metronome,
        tempo,
        repeats,
        silence,
    ) = segments

    if pattern not in PATTERNS:
        raise ValidationError("pattern", pattern, "unknown pattern name")
    info = PATTERNS[pattern]

    if tonic != NO_SELECTION and tonic not in TONICS:
        raise ValidationError("tonic", tonic, "unknown pitch name")
    if info.uses_tonic and tonic == NO_SELECTION:
        raise ValidationError("tonic", tonic, f"pattern {pattern!r} requires a tonic")

    slots = _check_interval_slots(pattern, (interval1, interval2, interval3))

    if instrument not in INSTRUMENTS:
        raise ValidationError("instrument", instrument, "unknown instrument name")

    try:
        mode = Metronome(metronome)
    except ValueError:
        raise ValidationError("metronome", metronome, "must be on, downbeat or off") from None

    return EtudeParameters(
        tonic=tonic if info.uses_tonic else NO_SELECTION,
        pattern=pattern,
        interval1=slots[0],
        interval2=slots[1],
        interval3=slots[2],
        instrument=instrument,
        metronome=mode,
        tempo=_parse_bounded_int("tempo", tempo, TEMPO_RANGE),
        repeats=_parse_bounded_int("repeats", repeats, REPEATS_RANGE),
        silence=_parse_bounded_int("silence", silence, SILENCE_RANGE),
    )


def parse_etude_path(path: str) -> EtudeParameters:
    """Split a ``tonic/pattern/.../silence`` path and validate it."""
    return parse_etude_segments(path.split("/"))
