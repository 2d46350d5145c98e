"""
Pydantic schemas for the etude catalog and cache status endpoints.
"""

from pydantic import BaseModel, Field


class TonicOut(BaseModel):
    """A selectable tonic."""

    name: str = Field(..., description="URL value, e.g. 'eflat'.")
    display_name: str = Field(..., description="Menu label, e.g. 'E♭'.")


class PatternOut(BaseModel):
    """A selectable etude pattern."""

    name: str
    display_name: str
    interval_count: int = Field(
        ..., ge=0, le=3, description="Interval slots the pattern requires; 0 means tonic-based."
    )


class IntervalOut(BaseModel):
    """A selectable interval."""

    name: str
    semitones: int
    display_name: str


class InstrumentOut(BaseModel):
    """A selectable instrument sound and its playable range."""

    name: str
    display_name: str
    program: int = Field(..., ge=0, le=127, description="General MIDI program number.")
    lowest_pitch: int = Field(
        ...,
        description=(
            "Lowest playable MIDI pitch. An interval chain whose total span exceeds "
            "highest_pitch - lowest_pitch cannot be placed and the etude request fails with 500."
        ),
    )
    highest_pitch: int = Field(..., description="Highest playable MIDI pitch.")


class TempoOptions(BaseModel):
    """Accepted tempo range and the menu step."""

    minimum: int
    maximum: int
    step: int
    default: int


class SilenceOption(BaseModel):
    """A muting mask and which of the three repeats it silences."""

    value: int = Field(..., ge=0, le=7)
    muted_repeats: list[bool] = Field(
        ..., description="Per repeat (first to third), True if that repeat is silent."
    )


class EtudeOptionsResponse(BaseModel):
    """Response body for ``GET /etude-options``."""

    unused: str = Field(..., description="Sentinel for an unused tonic or interval slot.")
    tonics: list[TonicOut]
    patterns: list[PatternOut]
    intervals: list[IntervalOut]
    instruments: list[InstrumentOut]
    metronome: list[str]
    tempo: TempoOptions
    repeats: list[int]
    silence: list[SilenceOption]
    path_template: str


class CacheStatsResponse(BaseModel):
    """Response body for ``GET /cache/stats``."""

    in_flight: list[str]
    max_age_seconds: float
    hits: int
    generated: int
    joined: int
    failures: int
    stale_served: int
