"""
core/etudes/catalog.py — Static parameter catalogs for etude requests.

Every legal value for every path segment lives here. The tables are
module-level constants built once at import and never mutated.

Exports:
    NO_SELECTION           sentinel for an unused tonic or interval slot
    TONICS                 12 pitch names in chromatic order from C
    PATTERNS               pattern name → PatternInfo
    INTERVALS              interval name → IntervalInfo (minor2 .. octave)
    INSTRUMENTS            instrument name → InstrumentProfile
    TEMPO_RANGE / REPEATS_RANGE / SILENCE_RANGE   inclusive numeric bounds
    SILENCE_MASKS          menu order of muting masks

    pitch_class(tonic) → int
    instrument_profile(name) → InstrumentProfile

Apart from instrument names, no catalog value contains ``_``; the artifact
key relies on that to stay uniquely decodable.
"""

from __future__ import annotations

from dataclasses import dataclass

from core.etudes.types import InstrumentProfile, Metronome

NO_SELECTION = "none"

# ---------------------------------------------------------------------------
# Tonics
# ---------------------------------------------------------------------------

TONICS: tuple[str, ...] = (
    "c",
    "dflat",
    "d",
    "eflat",
    "e",
    "f",
    "gflat",
    "g",
    "aflat",
    "a",
    "bflat",
    "b",
)

TONIC_DISPLAY: dict[str, str] = {
    "c": "C",
    "dflat": "D♭",
    "d": "D",
    "eflat": "E♭",
    "e": "E",
    "f": "F",
    "gflat": "G♭",
    "g": "G",
    "aflat": "A♭",
    "a": "A",
    "bflat": "B♭",
    "b": "B",
}

# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PatternInfo:
    """A selectable etude pattern.

    Attributes:
        name:           URL name
        display_name:   Menu label
        interval_count: Interval slots the pattern requires (0-3). Patterns
                        with a non-zero count ignore the tonic.
        scale:          Semitone offsets from the tonic for scale patterns,
                        empty for interval patterns and ``allintervals``.
    """

    name: str
    display_name: str
    interval_count: int = 0
    scale: tuple[int, ...] = ()

    @property
    def uses_tonic(self) -> bool:
        return self.interval_count == 0


_PATTERN_LIST: tuple[PatternInfo, ...] = (
    PatternInfo("pentatonic", "Pentatonic", scale=(0, 2, 4, 7, 9)),
    PatternInfo("major", "Major", scale=(0, 2, 4, 5, 7, 9, 11)),
    PatternInfo("minor", "Natural Minor", scale=(0, 2, 3, 5, 7, 8, 10)),
    PatternInfo("harmonicminor", "Harmonic Minor", scale=(0, 2, 3, 5, 7, 8, 11)),
    PatternInfo("melodicminor", "Melodic Minor", scale=(0, 2, 3, 5, 7, 9, 11)),
    PatternInfo("dorian", "Dorian", scale=(0, 2, 3, 5, 7, 9, 10)),
    PatternInfo("mixolydian", "Mixolydian", scale=(0, 2, 4, 5, 7, 9, 10)),
    PatternInfo("wholetone", "Whole Tone", scale=(0, 2, 4, 6, 8, 10)),
    PatternInfo("chromatic", "Chromatic", scale=tuple(range(12))),
    PatternInfo("allintervals", "Tonic Intervals"),
    PatternInfo("interval", "One Interval", interval_count=1),
    PatternInfo("intervalpair", "Two Intervals", interval_count=2),
    PatternInfo("intervaltriple", "Three Intervals", interval_count=3),
)

PATTERNS: dict[str, PatternInfo] = {p.name: p for p in _PATTERN_LIST}

# ---------------------------------------------------------------------------
# Intervals
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class IntervalInfo:
    """A named ascending interval."""

    name: str
    semitones: int
    display_name: str


_INTERVAL_LIST: tuple[IntervalInfo, ...] = (
    IntervalInfo("minor2", 1, "minor 2nd"),
    IntervalInfo("major2", 2, "major 2nd"),
    IntervalInfo("minor3", 3, "minor 3rd"),
    IntervalInfo("major3", 4, "major 3rd"),
    IntervalInfo("perfect4", 5, "perfect 4th"),
    IntervalInfo("tritone", 6, "tritone"),
    IntervalInfo("perfect5", 7, "perfect 5th"),
    IntervalInfo("minor6", 8, "minor 6th"),
    IntervalInfo("major6", 9, "major 6th"),
    IntervalInfo("minor7", 10, "minor 7th"),
    IntervalInfo("major7", 11, "major 7th"),
    IntervalInfo("octave", 12, "octave"),
)

INTERVALS: dict[str, IntervalInfo] = {i.name: i for i in _INTERVAL_LIST}

# ---------------------------------------------------------------------------
# Instruments
# ---------------------------------------------------------------------------

_INSTRUMENT_LIST: tuple[InstrumentProfile, ...] = (
    InstrumentProfile("acoustic_grand_piano", "Piano", 0, 21, 108),
    InstrumentProfile("vibraphone", "Vibraphone", 11, 53, 89),
    InstrumentProfile("marimba", "Marimba", 12, 45, 96),
    InstrumentProfile("acoustic_guitar_nylon", "Nylon Guitar", 24, 40, 83),
    InstrumentProfile("electric_guitar_clean", "Clean Electric Guitar", 27, 40, 86),
    InstrumentProfile("acoustic_bass", "Acoustic Bass", 32, 28, 55),
    InstrumentProfile("electric_bass_finger", "Electric Bass", 33, 28, 67),
    InstrumentProfile("violin", "Violin", 40, 55, 103),
    InstrumentProfile("viola", "Viola", 41, 48, 91),
    InstrumentProfile("cello", "Cello", 42, 36, 76),
    InstrumentProfile("contrabass", "Contrabass", 43, 28, 67),
    InstrumentProfile("trumpet", "Trumpet", 56, 54, 82),
    InstrumentProfile("trombone", "Trombone", 57, 40, 72),
    InstrumentProfile("tuba", "Tuba", 58, 28, 58),
    InstrumentProfile("french_horn", "French Horn", 60, 34, 77),
    InstrumentProfile("soprano_sax", "Soprano Sax", 64, 56, 87),
    InstrumentProfile("alto_sax", "Alto Sax", 65, 49, 80),
    InstrumentProfile("tenor_sax", "Tenor Sax", 66, 44, 75),
    InstrumentProfile("baritone_sax", "Baritone Sax", 67, 36, 69),
    InstrumentProfile("oboe", "Oboe", 68, 58, 91),
    InstrumentProfile("bassoon", "Bassoon", 70, 34, 72),
    InstrumentProfile("clarinet", "Clarinet", 71, 50, 91),
    InstrumentProfile("flute", "Flute", 73, 60, 96),
    InstrumentProfile("choir_aahs_soprano", "Choir Soprano", 52, 60, 81),
    InstrumentProfile("choir_aahs_alto", "Choir Alto", 52, 53, 74),
    InstrumentProfile("choir_aahs_tenor", "Choir Tenor", 52, 48, 69),
    InstrumentProfile("choir_aahs_bass", "Choir Bass", 52, 40, 64),
)

INSTRUMENTS: dict[str, InstrumentProfile] = {i.name: i for i in _INSTRUMENT_LIST}

# ---------------------------------------------------------------------------
# Playback options
# ---------------------------------------------------------------------------

METRONOME_MODES: tuple[str, ...] = tuple(m.value for m in Metronome)

TEMPO_RANGE: tuple[int, int] = (60, 480)
TEMPO_MENU_STEP = 4
DEFAULT_TEMPO = 120

REPEATS_RANGE: tuple[int, int] = (0, 3)
SILENCE_RANGE: tuple[int, int] = (0, 7)

# Menu order; bit (2 - j) mutes repeat j, so 4 mutes the first repeat.
SILENCE_MASKS: tuple[int, ...] = (0, 1, 2, 4, 3, 5, 6, 7)


def pitch_class(tonic: str) -> int:
    """Return the pitch class (0 = C) of a tonic name.

    Raises:
        KeyError: if ``tonic`` is not one of ``TONICS``.
    """
    if tonic not in TONIC_DISPLAY:
        raise KeyError(tonic)
    return TONICS.index(tonic)


def instrument_profile(name: str) -> InstrumentProfile:
    """Look up an instrument profile by URL name.

    Raises:
        KeyError: if the instrument is not in the catalog.
    """
    return INSTRUMENTS[name]
