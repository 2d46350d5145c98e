"""
composition/composer.py — Etude composer, the concrete artifact generator.

Turns validated EtudeParameters plus an InstrumentProfile into MIDI bytes.

Material per pattern family:
    scale patterns   ordered three-note groups of distinct scale tones,
                     shuffled, capped at MAX_SCALE_SEQUENCES
    allintervals     tonic → tonic + k → tonic for k = 0..12
    interval         p → p + i1 → p for each pitch class p
    intervalpair     p → p + i1 → p + i1 + i2 for each pitch class p
    intervaltriple   four-note chain over i1, i2, i3 for each pitch class p

Placement is a random walk: each note (or each fixed-shape sequence) goes to
the octave closest to the previous pitch that keeps it inside the
instrument's range, so the etude never leaves the playable register.

Bar layout (4/4):
    bar 0                      metronome count-in, no notes
    one bar per playing        sequence notes on beats 1..n; each sequence
                               is played repeats + 1 times
    silence bit (2 - j)        mutes repeat j (j = 0..2)
"""

from __future__ import annotations

import itertools
import logging
import random
from collections.abc import Sequence

from composition.midi_export import (
    BEATS_PER_BAR,
    DEFAULT_TICKS_PER_BEAT,
    TimedNote,
    etude_to_midi,
    midi_to_bytes,
)
from core.etudes.catalog import INTERVALS, PATTERNS, pitch_class
from core.etudes.errors import GenerationError
from core.etudes.types import EtudeParameters, InstrumentProfile, Metronome

logger = logging.getLogger(__name__)

MAX_SCALE_SEQUENCES = 24

# GM percussion keys on channel 10
CLICK_DOWNBEAT = 76  # Hi Wood Block
CLICK_BEAT = 77  # Low Wood Block

_NOTE_VELOCITY = 90
_DOWNBEAT_VELOCITY = 100
_BEAT_VELOCITY = 70
_ALL_INTERVAL_SPAN = 12


# ---------------------------------------------------------------------------
# Sequence material
# ---------------------------------------------------------------------------


def _nearest(candidates: Sequence[int], target: int, rng: random.Random) -> int:
    """Pick the candidate closest to ``target``; ties broken randomly."""
    best = min(abs(c - target) for c in candidates)
    return rng.choice([c for c in candidates if abs(c - target) == best])


def _place_shape(
    offsets: Sequence[int],
    start_pc: int,
    profile: InstrumentProfile,
    previous: int,
    rng: random.Random,
) -> tuple[int, ...] | None:
    """Place a fixed interval shape starting on ``start_pc`` inside the range."""
    low, high = min(offsets), max(offsets)
    bases = [
        base
        for base in range(profile.lowest_pitch, profile.highest_pitch + 1)
        if base % 12 == start_pc
        and profile.contains(base + low)
        and profile.contains(base + high)
    ]
    if not bases:
        return None
    base = _nearest(bases, previous, rng)
    return tuple(base + o for o in offsets)


def _place_pitch_classes(
    pcs: Sequence[int],
    profile: InstrumentProfile,
    previous: int,
    rng: random.Random,
) -> tuple[int, ...] | None:
    """Place each pitch class at the octave nearest the previous note."""
    placed: list[int] = []
    for pc in pcs:
        candidates = [
            p for p in range(profile.lowest_pitch, profile.highest_pitch + 1) if p % 12 == pc
        ]
        if not candidates:
            return None
        previous = _nearest(candidates, previous, rng)
        placed.append(previous)
    return tuple(placed)


def _interval_offsets(params: EtudeParameters) -> tuple[int, ...]:
    count = PATTERNS[params.pattern].interval_count
    steps = [INTERVALS[name].semitones for name in params.intervals[:count]]
    if count == 1:
        return (0, steps[0], 0)
    return tuple(itertools.accumulate([0, *steps]))


def build_sequences(
    params: EtudeParameters,
    profile: InstrumentProfile,
    rng: random.Random,
) -> list[tuple[int, ...]]:
    """
    Build the ordered list of pitch sequences for an etude.

    Args:
        params: Validated etude parameters.
        profile: Instrument whose range bounds every pitch.
        rng: Random source for ordering and placement.

    Returns:
        List of MIDI pitch tuples; empty if nothing fits the range.
    """
    info = PATTERNS[params.pattern]
    previous = (profile.lowest_pitch + profile.highest_pitch) // 2
    sequences: list[tuple[int, ...]] = []

    if info.scale:
        tonic_pc = pitch_class(params.tonic)
        pcs = [(tonic_pc + step) % 12 for step in info.scale]
        groups = list(itertools.permutations(pcs, 3))
        rng.shuffle(groups)
        for group in groups[:MAX_SCALE_SEQUENCES]:
            placed = _place_pitch_classes(group, profile, previous, rng)
            if placed is not None:
                sequences.append(placed)
                previous = placed[-1]
        return sequences

    if info.uses_tonic:
        # allintervals: every interval from unison to octave above the tonic
        tonic_pc = pitch_class(params.tonic)
        shapes = [((0, k, 0), tonic_pc) for k in range(_ALL_INTERVAL_SPAN + 1)]
    else:
        offsets = _interval_offsets(params)
        shapes = [(offsets, pc) for pc in range(12)]

    rng.shuffle(shapes)
    for offsets, start_pc in shapes:
        placed = _place_shape(offsets, start_pc, profile, previous, rng)
        if placed is not None:
            sequences.append(placed)
            previous = placed[-1]
    return sequences


# ---------------------------------------------------------------------------
# Arrangement
# ---------------------------------------------------------------------------


def is_muted(playing: int, silence: int) -> bool:
    """True if the given playing (0 = first statement) is silenced by the mask."""
    if playing == 0:
        return False
    return bool(silence & (1 << (2 - (playing - 1))))


def _click_beats(mode: Metronome) -> tuple[int, ...]:
    if mode is Metronome.ON:
        return tuple(range(BEATS_PER_BAR))
    if mode is Metronome.DOWNBEAT:
        return (0,)
    return ()


def arrange(
    sequences: Sequence[tuple[int, ...]],
    params: EtudeParameters,
    ticks_per_beat: int = DEFAULT_TICKS_PER_BEAT,
) -> tuple[list[TimedNote], list[TimedNote]]:
    """Lay sequences out one bar per playing after a count-in bar.

    Returns:
        (melody, clicks) note lists in absolute ticks.
    """
    ticks_per_bar = ticks_per_beat * BEATS_PER_BAR
    note_ticks = ticks_per_beat * 9 // 10
    click_ticks = ticks_per_beat // 8

    melody: list[TimedNote] = []
    clicks: list[TimedNote] = []

    def click(bar: int, beat: int) -> None:
        pitch = CLICK_DOWNBEAT if beat == 0 else CLICK_BEAT
        velocity = _DOWNBEAT_VELOCITY if beat == 0 else _BEAT_VELOCITY
        start = bar * ticks_per_bar + beat * ticks_per_beat
        clicks.append(TimedNote(pitch, velocity, start, click_ticks))

    for beat in range(BEATS_PER_BAR):
        click(0, beat)

    click_beats = _click_beats(params.metronome)
    bar = 1
    for sequence in sequences:
        for playing in range(params.repeats + 1):
            if not is_muted(playing, params.silence):
                for beat, pitch in enumerate(sequence):
                    start = bar * ticks_per_bar + beat * ticks_per_beat
                    melody.append(TimedNote(pitch, _NOTE_VELOCITY, start, note_ticks))
            for beat in click_beats:
                click(bar, beat)
            bar += 1

    return melody, clicks


# ---------------------------------------------------------------------------
# Composer
# ---------------------------------------------------------------------------


class MidiEtudeComposer:
    """Generator that writes etudes as Standard MIDI Files.

    Args:
        seed: Fixed random seed for reproducible output. ``None`` draws fresh
            randomness per call so each regeneration yields a new etude.
        ticks_per_beat: MIDI resolution.
    """

    def __init__(
        self,
        *,
        seed: int | None = None,
        ticks_per_beat: int = DEFAULT_TICKS_PER_BEAT,
    ) -> None:
        self._seed = seed
        self._ticks_per_beat = ticks_per_beat

    def compose(self, params: EtudeParameters, profile: InstrumentProfile) -> bytes:
        """Compose one etude.

        Raises:
            GenerationError: if no sequence fits the instrument range.
        """
        rng = random.Random(self._seed)
        sequences = build_sequences(params, profile, rng)
        if not sequences:
            raise GenerationError(
                f"no {params.pattern} sequence fits the range of {profile.name} "
                f"({profile.lowest_pitch}-{profile.highest_pitch})"
            )
        melody, clicks = arrange(sequences, params, self._ticks_per_beat)

        midi = etude_to_midi(
            melody,
            clicks,
            bpm=params.tempo,
            program=profile.program,
            ticks_per_beat=self._ticks_per_beat,
        )
        data = midi_to_bytes(midi)
        logger.debug(
            "Composed %s on %s: %d sequences, %d notes, %d bytes",
            params.pattern,
            profile.name,
            len(sequences),
            len(melody),
            len(data),
        )
        return data
