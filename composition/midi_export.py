"""
composition/midi_export.py — Serialize etude note events to Standard MIDI bytes.

This module is the byte-output boundary of the composer:
    composer (sequences → TimedNote lists) → etude_to_midi → midi_to_bytes

MIDI structure:
    Type 1, Track 0 = tempo + 4/4 time signature
            Track 1 = program change + melody (channel 0)
            Track 2 = metronome clicks (channel 9, GM percussion)

Timing is tick-based throughout. Note positions are computed as
``bar * ticks_per_bar + beat * ticks_per_beat`` so there is no
floating-point drift over long etudes.
"""

from __future__ import annotations

import io
from collections.abc import Sequence
from dataclasses import dataclass

import mido

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEFAULT_TICKS_PER_BEAT: int = 480
"""Standard MIDI ticks per quarter note."""

MIDI_CHANNEL: int = 0
"""MIDI channel for the instrument (0-indexed = channel 1 in a DAW)."""

DRUM_CHANNEL: int = 9
"""GM standard MIDI channel for percussion (0-indexed = channel 10 in a DAW)."""

BEATS_PER_BAR: int = 4


@dataclass(frozen=True)
class TimedNote:
    """A note at an absolute tick position."""

    pitch: int  # 0-127
    velocity: int  # 1-127
    start_tick: int
    duration_ticks: int

    def __post_init__(self) -> None:
        if not (0 <= self.pitch <= 127):
            raise ValueError(f"MIDI pitch {self.pitch} out of range [0, 127]")
        if self.start_tick < 0:
            raise ValueError(f"start_tick must be non-negative, got {self.start_tick}")
        if self.duration_ticks <= 0:
            raise ValueError(f"duration_ticks must be positive, got {self.duration_ticks}")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _bpm_to_tempo_us(bpm: float) -> int:
    """Convert BPM to MIDI tempo (microseconds per beat).

    120 BPM = 500,000 μs/beat.
    """
    if bpm <= 0:
        bpm = 120.0
    return max(1, round(60_000_000.0 / bpm))


def _meta_track(bpm: float) -> mido.MidiTrack:
    track = mido.MidiTrack()
    track.append(mido.MetaMessage("set_tempo", tempo=_bpm_to_tempo_us(bpm), time=0))
    track.append(
        mido.MetaMessage(
            "time_signature",
            numerator=BEATS_PER_BAR,
            denominator=4,
            clocks_per_click=24,
            notated_32nd_notes_per_beat=8,
            time=0,
        )
    )
    track.append(mido.MetaMessage("end_of_track", time=0))
    return track


def _notes_to_track(
    notes: Sequence[TimedNote],
    *,
    channel: int,
    name: str,
    program: int | None = None,
) -> mido.MidiTrack:
    """Build a track from absolute-time notes using delta encoding.

    Events are sorted by tick with note_off before note_on at the same tick,
    so back-to-back notes of the same pitch retrigger cleanly.
    """
    track = mido.MidiTrack()
    track.append(mido.MetaMessage("track_name", name=name, time=0))
    if program is not None:
        track.append(mido.Message("program_change", channel=channel, program=program, time=0))

    # (abs_tick, event_type, pitch, velocity); event_type 0 = note_off, 1 = note_on
    events: list[tuple[int, int, int, int]] = []
    for note in notes:
        velocity = max(1, min(127, note.velocity))
        events.append((note.start_tick, 1, note.pitch, velocity))
        events.append((note.start_tick + note.duration_ticks, 0, note.pitch, 0))
    events.sort(key=lambda e: (e[0], e[1]))

    current_tick = 0
    for abs_tick, event_type, pitch, velocity in events:
        delta = abs_tick - current_tick
        current_tick = abs_tick
        kind = "note_on" if event_type == 1 else "note_off"
        track.append(mido.Message(kind, channel=channel, note=pitch, velocity=velocity, time=delta))

    track.append(mido.MetaMessage("end_of_track", time=0))
    return track


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------


def etude_to_midi(
    melody: Sequence[TimedNote],
    clicks: Sequence[TimedNote],
    *,
    bpm: float,
    program: int,
    ticks_per_beat: int = DEFAULT_TICKS_PER_BEAT,
) -> mido.MidiFile:
    """Assemble an etude MIDI file.

    Args:
        melody: Instrument notes (channel 0).
        clicks: Metronome hits (channel 9). May be empty.
        bpm: Tempo in beats per minute.
        program: GM program number for the instrument.
        ticks_per_beat: MIDI resolution (default 480).

    Returns:
        mido.MidiFile with meta, melody and metronome tracks.

    Raises:
        ValueError: If melody is empty.
    """
    if not melody:
        raise ValueError("melody must not be empty")

    midi = mido.MidiFile(type=1, ticks_per_beat=ticks_per_beat)
    midi.tracks.append(_meta_track(bpm))
    midi.tracks.append(_notes_to_track(melody, channel=MIDI_CHANNEL, name="etude", program=program))
    midi.tracks.append(_notes_to_track(clicks, channel=DRUM_CHANNEL, name="metronome"))
    return midi


def midi_to_bytes(midi: mido.MidiFile) -> bytes:
    """Serialize a MidiFile to Standard MIDI File bytes."""
    buffer = io.BytesIO()
    midi.save(file=buffer)
    return buffer.getvalue()
