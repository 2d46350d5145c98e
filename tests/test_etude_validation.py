"""Tests for core/etudes/validation.py — path segments to EtudeParameters.

Covers:
- Accepted tuples for each pattern family
- Canonical form (unused slots and tonic become "none")
- Rejection of every field, one at a time
- Numeric ranges checked by membership, not parseability
"""

from __future__ import annotations

import pytest

from core.etudes.errors import ValidationError
from core.etudes.types import Metronome
from core.etudes.validation import parse_etude_path, parse_etude_segments

VALID = ["c", "pentatonic", "none", "none", "none", "acoustic_grand_piano", "on", "120", "3", "0"]


def _with(**changes: str) -> list[str]:
    """Return VALID with named fields replaced."""
    fields = [
        "tonic",
        "pattern",
        "interval1",
        "interval2",
        "interval3",
        "instrument",
        "metronome",
        "tempo",
        "repeats",
        "silence",
    ]
    segments = list(VALID)
    for name, value in changes.items():
        segments[fields.index(name)] = value
    return segments


# ---------------------------------------------------------------------------
# Accepted tuples
# ---------------------------------------------------------------------------


class TestAccepted:
    def test_pentatonic_example(self) -> None:
        params = parse_etude_segments(VALID)
        assert params.tonic == "c"
        assert params.pattern == "pentatonic"
        assert params.intervals == ("none", "none", "none")
        assert params.instrument == "acoustic_grand_piano"
        assert params.metronome is Metronome.ON
        assert (params.tempo, params.repeats, params.silence) == (120, 3, 0)

    def test_parse_etude_path_splits_on_slash(self) -> None:
        assert parse_etude_path("/".join(VALID)) == parse_etude_segments(VALID)

    def test_intervalpair_with_two_intervals(self) -> None:
        params = parse_etude_segments(
            _with(tonic="none", pattern="intervalpair", interval1="minor3", interval2="perfect5")
        )
        assert params.intervals == ("minor3", "perfect5", "none")

    def test_intervaltriple(self) -> None:
        params = parse_etude_segments(
            _with(
                tonic="none",
                pattern="intervaltriple",
                interval1="minor2",
                interval2="major3",
                interval3="octave",
            )
        )
        assert params.intervals == ("minor2", "major3", "octave")

    @pytest.mark.parametrize("tempo", ["60", "480"])
    def test_tempo_bounds_inclusive(self, tempo: str) -> None:
        assert parse_etude_segments(_with(tempo=tempo)).tempo == int(tempo)

    def test_silence_and_repeats_upper_bounds(self) -> None:
        params = parse_etude_segments(_with(repeats="3", silence="7"))
        assert params.silence == 7

    @pytest.mark.parametrize("mode", ["on", "downbeat", "off"])
    def test_metronome_modes(self, mode: str) -> None:
        assert parse_etude_segments(_with(metronome=mode)).metronome.value == mode


# ---------------------------------------------------------------------------
# Canonical form
# ---------------------------------------------------------------------------


class TestCanonicalForm:
    def test_unused_interval_slots_become_none(self) -> None:
        params = parse_etude_segments(_with(interval1="minor3", interval3="octave"))
        assert params.intervals == ("none", "none", "none")

    def test_interval_pattern_drops_tonic(self) -> None:
        params = parse_etude_segments(
            _with(tonic="g", pattern="interval", interval1="tritone", interval2="minor2")
        )
        assert params.tonic == "none"
        assert params.intervals == ("tritone", "none", "none")

    def test_equivalent_requests_compare_equal(self) -> None:
        a = parse_etude_segments(_with(tonic="d", pattern="interval", interval1="major2"))
        b = parse_etude_segments(
            _with(tonic="none", pattern="interval", interval1="major2", interval2="octave")
        )
        assert a == b


# ---------------------------------------------------------------------------
# Rejections
# ---------------------------------------------------------------------------


class TestRejected:
    def test_too_few_segments(self) -> None:
        with pytest.raises(ValidationError, match="expected 10 path segments") as exc:
            parse_etude_segments(VALID[:9])
        assert exc.value.field == "path"

    def test_too_many_segments(self) -> None:
        with pytest.raises(ValidationError):
            parse_etude_segments([*VALID, "extra"])

    def test_trailing_slash_rejected(self) -> None:
        with pytest.raises(ValidationError):
            parse_etude_path("/".join(VALID) + "/")

    def test_intervalpair_missing_second_interval(self) -> None:
        with pytest.raises(ValidationError) as exc:
            parse_etude_segments(
                _with(tonic="none", pattern="intervalpair", interval1="minor3", interval2="none")
            )
        assert exc.value.field == "interval2"

    def test_tempo_above_range(self) -> None:
        with pytest.raises(ValidationError) as exc:
            parse_etude_segments(_with(tempo="500"))
        assert exc.value.field == "tempo"

    def test_tempo_below_range(self) -> None:
        with pytest.raises(ValidationError):
            parse_etude_segments(_with(tempo="59"))

    @pytest.mark.parametrize("tempo", ["", "12o", "-120", "+120", "120.0", "１２０"])
    def test_tempo_not_a_plain_integer(self, tempo: str) -> None:
        with pytest.raises(ValidationError, match="decimal integer"):
            parse_etude_segments(_with(tempo=tempo))

    def test_repeats_out_of_range(self) -> None:
        with pytest.raises(ValidationError) as exc:
            parse_etude_segments(_with(repeats="4"))
        assert exc.value.field == "repeats"

    def test_silence_out_of_range(self) -> None:
        with pytest.raises(ValidationError) as exc:
            parse_etude_segments(_with(silence="8"))
        assert exc.value.field == "silence"

    def test_unknown_tonic(self) -> None:
        with pytest.raises(ValidationError) as exc:
            parse_etude_segments(_with(tonic="h"))
        assert exc.value.field == "tonic"

    def test_tonic_pattern_without_tonic(self) -> None:
        with pytest.raises(ValidationError, match="requires a tonic"):
            parse_etude_segments(_with(tonic="none"))

    def test_unknown_pattern(self) -> None:
        with pytest.raises(ValidationError) as exc:
            parse_etude_segments(_with(pattern="bebop"))
        assert exc.value.field == "pattern"

    def test_unknown_interval_in_unused_slot(self) -> None:
        with pytest.raises(ValidationError) as exc:
            parse_etude_segments(_with(interval3="ninth"))
        assert exc.value.field == "interval3"

    def test_unknown_instrument(self) -> None:
        with pytest.raises(ValidationError) as exc:
            parse_etude_segments(_with(instrument="kazoo"))
        assert exc.value.field == "instrument"

    def test_unknown_metronome(self) -> None:
        with pytest.raises(ValidationError) as exc:
            parse_etude_segments(_with(metronome="loud"))
        assert exc.value.field == "metronome"

    def test_case_sensitive_membership(self) -> None:
        with pytest.raises(ValidationError):
            parse_etude_segments(_with(tonic="C"))

    def test_message_names_field_and_value(self) -> None:
        with pytest.raises(ValidationError, match=r"invalid tempo '500'"):
            parse_etude_segments(_with(tempo="500"))
