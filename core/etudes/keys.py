"""
core/etudes/keys.py — Artifact identity and download naming.

The artifact key is the positional ``_`` join of all ten canonical fields
plus ``.mid``. Only instrument names contain ``_`` in the catalog, so the
five leading and four trailing fields split off unambiguously and no two
distinct parameter tuples share a key. The key is also the on-disk file
name, so it must stay a single safe path component.
"""

from __future__ import annotations

from core.etudes.catalog import PATTERNS
from core.etudes.types import EtudeParameters

ARTIFACT_SUFFIX = ".mid"
KEY_SEPARATOR = "_"
DOWNLOAD_SUFFIX = ".midi"


def derive_artifact_key(params: EtudeParameters) -> str:
    """Return the deterministic cache key / file name for ``params``.

    Example:
        >>> derive_artifact_key(parse_etude_path(
        ...     "c/pentatonic/none/none/none/acoustic_grand_piano/on/120/3/0"))
        'c_pentatonic_none_none_none_acoustic_grand_piano_on_120_3_0.mid'
    """
    return KEY_SEPARATOR.join(params.segments()) + ARTIFACT_SUFFIX


def download_filename(params: EtudeParameters) -> str:
    """Suggested client-side file name, omitting fields the pattern ignores."""
    required = PATTERNS[params.pattern].interval_count
    playback = [
        params.instrument,
        params.metronome.value,
        str(params.tempo),
        str(params.repeats),
        str(params.silence),
    ]
    if required:
        head = [params.pattern, *params.intervals[:required]]
    else:
        head = [params.tonic, params.pattern]
    return KEY_SEPARATOR.join(head + playback) + DOWNLOAD_SUFFIX
