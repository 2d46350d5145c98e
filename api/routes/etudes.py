"""
Etude routes.

``GET /etude/{tonic}/{pattern}/{i1}/{i2}/{i3}/{instrument}/{metronome}/{tempo}/{repeats}/{silence}``
    Validate the tuple, make sure a fresh artifact is stored (generating it
    at most once per key), and stream the MIDI bytes.

``GET /etude-options``
    The catalog of legal values, for building request menus.

The route is a plain ``def`` so FastAPI runs it on its worker threadpool;
waiting on an in-flight generation blocks only that worker thread.
"""

from __future__ import annotations

import logging
import time
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse

from api.deps import get_orchestrator
from api.schemas.etudes import (
    EtudeOptionsResponse,
    InstrumentOut,
    IntervalOut,
    PatternOut,
    SilenceOption,
    TempoOptions,
    TonicOut,
)
from composition.composer import is_muted
from core.etudes.catalog import (
    DEFAULT_TEMPO,
    INSTRUMENTS,
    INTERVALS,
    METRONOME_MODES,
    NO_SELECTION,
    PATTERNS,
    REPEATS_RANGE,
    SILENCE_MASKS,
    TEMPO_MENU_STEP,
    TEMPO_RANGE,
    TONIC_DISPLAY,
    TONICS,
)
from core.etudes.errors import GenerationError, ValidationError
from core.etudes.keys import download_filename
from core.etudes.validation import parse_etude_path
from infrastructure.metrics import record_request
from infrastructure.orchestrator import GenerationOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter(tags=["etudes"])

Orchestrator = Annotated[GenerationOrchestrator, Depends(get_orchestrator)]

MIDI_MEDIA_TYPE = "audio/midi"
PATH_TEMPLATE = (
    "/etude/{tonic}/{pattern}/{interval1}/{interval2}/{interval3}"
    "/{instrument}/{metronome}/{tempo}/{repeats}/{silence}"
)


@router.get("/etude/{etude_path:path}", response_class=StreamingResponse)
def get_etude(etude_path: str, orchestrator: Orchestrator) -> StreamingResponse:
    """
    Serve the etude addressed by the ten path segments.

    Raises:
        400: wrong segment count or any unknown/out-of-range field.
        500: generation or storage failed, or the wait for an in-flight
            generation timed out (and no stale copy could be served).
    """
    t_start = time.perf_counter()
    try:
        params = parse_etude_path(etude_path)
    except ValidationError as exc:
        record_request(outcome="rejected", latency_seconds=time.perf_counter() - t_start)
        logger.info("Rejected etude request %r: %s", etude_path, exc)
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    try:
        outcome = orchestrator.ensure(params)
        body = orchestrator.store.read(outcome.key)
    except GenerationError as exc:
        record_request(outcome="error", latency_seconds=time.perf_counter() - t_start)
        logger.error("Etude request %r failed: %s", etude_path, exc)
        raise HTTPException(status_code=500, detail=f"Could not generate etude: {exc}") from exc

    record_request(outcome=outcome.status.value, latency_seconds=time.perf_counter() - t_start)
    filename = download_filename(params)
    return StreamingResponse(
        body,
        media_type=MIDI_MEDIA_TYPE,
        headers={
            "Content-Disposition": f'inline; filename="{filename}"',
            "X-Etude-Cache": outcome.status.value,
        },
    )


@router.get("/etude-options", response_model=EtudeOptionsResponse)
def etude_options() -> EtudeOptionsResponse:
    """Return every legal value for each etude path segment.

    Each value passes validation on its own, but not every combination can be
    composed: interval patterns need the summed interval span to fit inside
    the instrument's pitch range. A three-octave intervaltriple on
    choir_aahs_soprano (60-81) is valid input and still returns 500.
    """
    low, high = TEMPO_RANGE
    return EtudeOptionsResponse(
        unused=NO_SELECTION,
        tonics=[TonicOut(name=t, display_name=TONIC_DISPLAY[t]) for t in TONICS],
        patterns=[
            PatternOut(name=p.name, display_name=p.display_name, interval_count=p.interval_count)
            for p in PATTERNS.values()
        ],
        intervals=[
            IntervalOut(name=i.name, semitones=i.semitones, display_name=i.display_name)
            for i in INTERVALS.values()
        ],
        instruments=[
            InstrumentOut(
                name=i.name,
                display_name=i.display_name,
                program=i.program,
                lowest_pitch=i.lowest_pitch,
                highest_pitch=i.highest_pitch,
            )
            for i in INSTRUMENTS.values()
        ],
        metronome=list(METRONOME_MODES),
        tempo=TempoOptions(minimum=low, maximum=high, step=TEMPO_MENU_STEP, default=DEFAULT_TEMPO),
        repeats=list(range(REPEATS_RANGE[1], REPEATS_RANGE[0] - 1, -1)),
        silence=[
            SilenceOption(value=mask, muted_repeats=[is_muted(j, mask) for j in (1, 2, 3)])
            for mask in SILENCE_MASKS
        ],
        path_template=PATH_TEMPLATE,
    )
