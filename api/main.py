from typing import Annotated

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

from api.deps import get_orchestrator
from api.routes.etudes import router as etudes_router
from api.schemas.etudes import CacheStatsResponse
from infrastructure.metrics import get_metrics_response
from infrastructure.orchestrator import GenerationOrchestrator

app = FastAPI(title="Infinite Etudes")

# CORS: a locally served etude page fetches MIDI files cross-origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ],
    allow_credentials=False,
    allow_methods=["GET"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition", "X-Etude-Cache"],
)

app.include_router(etudes_router)


@app.get("/health")
def health() -> dict[str, str]:
    """Return a simple liveness check."""
    return {"status": "ok"}


@app.get("/metrics")
def metrics() -> Response:
    """Prometheus metrics endpoint.

    Returns metrics in Prometheus text exposition format.
    """
    body, content_type = get_metrics_response()
    return Response(content=body, media_type=content_type)


@app.get("/cache/stats", response_model=CacheStatsResponse)
def cache_stats(
    orchestrator: Annotated[GenerationOrchestrator, Depends(get_orchestrator)],
) -> CacheStatsResponse:
    """Return orchestrator counters and the keys currently being generated."""
    return CacheStatsResponse(**orchestrator.status())
