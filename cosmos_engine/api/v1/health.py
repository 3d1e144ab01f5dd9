"""Health and readiness probe endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from cosmos_engine.api.dependencies import get_pipeline
from cosmos_engine.services.pipeline import SearchPipeline

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict:
    return {"status": "healthy"}


@router.get("/ready")
async def ready(request: Request, pipeline: SearchPipeline = Depends(get_pipeline)) -> dict:
    cache = getattr(request.app.state, "cache", None)
    cache_ok = await cache.ping() if cache is not None else None
    return {
        "status": "ready" if cache_ok is not False else "degraded",
        "providers": pipeline.sources,
        "cache": cache_ok,
        "generation": pipeline.generation,
    }
