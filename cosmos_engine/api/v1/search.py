"""Search API endpoint — runs a query through the pipeline."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from cosmos_engine.api.dependencies import get_app_settings, get_pipeline
from cosmos_engine.api.v1.schemas.search import SearchRequest, SearchResponse
from cosmos_engine.config import Settings
from cosmos_engine.services.pipeline import SearchPipeline
from cosmos_engine.utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/search", tags=["search"])


@router.post("", response_model=SearchResponse)
async def search(
    request: SearchRequest,
    pipeline: SearchPipeline = Depends(get_pipeline),
    settings: Settings = Depends(get_app_settings),
) -> SearchResponse:
    """Aggregate, rank, build and lay out a graph for the query.

    A search overtaken by a newer one answers with `status: superseded` and no
    graph; the newer search's graph stays published.
    """
    sources = request.sources if request.sources is not None else settings.DEFAULT_SOURCES
    result = await pipeline.search(request.query.strip(), sources)
    return SearchResponse.from_result(result)
