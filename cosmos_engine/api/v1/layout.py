"""Layout API endpoints — render frames for the external renderer."""

from __future__ import annotations

import asyncio

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Request
from sse_starlette.sse import EventSourceResponse

from cosmos_engine.api.dependencies import get_app_settings, get_layout, get_pipeline
from cosmos_engine.api.v1.schemas.layout import TickRequest
from cosmos_engine.config import Settings
from cosmos_engine.models.schemas import LayoutState, RenderFrame
from cosmos_engine.services.layout import SpatialLayout
from cosmos_engine.services.pipeline import SearchPipeline
from cosmos_engine.utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/layout", tags=["layout"])


@router.get("/frame", response_model=RenderFrame)
async def get_frame(pipeline: SearchPipeline = Depends(get_pipeline)) -> RenderFrame:
    frame = pipeline.frame()
    if frame is None:
        raise HTTPException(status_code=404, detail="No layout has been computed yet")
    return frame


@router.post("/tick", response_model=RenderFrame)
async def tick(
    request: TickRequest | None = Body(default=None),
    pipeline: SearchPipeline = Depends(get_pipeline),
) -> RenderFrame:
    """Advance the published animation clock and return the resulting frame."""
    pipeline.tick(request.delta_time if request else None)
    return await get_frame(pipeline)


@router.get("/stream")
async def stream_frames(
    request: Request,
    max_frames: int | None = Query(default=None, ge=1),
    pipeline: SearchPipeline = Depends(get_pipeline),
    layout: SpatialLayout = Depends(get_layout),
    settings: Settings = Depends(get_app_settings),
) -> EventSourceResponse:
    """SSE endpoint — one `frame` event per tick.

    Each connection runs its own clock over the published layout, so several
    viewers do not speed up each other's animation. A new search or import is
    picked up on the next tick.
    """

    async def event_generator():
        local: LayoutState | None = None
        sent = 0
        while max_frames is None or sent < max_frames:
            if await request.is_disconnected():
                logger.debug("frame_stream_disconnected", frames=sent)
                return

            published = pipeline.state
            if published is None:
                local = None
                yield {"event": "idle", "data": ""}
            else:
                if local is None or local.graph_id != published.graph_id:
                    local = published
                else:
                    local = layout.advance(local)
                yield {"event": "frame", "data": layout.frame(local).model_dump_json()}

            sent += 1
            await asyncio.sleep(settings.FRAME_INTERVAL_SECONDS)

        yield {"event": "done", "data": ""}

    return EventSourceResponse(event_generator())
