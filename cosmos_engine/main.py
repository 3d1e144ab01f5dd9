"""FastAPI application factory with lifespan events."""

from __future__ import annotations

import uuid
from contextlib import asynccontextmanager

import httpx
import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cosmos_engine.api.router import api_router
from cosmos_engine.config import get_settings
from cosmos_engine.providers import build_providers
from cosmos_engine.services.aggregator import Aggregator
from cosmos_engine.services.cache_service import CacheService
from cosmos_engine.services.layout import SpatialLayout
from cosmos_engine.services.pipeline import SearchPipeline
from cosmos_engine.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)

USER_AGENT = "cosmos-engine/0.1 (+https://github.com/cosmos-engine)"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application startup and shutdown resources."""
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)

    http_client = httpx.AsyncClient(
        timeout=settings.HTTP_TIMEOUT_SECONDS,
        follow_redirects=True,
        headers={"User-Agent": USER_AGENT},
    )

    cache: CacheService | None = None
    if settings.REDIS_URL:
        cache = CacheService(settings.REDIS_URL, ttl=settings.SEARCH_CACHE_TTL)
        if await cache.ping():
            logger.info("search_cache_initialized")
        else:
            logger.warning("search_cache_unavailable", redis_url=settings.REDIS_URL)
            await cache.close()
            cache = None

    providers = build_providers(settings, http_client)
    layout = SpatialLayout.from_settings(settings)
    pipeline = SearchPipeline(
        Aggregator(providers, timeout=settings.PROVIDER_TIMEOUT_SECONDS),
        layout,
        cache=cache,
        max_results=settings.MAX_RESULTS,
    )

    app.state.settings = settings
    app.state.layout = layout
    app.state.cache = cache
    app.state.pipeline = pipeline

    logger.info("app_started", providers=list(providers))
    yield

    # Shutdown
    await http_client.aclose()
    if cache is not None:
        await cache.close()
    logger.info("app_stopped")


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)

    application = FastAPI(
        title="Cosmos Engine",
        description="Multi-source asset search with 3D spatial graph layout",
        version="0.1.0",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(api_router)

    @application.middleware("http")
    async def request_id_middleware(request: Request, call_next) -> Response:
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    @application.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("unhandled_exception", error=str(exc), path=request.url.path)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error", "type": type(exc).__name__},
        )

    return application


app = create_app()
