"""Shared FastAPI dependency injection.

The pipeline and layout engine live on `app.state`, created per application
in the lifespan handler, so every app instance (and every test client) owns
its own graph, cache and generation counter.
"""

from __future__ import annotations

from fastapi import Request

from cosmos_engine.config import Settings
from cosmos_engine.services.layout import SpatialLayout
from cosmos_engine.services.pipeline import SearchPipeline


def get_pipeline(request: Request) -> SearchPipeline:
    pipeline = getattr(request.app.state, "pipeline", None)
    if pipeline is None:
        raise RuntimeError("Search pipeline not initialized")
    return pipeline


def get_layout(request: Request) -> SpatialLayout:
    layout = getattr(request.app.state, "layout", None)
    if layout is None:
        raise RuntimeError("Spatial layout not initialized")
    return layout


def get_app_settings(request: Request) -> Settings:
    settings = getattr(request.app.state, "settings", None)
    if settings is None:
        raise RuntimeError("Settings not initialized")
    return settings
