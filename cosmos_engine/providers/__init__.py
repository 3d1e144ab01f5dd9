"""Search providers — one class per source, registered in a fixed order."""

from __future__ import annotations

import httpx

from cosmos_engine.config import Settings
from cosmos_engine.providers.base import BaseProvider
from cosmos_engine.providers.code_host import CodeHostProvider
from cosmos_engine.providers.content_gallery import ContentGalleryProvider
from cosmos_engine.providers.local_index import LocalIndexProvider
from cosmos_engine.providers.model_repository import ModelRepositoryProvider
from cosmos_engine.providers.web_search import WebSearchProvider
from cosmos_engine.utils.rate_limiter import TokenBucketRateLimiter


def build_providers(settings: Settings, client: httpx.AsyncClient | None = None) -> dict[str, BaseProvider]:
    """Registration table for the aggregator; dict order is the merge order."""
    providers: list[BaseProvider] = [
        ContentGalleryProvider(),
        ModelRepositoryProvider(index_path=settings.OBJAVERSE_INDEX_PATH),
        CodeHostProvider(
            client,
            api_enabled=settings.GITHUB_API_ENABLED,
            api_url=settings.GITHUB_API_URL,
            token=settings.GITHUB_TOKEN,
            rate_limiter=TokenBucketRateLimiter.per_minute(settings.GITHUB_REQUESTS_PER_MIN),
        ),
        WebSearchProvider(
            client,
            api_enabled=settings.WIKIPEDIA_SEARCH_ENABLED,
            api_url=settings.WIKIPEDIA_API_URL,
        ),
        LocalIndexProvider(index_path=settings.LOCAL_INDEX_PATH),
    ]
    return {provider.source: provider for provider in providers}


__all__ = [
    "BaseProvider",
    "CodeHostProvider",
    "ContentGalleryProvider",
    "LocalIndexProvider",
    "ModelRepositoryProvider",
    "WebSearchProvider",
    "build_providers",
]
