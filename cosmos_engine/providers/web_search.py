"""Web search provider — Wikipedia page search with curated 3D/XR resources as fallback."""

from __future__ import annotations

from typing import Any
from urllib.parse import quote, quote_plus

import httpx

from cosmos_engine.models.schemas import Record
from cosmos_engine.providers.base import BaseProvider
from cosmos_engine.utils.exceptions import ProviderResponseError
from cosmos_engine.utils.logging import get_logger
from cosmos_engine.utils.retry import async_retry
from cosmos_engine.utils.text_processing import matches_query, strip_markup

logger = get_logger(__name__)

WEB_RESOURCES: list[dict[str, str]] = [
    {"name": "Three.js Documentation", "url": "https://threejs.org/docs/",
     "description": "Official Three.js documentation and examples"},
    {"name": "WebXR Samples", "url": "https://immersive-web.github.io/webxr-samples/",
     "description": "WebXR API examples and demos"},
    {"name": "Sketchfab", "url": "https://sketchfab.com/",
     "description": "Platform for publishing 3D models"},
    {"name": "A-Frame School", "url": "https://aframe.io/aframe-school/",
     "description": "Interactive tutorials for WebVR"},
    {"name": "Babylon.js Playground", "url": "https://playground.babylonjs.com/",
     "description": "Interactive Babylon.js examples"},
]

WIKI_RESULT_LIMIT = 5


class WebSearchProvider(BaseProvider):
    """Encyclopedia search first, curated resources when the API is unreachable.

    An unusable API payload degrades to a single record pointing at a general
    web search for the query.
    """

    source = "web-search"

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        api_enabled: bool = True,
        api_url: str = "https://en.wikipedia.org/w/rest.php/v1/search/page",
    ) -> None:
        self._client = client
        self._api_enabled = api_enabled and client is not None
        self._api_url = api_url

    async def search(self, query: str) -> list[Record]:
        if self._api_enabled:
            try:
                pages = await self._fetch_pages(query)
                return [self._page_record(page) for page in pages]
            except httpx.HTTPError as exc:
                logger.warning("wikipedia_search_failed", query=query, error=str(exc))
            except (ProviderResponseError, ValueError) as exc:
                logger.warning("wikipedia_payload_unusable", query=query, error=str(exc))
                return [self._search_link_record(query)]

        return [
            self._record(
                id=f"web-{i}",
                name=resource["name"],
                description=resource["description"],
                record_type="page",
                url=resource["url"],
            )
            for i, resource in enumerate(
                r for r in WEB_RESOURCES
                if matches_query(query, r["name"], r["description"]) or query == ""
            )
        ]

    @async_retry()
    async def _fetch_pages(self, query: str) -> list[dict[str, Any]]:
        resp = await self._client.get(  # type: ignore[union-attr]
            self._api_url,
            params={"q": query, "limit": WIKI_RESULT_LIMIT},
        )
        resp.raise_for_status()
        payload = resp.json()
        pages = payload.get("pages") if isinstance(payload, dict) else None
        if not isinstance(pages, list):
            raise ProviderResponseError(self.source, "search response has no 'pages' list")
        return [page for page in pages if isinstance(page, dict) and page.get("title")]

    def _page_record(self, page: dict[str, Any]) -> Record:
        title = str(page["title"])
        description = page.get("description") or strip_markup(str(page.get("excerpt") or ""))
        thumbnail = (page.get("thumbnail") or {}).get("url")
        return self._record(
            id=f"wiki-{page.get('id', page.get('key', title))}",
            name=title,
            description=description or None,
            record_type="page",
            url=f"https://en.wikipedia.org/wiki/{quote(title.replace(' ', '_'))}",
            metadata={"thumbnail": f"https:{thumbnail}" if thumbnail and thumbnail.startswith("//") else thumbnail},
        )

    def _search_link_record(self, query: str) -> Record:
        return self._record(
            id="web-fallback",
            name=f'Search web for "{query}"',
            description="Search the web for 3D/WebGL/WebXR content",
            record_type="page",
            url=f"https://www.google.com/search?q={quote_plus(query + ' 3d webgl webxr')}",
        )
