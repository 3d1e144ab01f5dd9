"""Search pipeline: aggregate -> rank -> build graph -> layout, last query wins."""

from __future__ import annotations

import time
from collections.abc import Iterable
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

from cosmos_engine.models.schemas import ALL_SOURCES, LayoutState, Record, RenderFrame
from cosmos_engine.services.aggregator import Aggregator
from cosmos_engine.services.cache_service import CacheService
from cosmos_engine.services.graph_builder import build_graph, graph_from_payload
from cosmos_engine.services.layout import SpatialLayout
from cosmos_engine.services.ranker import MAX_RESULTS, rank_records
from cosmos_engine.utils.logging import bind_search_context, get_logger

logger = get_logger(__name__)


class PipelineResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal["completed", "superseded"]
    generation: int
    query: str
    state: LayoutState | None = None


class SearchPipeline:
    """Owns the generation counter, the search cache and the published layout.

    Every search or import takes a new generation. When a search's provider
    results arrive, they are only ranked and laid out if no newer search or
    import has started in the meantime; otherwise the result is reported as
    superseded and the published state is left alone. Ranking, building and
    layout run without awaiting, so the check and the publish cannot be
    interleaved with another query.
    """

    def __init__(
        self,
        aggregator: Aggregator,
        layout: SpatialLayout,
        *,
        cache: CacheService | None = None,
        max_results: int = MAX_RESULTS,
    ) -> None:
        self._aggregator = aggregator
        self._layout = layout
        self._cache = cache
        self._max_results = max_results
        self._generation = 0
        self._state: LayoutState | None = None

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def state(self) -> LayoutState | None:
        return self._state

    @property
    def sources(self) -> list[str]:
        return self._aggregator.sources

    async def search(self, query: str, sources: Iterable[str] = (ALL_SOURCES,)) -> PipelineResult:
        self._generation += 1
        generation = self._generation
        bind_search_context(generation, query)
        start = time.monotonic()

        records = await self._fetch(query, list(sources))

        if generation != self._generation:
            logger.info("stale_query_discarded", latest_generation=self._generation)
            return PipelineResult(status="superseded", generation=generation, query=query)

        ranked = rank_records(records, query, limit=self._max_results)
        graph = build_graph(ranked)
        self._state = self._layout.layout(graph, generation=generation)

        logger.info(
            "search_completed",
            records=len(records),
            nodes=graph.node_count,
            links=graph.link_count,
            duration_ms=int((time.monotonic() - start) * 1000),
        )
        return PipelineResult(status="completed", generation=generation, query=query, state=self._state)

    async def _fetch(self, query: str, sources: list[str]) -> list[Record]:
        resolved = self._aggregator.resolve_sources(sources)
        if self._cache is not None:
            cached = await self._cache.get_cached_search(query, resolved)
            if cached is not None:
                return cached

        result = await self._aggregator.collect(query, resolved)
        if self._cache is not None and result.records:
            if result.degraded:
                logger.info("cache_write_skipped", reason="provider_failed", failed=result.failed)
            else:
                await self._cache.cache_search(query, resolved, result.records)
        return result.records

    def load(self, payload: Any) -> LayoutState:
        """Publish a layout of imported graph JSON; supersedes in-flight searches."""
        graph = graph_from_payload(payload)
        self._generation += 1
        self._state = self._layout.layout(graph, generation=self._generation)
        logger.info(
            "graph_imported",
            generation=self._generation,
            nodes=graph.node_count,
            links=graph.link_count,
        )
        return self._state

    def tick(self, delta_time: float | None = None) -> LayoutState | None:
        if self._state is not None:
            self._state = self._layout.advance(self._state, delta_time)
        return self._state

    def frame(self) -> RenderFrame | None:
        if self._state is None:
            return None
        return self._layout.frame(self._state)
