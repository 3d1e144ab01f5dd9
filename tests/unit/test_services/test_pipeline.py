"""Unit tests for the search pipeline and last-query-wins ordering."""

from __future__ import annotations

import asyncio
import random
from unittest.mock import AsyncMock

import pytest

from cosmos_engine.models.schemas import Record
from cosmos_engine.providers.base import BaseProvider
from cosmos_engine.services.aggregator import Aggregator
from cosmos_engine.services.layout import SpatialLayout
from cosmos_engine.services.pipeline import SearchPipeline


class GatedProvider(BaseProvider):
    """Answers each query with one record, but only once that query's gate opens."""

    source = "content-gallery"

    def __init__(self) -> None:
        self.gates: dict[str, asyncio.Event] = {}
        self.started: dict[str, asyncio.Event] = {}

    def gate(self, query: str) -> asyncio.Event:
        return self.gates.setdefault(query, asyncio.Event())

    def started_event(self, query: str) -> asyncio.Event:
        return self.started.setdefault(query, asyncio.Event())

    async def search(self, query: str) -> list[Record]:
        self.started_event(query).set()
        await self.gate(query).wait()
        return [self._record(id=f"{query}-1", name=f"{query} result", record_type="model")]


def _pipeline(providers, **kwargs) -> SearchPipeline:
    return SearchPipeline(Aggregator(providers, timeout=2.0), SpatialLayout(rng=random.Random(3)), **kwargs)


@pytest.mark.asyncio
async def test_search_publishes_ranked_layout(fake_provider, sample_records):
    pipeline = _pipeline({"content-gallery": fake_provider("content-gallery", sample_records)})
    result = await pipeline.search("helmet")

    assert result.status == "completed"
    assert result.generation == pipeline.generation == 1
    assert pipeline.state is result.state
    nodes = list(result.state.graph.nodes.values())
    assert [n.id for n in nodes[:2]] == ["gallery-damaged-helmet", "objaverse-helmet-001"]
    assert nodes[0].relevance == pytest.approx(0.8)
    assert all(n.spatial_position is not None for n in nodes)


@pytest.mark.asyncio
async def test_no_results_publishes_empty_graph(fake_provider):
    pipeline = _pipeline({"content-gallery": fake_provider("content-gallery", error=RuntimeError("x"))})
    result = await pipeline.search("helmet")
    assert result.status == "completed"
    assert result.state.graph.node_count == 0


@pytest.mark.asyncio
async def test_older_query_finishing_last_is_discarded():
    provider = GatedProvider()
    pipeline = _pipeline({"content-gallery": provider})

    first = asyncio.create_task(pipeline.search("first"))
    await provider.started_event("first").wait()
    second = asyncio.create_task(pipeline.search("second"))
    await provider.started_event("second").wait()

    provider.gate("second").set()
    second_result = await second
    provider.gate("first").set()
    first_result = await first

    assert second_result.status == "completed"
    assert first_result.status == "superseded"
    assert first_result.state is None
    assert pipeline.state.generation == 2
    assert list(pipeline.state.graph.nodes) == ["second-1"]


@pytest.mark.asyncio
async def test_older_query_finishing_first_is_replaced():
    provider = GatedProvider()
    pipeline = _pipeline({"content-gallery": provider})

    first = asyncio.create_task(pipeline.search("first"))
    await provider.started_event("first").wait()
    second = asyncio.create_task(pipeline.search("second"))
    await provider.started_event("second").wait()

    provider.gate("first").set()
    first_result = await first
    provider.gate("second").set()
    second_result = await second

    # first was already stale when its results arrived
    assert first_result.status == "superseded"
    assert second_result.status == "completed"
    assert list(pipeline.state.graph.nodes) == ["second-1"]


@pytest.mark.asyncio
async def test_sequential_queries_replace_layout(fake_provider, sample_records):
    pipeline = _pipeline({"content-gallery": fake_provider("content-gallery", sample_records)})
    first = await pipeline.search("helmet")
    second = await pipeline.search("lantern")

    assert first.status == second.status == "completed"
    assert pipeline.state.generation == 2
    assert pipeline.state.graph_id != first.state.graph_id
    assert next(iter(pipeline.state.graph.nodes)) == "gallery-lantern"


@pytest.mark.asyncio
async def test_import_supersedes_in_flight_search():
    provider = GatedProvider()
    pipeline = _pipeline({"content-gallery": provider})

    pending = asyncio.create_task(pipeline.search("first"))
    await provider.started_event("first").wait()
    state = pipeline.load({"nodes": [{"id": "a", "name": "Imported"}]})
    provider.gate("first").set()
    result = await pending

    assert result.status == "superseded"
    assert pipeline.state is state
    assert list(pipeline.state.graph.nodes) == ["a"]


@pytest.mark.asyncio
async def test_max_results_caps_graph(fake_provider):
    records = [Record(id=f"r{i}", name="thing") for i in range(30)]
    pipeline = _pipeline({"content-gallery": fake_provider("content-gallery", records)}, max_results=10)
    result = await pipeline.search("thing")
    assert result.state.graph.node_count == 10


@pytest.mark.asyncio
async def test_cache_hit_skips_providers(fake_provider, sample_records):
    provider = fake_provider("content-gallery", sample_records)
    cache = AsyncMock()
    cache.get_cached_search = AsyncMock(return_value=[sample_records[2]])
    pipeline = _pipeline({"content-gallery": provider}, cache=cache)

    result = await pipeline.search("lantern", ["all"])

    assert provider.queries == []
    assert list(result.state.graph.nodes) == ["gallery-lantern"]
    cache.get_cached_search.assert_awaited_once_with("lantern", ["content-gallery"])
    cache.cache_search.assert_not_awaited()


@pytest.mark.asyncio
async def test_cache_miss_stores_results(fake_provider, sample_records):
    cache = AsyncMock()
    cache.get_cached_search = AsyncMock(return_value=None)
    pipeline = _pipeline({"content-gallery": fake_provider("content-gallery", sample_records)}, cache=cache)

    await pipeline.search("helmet")

    cache.cache_search.assert_awaited_once()
    query, sources, records = cache.cache_search.await_args.args
    assert (query, sources) == ("helmet", ["content-gallery"])
    assert [r.id for r in records] == [r.id for r in sample_records]


@pytest.mark.asyncio
async def test_empty_results_are_not_cached(fake_provider):
    cache = AsyncMock()
    cache.get_cached_search = AsyncMock(return_value=None)
    pipeline = _pipeline({"content-gallery": fake_provider("content-gallery")}, cache=cache)

    await pipeline.search("nothing")
    cache.cache_search.assert_not_awaited()


class DictCache:
    """In-memory stand-in for CacheService keyed like the Redis one."""

    def __init__(self) -> None:
        self.store: dict[tuple, list[Record]] = {}

    async def get_cached_search(self, query, sources):
        return self.store.get((query, tuple(sources)))

    async def cache_search(self, query, sources, records):
        self.store[(query, tuple(sources))] = list(records)


@pytest.mark.asyncio
async def test_partial_results_are_not_cached_after_provider_failure(fake_provider):
    gallery = fake_provider("content-gallery", [Record(id="a", name="helmet a")])
    code = fake_provider("code-host", [Record(id="b", name="helmet b")], error=RuntimeError("down"))
    cache = DictCache()
    pipeline = _pipeline({"content-gallery": gallery, "code-host": code}, cache=cache)

    first = await pipeline.search("helmet")
    assert list(first.state.graph.nodes) == ["a"]
    assert cache.store == {}

    code.error = None
    second = await pipeline.search("helmet")
    assert set(second.state.graph.nodes) == {"a", "b"}
    assert code.queries == ["helmet", "helmet"]

    # a clean aggregation is cached and served on the next search
    third = await pipeline.search("helmet")
    assert set(third.state.graph.nodes) == {"a", "b"}
    assert code.queries == ["helmet", "helmet"]


def test_tick_and_frame_without_state(fake_provider):
    pipeline = _pipeline({"content-gallery": fake_provider("content-gallery")})
    assert pipeline.tick() is None
    assert pipeline.frame() is None


def test_tick_advances_published_clock(fake_provider):
    pipeline = _pipeline({"content-gallery": fake_provider("content-gallery")})
    pipeline.load([{"id": "a"}, {"id": "b"}])
    assert pipeline.tick().time == pytest.approx(0.01)
    assert pipeline.tick(0.25).time == pytest.approx(0.26)
    assert pipeline.frame().time == pytest.approx(0.26)
