"""Unit tests for the Redis search cache."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from cosmos_engine.models.schemas import Record
from cosmos_engine.services.cache_service import CacheService


@pytest.fixture
def mock_redis():
    client = AsyncMock()
    client.get = AsyncMock(return_value=None)
    client.set = AsyncMock(return_value=True)
    client.ping = AsyncMock(return_value=True)
    return client


@pytest.fixture
def cache(mock_redis):
    return CacheService("redis://localhost:6379/0", ttl=60, client=mock_redis)


def test_search_key_is_order_independent():
    key = CacheService.search_key("helmet", ["web-search", "content-gallery", "web-search"])
    assert key == "cosmos:search:content-gallery,web-search:helmet"
    assert key == CacheService.search_key("helmet", ["content-gallery", "web-search"])


@pytest.mark.asyncio
async def test_miss_returns_none(cache, mock_redis):
    assert await cache.get_cached_search("helmet", ["content-gallery"]) is None
    mock_redis.get.assert_awaited_once_with("cosmos:search:content-gallery:helmet")


@pytest.mark.asyncio
async def test_hit_returns_records(cache, mock_redis):
    mock_redis.get = AsyncMock(return_value=json.dumps([
        {"id": "a", "name": "Damaged Helmet", "source_tag": "content-gallery", "weight": 2.0},
    ]))
    records = await cache.get_cached_search("helmet", ["content-gallery"])
    assert records == [Record(id="a", name="Damaged Helmet", source_tag="content-gallery", weight=2.0)]


@pytest.mark.asyncio
async def test_read_error_counts_as_miss(cache, mock_redis):
    mock_redis.get = AsyncMock(side_effect=RedisConnectionError("refused"))
    assert await cache.get_cached_search("helmet", ["content-gallery"]) is None


@pytest.mark.asyncio
async def test_cache_search_stores_json_with_ttl(cache, mock_redis):
    record = Record(id="a", name="Lantern", source_tag="content-gallery", relationships=[{"target": "b"}])
    await cache.cache_search("lantern", ["content-gallery"], [record])

    key, payload = mock_redis.set.await_args.args
    assert key == "cosmos:search:content-gallery:lantern"
    assert mock_redis.set.await_args.kwargs["ex"] == 60
    stored = json.loads(payload)
    assert stored[0]["name"] == "Lantern"
    assert Record.model_validate(stored[0]) == record


@pytest.mark.asyncio
async def test_write_error_is_swallowed(cache, mock_redis):
    mock_redis.set = AsyncMock(side_effect=RedisConnectionError("refused"))
    await cache.cache_search("lantern", ["content-gallery"], [Record(id="a")])


@pytest.mark.asyncio
async def test_ping(cache, mock_redis):
    assert await cache.ping() is True
    mock_redis.ping = AsyncMock(side_effect=RedisConnectionError("refused"))
    assert await cache.ping() is False


@pytest.mark.asyncio
async def test_close(cache, mock_redis):
    await cache.close()
    mock_redis.aclose.assert_awaited_once()
