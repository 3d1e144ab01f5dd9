"""Redis cache for aggregated provider results."""

from __future__ import annotations

import json
from collections.abc import Iterable
from typing import Any

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from cosmos_engine.models.schemas import Record
from cosmos_engine.utils.logging import get_logger

logger = get_logger(__name__)

_SEARCH_KEY = "cosmos:search:{}:{}"


class CacheService:
    """Redis-backed cache owned by one pipeline instance.

    A cache outage never fails a search: read errors count as misses and
    write errors are logged and dropped.
    """

    def __init__(self, redis_url: str, ttl: int = 3600, client: Any = None) -> None:
        self._client = client if client is not None else aioredis.from_url(redis_url, decode_responses=True)
        self._ttl = ttl

    @staticmethod
    def search_key(query: str, sources: Iterable[str]) -> str:
        return _SEARCH_KEY.format(",".join(sorted(set(sources))), query)

    async def get(self, key: str) -> Any | None:
        raw = await self._client.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            return raw

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        serialized = json.dumps(value) if not isinstance(value, str) else value
        await self._client.set(key, serialized, ex=ttl or self._ttl)

    async def get_cached_search(self, query: str, sources: Iterable[str]) -> list[Record] | None:
        key = self.search_key(query, sources)
        try:
            cached = await self.get(key)
        except RedisError as exc:
            logger.warning("cache_read_failed", key=key, error=str(exc))
            return None
        if not isinstance(cached, list):
            return None
        logger.debug("cache_hit", key=key, records=len(cached))
        return [Record.model_validate(item) for item in cached if isinstance(item, dict)]

    async def cache_search(self, query: str, sources: Iterable[str], records: list[Record]) -> None:
        key = self.search_key(query, sources)
        try:
            await self.set(key, [r.model_dump(mode="json") for r in records])
        except RedisError as exc:
            logger.warning("cache_write_failed", key=key, error=str(exc))

    async def ping(self) -> bool:
        try:
            return bool(await self._client.ping())
        except RedisError as exc:
            logger.warning("cache_unreachable", error=str(exc))
            return False

    async def close(self) -> None:
        await self._client.aclose()
