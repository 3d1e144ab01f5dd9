"""Concurrent fan-out of a query to the registered providers."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Iterable, Mapping

from pydantic import BaseModel, ConfigDict

from cosmos_engine.models.schemas import ALL_SOURCES, Record, normalize_source_tag
from cosmos_engine.providers.base import BaseProvider
from cosmos_engine.utils.exceptions import ProviderTimeoutError
from cosmos_engine.utils.logging import get_logger

logger = get_logger(__name__)


class AggregationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    records: list[Record]
    failed: list[str] = []

    @property
    def degraded(self) -> bool:
        """True when at least one provider failed or timed out."""
        return bool(self.failed)


class Aggregator:
    """Runs provider searches concurrently and merges their records.

    Each provider is awaited independently under its own timeout, so one slow
    or failing provider only costs its own results. The merged sequence keeps
    registration order first and each provider's internal order second.
    """

    def __init__(self, providers: Mapping[str, BaseProvider], timeout: float = 10.0) -> None:
        self._providers = dict(providers)
        self._timeout = timeout

    @property
    def sources(self) -> list[str]:
        return list(self._providers)

    def resolve_sources(self, enabled_sources: Iterable[str]) -> list[str]:
        requested = {
            ALL_SOURCES if str(s).strip().lower() == ALL_SOURCES else normalize_source_tag(s)
            for s in enabled_sources
        }
        if ALL_SOURCES in requested:
            return self.sources

        unknown = requested - set(self._providers)
        if unknown:
            logger.warning("unknown_sources_ignored", sources=sorted(unknown))
        return [source for source in self._providers if source in requested]

    async def aggregate(
        self,
        query: str,
        enabled_sources: Iterable[str] = (ALL_SOURCES,),
    ) -> list[Record]:
        return (await self.collect(query, enabled_sources)).records

    async def collect(
        self,
        query: str,
        enabled_sources: Iterable[str] = (ALL_SOURCES,),
    ) -> AggregationResult:
        """Like `aggregate`, but also reports which providers failed."""
        selected = self.resolve_sources(enabled_sources)
        start = time.monotonic()

        outcomes = await asyncio.gather(*(self._search_one(source, query) for source in selected))
        records = [record for batch in outcomes if batch is not None for record in batch]
        failed = [source for source, batch in zip(selected, outcomes) if batch is None]

        logger.info(
            "aggregation_complete",
            providers=len(selected),
            records=len(records),
            per_provider={source: len(batch or []) for source, batch in zip(selected, outcomes)},
            failed=failed,
            duration_ms=int((time.monotonic() - start) * 1000),
        )
        return AggregationResult(records=records, failed=failed)

    async def _search_one(self, source: str, query: str) -> list[Record] | None:
        """Records from one provider, or None when it failed."""
        provider = self._providers[source]
        try:
            results = await asyncio.wait_for(provider.search(query), timeout=self._timeout)
            if not isinstance(results, list):
                logger.warning("provider_result_not_list", source=source, result_type=type(results).__name__)
                return None
            return [
                r if isinstance(r, Record) else Record.model_validate(r)
                for r in results
                if isinstance(r, (Record, dict))
            ]
        except asyncio.TimeoutError:
            exc = ProviderTimeoutError(source, f"no answer within {self._timeout}s")
            logger.error("provider_search_timeout", source=source, error=str(exc))
            return None
        except Exception as exc:
            logger.error(
                "provider_search_failed",
                source=source,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return None
