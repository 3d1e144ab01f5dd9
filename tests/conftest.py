"""Shared test fixtures."""

from __future__ import annotations

import asyncio

import pytest

from cosmos_engine.models.schemas import Record
from cosmos_engine.providers.base import BaseProvider


@pytest.fixture(autouse=True)
def _env_setup(monkeypatch):
    """Keep every test offline: no network providers, no Redis, no index files."""
    monkeypatch.setenv("WIKIPEDIA_SEARCH_ENABLED", "false")
    monkeypatch.setenv("GITHUB_API_ENABLED", "false")
    monkeypatch.setenv("GITHUB_TOKEN", "")
    monkeypatch.setenv("REDIS_URL", "")
    monkeypatch.setenv("OBJAVERSE_INDEX_PATH", "")
    monkeypatch.setenv("LOCAL_INDEX_PATH", "")
    monkeypatch.setenv("LOG_LEVEL", "WARNING")


@pytest.fixture
def settings():
    from cosmos_engine.config import Settings

    return Settings(
        WIKIPEDIA_SEARCH_ENABLED=False,
        GITHUB_API_ENABLED=False,
        REDIS_URL="",
    )


class FakeProvider(BaseProvider):
    """Provider double: canned records, an optional error, delay or gate."""

    def __init__(
        self,
        source: str,
        records: list | None = None,
        *,
        error: Exception | None = None,
        delay: float = 0.0,
        gate: asyncio.Event | None = None,
    ) -> None:
        self.source = source  # type: ignore[assignment]
        self.records = records or []
        self.error = error
        self.delay = delay
        self.gate = gate
        self.queries: list[str] = []

    async def search(self, query: str) -> list:
        self.queries.append(query)
        if self.gate is not None:
            await self.gate.wait()
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return list(self.records)


@pytest.fixture
def fake_provider():
    return FakeProvider


@pytest.fixture
def sample_records() -> list[Record]:
    return [
        Record(id="gallery-damaged-helmet", name="Damaged Helmet", source_tag="content-gallery",
               record_type="artwork", description="3D model from Poly Gallery"),
        Record(id="objaverse-helmet-001", name="Sci-Fi Helmet", source_tag="model-repository",
               record_type="model"),
        Record(id="gallery-lantern", name="Lantern", source_tag="content-gallery",
               record_type="artwork"),
        Record(id="web-0", name="Three.js Documentation", source_tag="web-search",
               record_type="page", description="Official Three.js documentation and examples"),
    ]
