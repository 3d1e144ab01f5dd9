"""Abstract search provider and shared helpers."""

from __future__ import annotations

import asyncio
import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from cosmos_engine.models.schemas import Record, SourceTag
from cosmos_engine.utils.logging import get_logger

logger = get_logger(__name__)


class BaseProvider(ABC):
    """A data source that answers a text query with a sequence of records.

    Subclasses set `source` and implement `search`. Providers may raise; the
    aggregator isolates every failure at the call site.
    """

    source: SourceTag

    @abstractmethod
    async def search(self, query: str) -> list[Record]:
        """Return the provider's records for `query`, in the provider's own order."""

    def _record(self, **fields: Any) -> Record:
        return Record(source_tag=self.source, **fields)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(source={self.source!r})"


async def load_json_file(path: str | Path) -> Any:
    """Read and parse a JSON file without blocking the event loop."""

    def _read() -> Any:
        with open(path, encoding="utf-8") as f:
            return json.load(f)

    return await asyncio.to_thread(_read)
