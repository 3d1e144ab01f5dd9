"""Model repository provider — Objaverse glTF index with a sample fallback."""

from __future__ import annotations

import asyncio
from typing import Any

from cosmos_engine.models.schemas import Record
from cosmos_engine.providers.base import BaseProvider, load_json_file
from cosmos_engine.utils.logging import get_logger
from cosmos_engine.utils.text_processing import searchable_text

logger = get_logger(__name__)

_SAMPLES_BASE = "https://raw.githubusercontent.com/KhronosGroup/glTF-Sample-Models/master/2.0"

SAMPLE_OBJECTS: list[dict[str, str]] = [
    {"uid": "chair-001", "name": "Chair", "glb_url": f"{_SAMPLES_BASE}/GlamVelvetSofa/glTF-Binary/GlamVelvetSofa.glb"},
    {"uid": "helmet-001", "name": "Sci-Fi Helmet", "glb_url": f"{_SAMPLES_BASE}/SciFiHelmet/glTF-Binary/SciFiHelmet.glb"},
    {"uid": "boombox-001", "name": "Boom Box", "glb_url": f"{_SAMPLES_BASE}/BoomBox/glTF-Binary/BoomBox.glb"},
]

MAX_INDEX_RESULTS = 20


class ModelRepositoryProvider(BaseProvider):
    """Searches a lite Objaverse index when one is configured.

    Index entries are compact dicts: `i` model URL, `n` file name, `s` hosting
    source, `g` sibling file names. The index is read once per provider
    instance; a missing or unreadable file switches to the sample objects.
    """

    source = "model-repository"

    def __init__(self, index_path: str = "") -> None:
        self._index_path = index_path
        self._index: list[dict[str, Any]] | None = None
        self._index_loaded = False
        self._lock = asyncio.Lock()

    async def search(self, query: str) -> list[Record]:
        index = await self._load_index()
        if index is not None:
            return self._search_index(index, query)
        return self._search_samples(query)

    async def _load_index(self) -> list[dict[str, Any]] | None:
        async with self._lock:
            if self._index_loaded:
                return self._index
            self._index_loaded = True
            if not self._index_path:
                return None
            try:
                data = await load_json_file(self._index_path)
            except (OSError, ValueError) as exc:
                logger.warning("objaverse_index_unavailable", path=self._index_path, error=str(exc))
                return None
            if not isinstance(data, list):
                logger.warning("objaverse_index_malformed", path=self._index_path)
                return None
            self._index = [item for item in data if isinstance(item, dict)]
            logger.info("objaverse_index_loaded", path=self._index_path, entries=len(self._index))
            return self._index

    def _search_index(self, index: list[dict[str, Any]], query: str) -> list[Record]:
        q = query.lower()
        results: list[Record] = []
        for position, item in enumerate(index):
            files = item.get("g") or []
            if q not in searchable_text(item.get("n"), " ".join(str(f) for f in files)):
                continue
            name = item.get("n") or f"Model {len(results) + 1}"
            results.append(self._record(
                id=f"objaverse-{position}",
                name=name,
                description=f"3D model from {item.get('s') or 'GitHub'}",
                record_type="model",
                model_ref=item.get("i"),
                metadata={
                    "format": "glb" if str(name).endswith(".glb") else "gltf",
                    "provider": item.get("s"),
                },
            ))
            if len(results) >= MAX_INDEX_RESULTS:
                break
        return results

    def _search_samples(self, query: str) -> list[Record]:
        q = query.lower()
        return [
            self._record(
                id=f"objaverse-{item['uid']}",
                name=item["name"],
                description="High-quality 3D model from Objaverse",
                record_type="model",
                model_ref=item["glb_url"],
                metadata={"format": "glb"},
            )
            for item in SAMPLE_OBJECTS
            if q in item["name"].lower() or query == ""
        ]
