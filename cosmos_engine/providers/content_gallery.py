"""Content gallery provider — curated glTF sample artworks."""

from __future__ import annotations

from cosmos_engine.models.schemas import Record
from cosmos_engine.providers.base import BaseProvider
from cosmos_engine.utils.text_processing import slugify

_SAMPLES_BASE = "https://raw.githubusercontent.com/KhronosGroup/glTF-Sample-Models/master/2.0"

GALLERY_MODELS: list[dict[str, str]] = [
    {"name": "Astronaut", "model_url": f"{_SAMPLES_BASE}/CesiumMan/glTF-Binary/CesiumMan.glb"},
    {"name": "Damaged Helmet", "model_url": f"{_SAMPLES_BASE}/DamagedHelmet/glTF-Binary/DamagedHelmet.glb"},
    {"name": "Flight Helmet", "model_url": f"{_SAMPLES_BASE}/FlightHelmet/glTF/FlightHelmet.gltf"},
    {"name": "Lantern", "model_url": f"{_SAMPLES_BASE}/Lantern/glTF-Binary/Lantern.glb"},
    {"name": "Water Bottle", "model_url": f"{_SAMPLES_BASE}/WaterBottle/glTF-Binary/WaterBottle.glb"},
]

GALLERY_URL = "https://poly.cam/"
MAX_GALLERY_RESULTS = 5


class ContentGalleryProvider(BaseProvider):
    """Serves the gallery catalog; the query `all` lists every artwork."""

    source = "content-gallery"

    def __init__(self, catalog: list[dict[str, str]] | None = None) -> None:
        self._catalog = catalog if catalog is not None else GALLERY_MODELS

    async def search(self, query: str) -> list[Record]:
        q = query.lower()
        matches = [m for m in self._catalog if q in m["name"].lower() or q == "all"]
        return [
            self._record(
                id=f"gallery-{slugify(model['name'])}",
                name=model["name"],
                description="3D model from Poly Gallery",
                record_type="artwork",
                url=GALLERY_URL,
                model_ref=model["model_url"],
                metadata={"format": model["model_url"].rsplit(".", 1)[-1]},
            )
            for model in matches[:MAX_GALLERY_RESULTS]
        ]
