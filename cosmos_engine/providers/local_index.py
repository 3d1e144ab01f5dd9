"""Local index provider — records from a JSON file on disk."""

from __future__ import annotations

from typing import Any

from cosmos_engine.models.schemas import Record
from cosmos_engine.providers.base import BaseProvider, load_json_file
from cosmos_engine.utils.exceptions import ProviderResponseError
from cosmos_engine.utils.logging import get_logger
from cosmos_engine.utils.text_processing import matches_query

logger = get_logger(__name__)


class LocalIndexProvider(BaseProvider):
    """Searches a JSON array of records kept next to the service.

    The file is re-read on every search so edits show up without a restart.
    With no index configured the provider answers with nothing.
    """

    source = "local-index"

    def __init__(self, index_path: str = "") -> None:
        self._index_path = index_path

    async def search(self, query: str) -> list[Record]:
        if not self._index_path:
            return []
        try:
            data = await load_json_file(self._index_path)
        except OSError as exc:
            logger.warning("local_index_unavailable", path=self._index_path, error=str(exc))
            return []
        except ValueError as exc:
            raise ProviderResponseError(self.source, f"index is not valid JSON: {exc}") from exc
        if not isinstance(data, list):
            raise ProviderResponseError(self.source, "index must be a JSON array of records")

        return [
            self._to_record(item)
            for item in data
            if isinstance(item, dict)
            and matches_query(query, item.get("name") or item.get("title"), item.get("description"))
        ]

    def _to_record(self, item: dict[str, Any]) -> Record:
        if not any(item.get(key) for key in ("source_tag", "sourceTag", "source")):
            item = {**item, "source_tag": self.source}
        if not any(item.get(key) for key in ("record_type", "recordType", "type")):
            item = {**item, "record_type": "file"}
        return Record.model_validate(item)
