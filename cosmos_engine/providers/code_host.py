"""Code host provider — GitHub repository search with a curated 3D/WebGL catalog.

Every repository contributes a repository record plus, the first time its
owner appears, an owner record; the owner carries an owner -> repository
relationship. Consecutive repositories that share a topic are linked at half
strength, so the graph builder gets real edges instead of the type-chain
fallback.
"""

from __future__ import annotations

import math
from typing import Any

import httpx

from cosmos_engine.models.schemas import Record
from cosmos_engine.providers.base import BaseProvider
from cosmos_engine.utils.exceptions import ProviderResponseError
from cosmos_engine.utils.logging import get_logger
from cosmos_engine.utils.rate_limiter import TokenBucketRateLimiter
from cosmos_engine.utils.retry import async_retry
from cosmos_engine.utils.text_processing import searchable_text, slugify

logger = get_logger(__name__)

CURATED_REPOSITORIES: list[dict[str, Any]] = [
    {"name": "three.js", "owner": "mrdoob", "description": "JavaScript 3D library",
     "stars": 95000, "topics": ["3d", "webgl", "javascript"]},
    {"name": "react-three-fiber", "owner": "pmndrs", "description": "React renderer for three.js",
     "stars": 24000, "topics": ["react", "threejs", "3d"]},
    {"name": "aframe", "owner": "aframevr", "description": "Web framework for building VR experiences",
     "stars": 15000, "topics": ["vr", "webvr", "3d"]},
    {"name": "babylonjs", "owner": "BabylonJS", "description": "Powerful 3D engine",
     "stars": 21000, "topics": ["3d", "webgl", "game-engine"]},
    {"name": "model-viewer", "owner": "google", "description": "Display 3D models on the web",
     "stars": 5000, "topics": ["3d", "gltf", "web-components"]},
]

API_RESULTS_PER_PAGE = 5
OWNER_WEIGHT = 2.0


def _repo_weight(stars: int) -> float:
    return math.log(stars) / 2 if stars > 0 else 1.0


class CodeHostProvider(BaseProvider):
    source = "code-host"

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        api_enabled: bool = False,
        api_url: str = "https://api.github.com",
        token: str = "",
        rate_limiter: TokenBucketRateLimiter | None = None,
    ) -> None:
        self._client = client
        self._api_enabled = api_enabled and client is not None
        self._api_url = api_url.rstrip("/")
        self._token = token
        self._rate_limiter = rate_limiter or TokenBucketRateLimiter.per_minute(10)

    async def search(self, query: str) -> list[Record]:
        if self._api_enabled:
            try:
                repos = await self._fetch_repositories(query)
                return self._build_records(repos)
            except httpx.HTTPError as exc:
                logger.warning("code_host_api_failed", query=query, error=str(exc))
            except (ProviderResponseError, ValueError) as exc:
                logger.warning("code_host_payload_unusable", query=query, error=str(exc))

        q = query.lower()
        matches = [
            repo for repo in CURATED_REPOSITORIES
            if q in searchable_text(repo["name"], repo["owner"], repo["description"], " ".join(repo["topics"]))
            or query == ""
        ]
        return self._build_records(matches)

    @async_retry()
    async def _fetch_repositories(self, query: str) -> list[dict[str, Any]]:
        await self._rate_limiter.acquire()
        headers = {"Accept": "application/vnd.github+json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        resp = await self._client.get(  # type: ignore[union-attr]
            f"{self._api_url}/search/repositories",
            params={"q": f"{query} 3d", "sort": "stars", "per_page": API_RESULTS_PER_PAGE},
            headers=headers,
        )
        resp.raise_for_status()

        payload = resp.json()
        items = payload.get("items") if isinstance(payload, dict) else None
        if not isinstance(items, list):
            raise ProviderResponseError(self.source, "search response has no 'items' list")
        return [
            {
                "name": item.get("name") or "",
                "owner": (item.get("owner") or {}).get("login") or "unknown",
                "description": item.get("description") or "",
                "stars": int(item.get("stargazers_count") or 0),
                "topics": list(item.get("topics") or []),
            }
            for item in items
            if isinstance(item, dict)
        ]

    def _build_records(self, repos: list[dict[str, Any]]) -> list[Record]:
        nodes: list[dict[str, Any]] = []
        edges: list[tuple[str, str, float]] = []
        seen_owners: set[str] = set()

        for i, repo in enumerate(repos):
            repo_id = f"github-repo-{slugify(repo['owner'])}-{slugify(repo['name'])}"
            owner_id = f"github-user-{slugify(repo['owner'])}"
            nodes.append({
                "id": repo_id,
                "name": repo["name"],
                "description": repo["description"],
                "record_type": "repository",
                "url": f"https://github.com/{repo['owner']}/{repo['name']}",
                "weight": _repo_weight(repo["stars"]),
                "metadata": {"stars": repo["stars"], "topics": repo["topics"]},
            })
            if owner_id not in seen_owners:
                seen_owners.add(owner_id)
                nodes.append({
                    "id": owner_id,
                    "name": repo["owner"],
                    "record_type": "user",
                    "url": f"https://github.com/{repo['owner']}",
                    "weight": OWNER_WEIGHT,
                })
            edges.append((owner_id, repo_id, 1.0))

            if i > 0 and set(repo["topics"]) & set(repos[i - 1]["topics"]):
                prev = repos[i - 1]
                prev_id = f"github-repo-{slugify(prev['owner'])}-{slugify(prev['name'])}"
                edges.append((repo_id, prev_id, 0.5))

        records: list[Record] = []
        for node in nodes:
            relationships = [
                {"target_id": target, "strength": strength}
                for source, target, strength in edges
                if source == node["id"]
            ]
            records.append(self._record(**node, relationships=relationships))
        return records
