"""Synthetic graph payloads for exercising layout at scale."""

from __future__ import annotations

import random
from datetime import datetime, timedelta, timezone
from typing import Any

from cosmos_engine.utils.logging import get_logger

logger = get_logger(__name__)

STRESS_SOURCES = ["github", "objaverse", "icosa", "local", "web"]

SOURCE_TYPES: dict[str, list[str]] = {
    "github": ["repository", "user", "organization"],
    "objaverse": ["model", "texture", "material"],
    "icosa": ["artwork", "artist", "collection"],
    "local": ["file", "folder", "project"],
    "web": ["page", "resource", "api"],
}

DESCRIPTIONS: dict[str, list[str]] = {
    "github": ["Open source project for 3D development", "JavaScript library for WebGL applications"],
    "objaverse": ["High-quality 3D model with PBR textures", "Scanned object from the real world"],
    "icosa": ["Interactive 3D artwork", "Sculpture created in VR"],
    "local": ["Project file on this workstation", "Exported scene from a local editor"],
    "web": ["Tutorial on WebXR development", "Reference documentation page"],
}

_PREFIXES = [
    "Model", "Project", "Dataset", "Repository", "Asset", "Component",
    "System", "Framework", "Library", "Tool", "Sample", "Demo",
    "Prototype", "Algorithm", "Structure", "Pattern", "Template",
]
_SUFFIXES = [
    "Alpha", "Beta", "Core", "Pro", "Lite", "Advanced", "Basic",
    "Engine", "Toolkit", "Suite", "Platform", "Service", "API",
    "SDK", "Framework", "Library", "Module", "Plugin",
]

LINK_PROBABILITY = 0.001
PROGRESS_EVERY = 100_000


def stress_name(index: int) -> str:
    prefix = _PREFIXES[index % len(_PREFIXES)]
    suffix = _SUFFIXES[(index // len(_PREFIXES)) % len(_SUFFIXES)]
    return f"{prefix} {suffix} {index:06d}"


def generate_stress_dataset(count: int = 1_000_000, seed: int | None = None) -> dict[str, Any]:
    """`{nodes, links}` payload with round-robin sources and sparse back-links.

    Each node after the first links back to a random earlier node with
    probability 0.1%, keeping the link count roughly count/1000.
    """
    rng = random.Random(seed)
    now = datetime.now(timezone.utc)
    nodes: list[dict[str, Any]] = []
    links: list[dict[str, Any]] = []

    for i in range(count):
        source = STRESS_SOURCES[i % len(STRESS_SOURCES)]
        nodes.append({
            "id": f"stress-{i}",
            "name": stress_name(i),
            "source": source,
            "type": rng.choice(SOURCE_TYPES[source]),
            "description": rng.choice(DESCRIPTIONS[source]),
            "val": rng.random() * 5 + 0.5,
            "created": (now - timedelta(days=rng.random() * 365)).isoformat(),
        })
        if i > 0 and rng.random() < LINK_PROBABILITY:
            links.append({
                "source": f"stress-{i}",
                "target": f"stress-{rng.randrange(i)}",
                "value": rng.random(),
            })
        if i and i % PROGRESS_EVERY == 0:
            logger.info("stress_dataset_progress", generated=i, total=count)

    logger.info("stress_dataset_generated", nodes=len(nodes), links=len(links))
    return {"nodes": nodes, "links": links}
