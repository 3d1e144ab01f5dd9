"""Run one search through the full pipeline and print the resulting graph."""

from __future__ import annotations

import argparse
import asyncio
import json

import httpx

from cosmos_engine.config import get_settings
from cosmos_engine.providers import build_providers
from cosmos_engine.services.aggregator import Aggregator
from cosmos_engine.services.layout import SpatialLayout
from cosmos_engine.services.pipeline import SearchPipeline
from cosmos_engine.utils.logging import setup_logging


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("query", help="search text")
    parser.add_argument(
        "--sources",
        nargs="+",
        default=None,
        help="source tags to query (default: DEFAULT_SOURCES)",
    )
    parser.add_argument("--output", help="write the render frame as JSON to this file")
    return parser.parse_args()


async def main() -> None:
    args = parse_args()
    setup_logging(log_level="INFO", log_format="console")
    settings = get_settings()

    async with httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS, follow_redirects=True) as client:
        pipeline = SearchPipeline(
            Aggregator(build_providers(settings, client), timeout=settings.PROVIDER_TIMEOUT_SECONDS),
            SpatialLayout.from_settings(settings),
            max_results=settings.MAX_RESULTS,
        )
        result = await pipeline.search(args.query, args.sources or settings.DEFAULT_SOURCES)

    state = result.state
    if state is None:
        print(f"Search {result.status}; nothing to show.")
        return

    print(f"Query: {result.query!r} (generation {result.generation})")
    print(f"  Nodes: {state.graph.node_count}")
    print(f"  Links: {state.graph.link_count}")
    for node in list(state.graph.nodes.values())[:10]:
        print(f"  {node.relevance or 0:.2f}  [{node.source_tag}] {node.name}")

    if args.output:
        frame = pipeline.frame()
        with open(args.output, "w") as f:
            json.dump(frame.model_dump(mode="json") if frame else {}, f, indent=2)
        print(f"Frame written to {args.output}")


if __name__ == "__main__":
    asyncio.run(main())
