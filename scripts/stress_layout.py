"""Time graph import and layout on a synthetic dataset."""

from __future__ import annotations

import argparse
import time

from cosmos_engine.config import get_settings
from cosmos_engine.services.graph_builder import graph_from_payload
from cosmos_engine.services.layout import SpatialLayout
from cosmos_engine.services.stress_data import generate_stress_dataset
from cosmos_engine.utils.logging import setup_logging


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--count", type=int, default=100_000)
    parser.add_argument("--seed", type=int, default=None)
    args = parser.parse_args()

    setup_logging(log_level="INFO", log_format="console")
    layout = SpatialLayout.from_settings(get_settings())

    start = time.perf_counter()
    payload = generate_stress_dataset(args.count, seed=args.seed)
    generated = time.perf_counter()
    graph = graph_from_payload(payload)
    built = time.perf_counter()
    state = layout.layout(graph)
    laid_out = time.perf_counter()
    frame = layout.frame(layout.advance(state))
    rendered = time.perf_counter()

    print(f"Nodes: {graph.node_count}  Links: {graph.link_count}")
    print(f"  generate: {generated - start:8.2f}s")
    print(f"  import:   {built - generated:8.2f}s")
    print(f"  layout:   {laid_out - built:8.2f}s")
    print(f"  frame:    {rendered - laid_out:8.2f}s ({len(frame.nodes)} nodes)")


if __name__ == "__main__":
    main()
