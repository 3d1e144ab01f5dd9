"""Ranked records -> node/link graph, plus import of dropped graph JSON."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from cosmos_engine.models.schemas import Graph, GraphLink, GraphNode, Record
from cosmos_engine.utils.exceptions import GraphImportError
from cosmos_engine.utils.logging import get_logger

logger = get_logger(__name__)

FALLBACK_LINK_STRENGTH = 0.5


def _to_node(node_id: str, record: Record) -> GraphNode:
    return GraphNode(
        id=node_id,
        name=record.display_name,
        source_tag=record.source_tag,
        type=record.record_type or record.source_tag,
        weight=record.weight,
        description=record.description,
        url=record.url,
        model_ref=record.model_ref,
        relevance=getattr(record, "relevance", None),
    )


def _chain_by_type(nodes: dict[str, GraphNode]) -> list[GraphLink]:
    groups: dict[str, list[str]] = {}
    for node in nodes.values():
        groups.setdefault(node.type, []).append(node.id)

    links: list[GraphLink] = []
    for ids in groups.values():
        for current, following in zip(ids, ids[1:]):
            links.append(GraphLink(source_id=current, target_id=following, strength=FALLBACK_LINK_STRENGTH))
    return links


def build_graph(records: Sequence[Record]) -> Graph:
    """One node per record id (last write wins), explicit links, type-chain fallback.

    Records without an id get the positional id `node-<index>`. A relationship
    whose target is not among the built nodes is dropped. When no explicit
    link survives and there are at least two nodes, nodes of the same type are
    chained in order so the graph is never a bare point cloud.
    """
    nodes: dict[str, GraphNode] = {}
    resolved: list[tuple[str, Record]] = []
    for index, record in enumerate(records):
        node_id = record.id or f"node-{index}"
        nodes[node_id] = _to_node(node_id, record)
        resolved.append((node_id, record))

    links: list[GraphLink] = []
    dropped = 0
    for node_id, record in resolved:
        for rel in record.relationships:
            if rel.target_id in nodes:
                links.append(GraphLink(source_id=node_id, target_id=rel.target_id, strength=rel.strength))
            else:
                dropped += 1

    synthesized = False
    if not links and len(nodes) > 1:
        links = _chain_by_type(nodes)
        synthesized = True

    logger.debug(
        "graph_built",
        nodes=len(nodes),
        links=len(links),
        dangling_dropped=dropped,
        synthesized=synthesized,
    )
    return Graph(nodes=nodes, links=links)


def _endpoint_id(raw: dict[str, Any], *keys: str) -> str | None:
    for key in keys:
        value = raw.get(key)
        # force-graph style files replace endpoints with the node objects
        if isinstance(value, dict):
            value = value.get("id")
        if value not in (None, ""):
            return str(value)
    return None


def _graph_from_nodes_links(data: dict[str, Any]) -> Graph:
    nodes: dict[str, GraphNode] = {}
    for index, raw in enumerate(data["nodes"]):
        if not isinstance(raw, dict):
            continue
        record = Record.model_validate(raw)
        node_id = record.id or f"node-{index}"
        nodes[node_id] = _to_node(node_id, record)

    raw_links = data.get("links")
    links: list[GraphLink] = []
    for raw in raw_links if isinstance(raw_links, list) else []:
        if not isinstance(raw, dict):
            continue
        source_id = _endpoint_id(raw, "source_id", "sourceId", "source")
        target_id = _endpoint_id(raw, "target_id", "targetId", "target")
        if source_id not in nodes or target_id not in nodes:
            continue
        strength = next((raw[k] for k in ("strength", "value") if raw.get(k) is not None), 1.0)
        links.append(GraphLink(source_id=source_id, target_id=target_id, strength=strength))

    return Graph(nodes=nodes, links=links)


def graph_from_payload(data: Any) -> Graph:
    """Build a graph from imported JSON: a `{nodes, links}` object or a record array."""
    if isinstance(data, list):
        records = [Record.model_validate(item) for item in data if isinstance(item, dict)]
        return build_graph(records)
    if isinstance(data, dict) and isinstance(data.get("nodes"), list):
        return _graph_from_nodes_links(data)
    raise GraphImportError("expected a {nodes, links} object or an array of records")
