"""Request/response models for the graph API."""

from __future__ import annotations

from pydantic import BaseModel, Field

from cosmos_engine.models.schemas import GraphLink, GraphNode, LayoutState


class GraphResponse(BaseModel):
    graph_id: str
    generation: int = 0
    nodes: list[GraphNode] = Field(default_factory=list)
    links: list[GraphLink] = Field(default_factory=list)
    node_count: int = 0
    link_count: int = 0

    @classmethod
    def from_state(cls, state: LayoutState) -> GraphResponse:
        graph = state.graph
        return cls(
            graph_id=graph.graph_id,
            generation=state.generation,
            nodes=list(graph.nodes.values()),
            links=list(graph.links),
            node_count=graph.node_count,
            link_count=graph.link_count,
        )
