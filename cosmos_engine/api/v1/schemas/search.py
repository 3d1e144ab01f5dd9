"""Request/response models for the search API."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from cosmos_engine.api.v1.schemas.graph import GraphResponse
from cosmos_engine.services.pipeline import PipelineResult


class SearchRequest(BaseModel):
    query: str = Field(..., min_length=1, examples=["helmet"])
    sources: list[str] | None = Field(
        default=None,
        description="Source tags to query; omitted means the DEFAULT_SOURCES setting",
        examples=[["content-gallery", "code-host"]],
    )


class SearchResponse(BaseModel):
    status: Literal["completed", "superseded"]
    generation: int
    query: str
    node_count: int = 0
    link_count: int = 0
    graph: GraphResponse | None = None

    @classmethod
    def from_result(cls, result: PipelineResult) -> SearchResponse:
        if result.state is None:
            return cls(status=result.status, generation=result.generation, query=result.query)
        graph = GraphResponse.from_state(result.state)
        return cls(
            status=result.status,
            generation=result.generation,
            query=result.query,
            node_count=graph.node_count,
            link_count=graph.link_count,
            graph=graph,
        )
