"""Pydantic models for the records, graphs and layout state flowing through the pipeline."""

from __future__ import annotations

import math
import uuid
from typing import Any, Literal, get_args

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

SourceTag = Literal[
    "content-gallery",
    "model-repository",
    "code-host",
    "web-search",
    "local-index",
]
SOURCE_TAGS: tuple[str, ...] = get_args(SourceTag)
ALL_SOURCES = "all"

# Short names used by older exported graph files.
LEGACY_SOURCE_ALIASES: dict[str, str] = {
    "icosa": "content-gallery",
    "objaverse": "model-repository",
    "github": "code-host",
    "web": "web-search",
    "local": "local-index",
}

Point3 = tuple[float, float, float]

UNTITLED = "Untitled"


def normalize_source_tag(value: Any) -> str:
    if value is None or value == "":
        return "unknown"
    tag = str(value).strip().lower()
    return LEGACY_SOURCE_ALIASES.get(tag, tag)


def coerce_weight(value: Any, default: float = 1.0) -> float:
    """Numeric weight or `default` for anything missing, non-numeric or non-finite."""
    if value is None or isinstance(value, bool):
        return default
    try:
        weight = float(value)
    except (TypeError, ValueError):
        return default
    return weight if math.isfinite(weight) else default


def clamp_unit(value: float) -> float:
    return max(0.0, min(1.0, value))


def _optional_str(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def _has_target(raw: Any) -> bool:
    if isinstance(raw, Relationship):
        return True
    if not isinstance(raw, dict):
        return False
    return any(raw.get(key) not in (None, "") for key in ("target_id", "targetId", "target"))


# ── Provider records ─────────────────────────────────────────────────


class Relationship(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    target_id: str = Field(validation_alias=AliasChoices("target_id", "targetId", "target"))
    strength: float = Field(default=1.0, description="0.0 to 1.0")

    @field_validator("target_id", mode="before")
    @classmethod
    def _target_to_str(cls, value: Any) -> Any:
        return str(value) if value is not None else value

    @field_validator("strength", mode="before")
    @classmethod
    def _clamp_strength(cls, value: Any) -> float:
        return clamp_unit(coerce_weight(value))


class Record(BaseModel):
    """A raw asset returned by a provider.

    Input is coerced leniently: records come from third-party payloads and
    dropped JSON files, and a malformed record gets defaults instead of being
    rejected.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: str | None = None
    name: str | None = None
    title: str | None = None
    description: str | None = None
    source_tag: str = Field(
        default="unknown",
        validation_alias=AliasChoices("source_tag", "sourceTag", "source"),
    )
    record_type: str | None = Field(
        default=None,
        validation_alias=AliasChoices("record_type", "recordType", "type"),
    )
    weight: float = Field(default=1.0, validation_alias=AliasChoices("weight", "val"))
    url: str | None = None
    model_ref: str | None = Field(
        default=None,
        validation_alias=AliasChoices("model_ref", "modelRef", "modelUrl"),
    )
    relationships: list[Relationship] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def display_name(self) -> str:
        """Name shown on the graph; relevance only ever sees `name` itself."""
        return self.name or self.title or UNTITLED

    @model_validator(mode="before")
    @classmethod
    def _fill_defaults(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        relationships = data.get("relationships")
        if isinstance(relationships, list):
            data["relationships"] = [r for r in relationships if _has_target(r)]
        else:
            data["relationships"] = []
        if not isinstance(data.get("metadata"), dict):
            data["metadata"] = {}
        return data

    @field_validator("id", "name", "title", "description", "record_type", "url", "model_ref", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> str | None:
        return _optional_str(value)

    @field_validator("source_tag", mode="before")
    @classmethod
    def _normalize_source(cls, value: Any) -> str:
        return normalize_source_tag(value)

    @field_validator("weight", mode="before")
    @classmethod
    def _coerce_weight(cls, value: Any) -> float:
        return coerce_weight(value)


class RankedRecord(Record):
    relevance: float = Field(default=0.0, description="0.0 to 1.0")

    @field_validator("relevance", mode="before")
    @classmethod
    def _clamp_relevance(cls, value: Any) -> float:
        return clamp_unit(coerce_weight(value, default=0.0))

    @classmethod
    def from_record(cls, record: Record, relevance: float) -> RankedRecord:
        return cls(**record.model_dump(), relevance=relevance)


# ── Graph ────────────────────────────────────────────────────────────


class GraphNode(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    source_tag: str
    type: str
    weight: float = 1.0
    description: str | None = None
    url: str | None = None
    model_ref: str | None = None
    relevance: float | None = None
    spatial_position: Point3 | None = None


class GraphLink(BaseModel):
    model_config = ConfigDict(frozen=True)

    source_id: str
    target_id: str
    strength: float = Field(default=1.0, description="0.0 to 1.0")

    @field_validator("strength", mode="before")
    @classmethod
    def _clamp_strength(cls, value: Any) -> float:
        return clamp_unit(coerce_weight(value))


class Graph(BaseModel):
    """Nodes keyed by id (insertion ordered) plus an ordered link sequence.

    `graph_id` is fresh for every built graph; layout state is keyed on it.
    """

    model_config = ConfigDict(frozen=True)

    graph_id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    nodes: dict[str, GraphNode] = Field(default_factory=dict)
    links: list[GraphLink] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_invariants(self) -> Graph:
        for key, node in self.nodes.items():
            if key != node.id:
                raise ValueError(f"node keyed as {key!r} has id {node.id!r}")
        for link in self.links:
            if link.source_id not in self.nodes or link.target_id not in self.nodes:
                raise ValueError(
                    f"link {link.source_id!r} -> {link.target_id!r} references a missing node"
                )
        return self

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def link_count(self) -> int:
        return len(self.links)


# ── Layout ───────────────────────────────────────────────────────────


class LinkCurve(BaseModel):
    model_config = ConfigDict(frozen=True)

    source_id: str
    target_id: str
    strength: float
    points: list[Point3] = Field(default_factory=list)


class LayoutState(BaseModel):
    """Positioned graph, derived curve geometry and the animation clock."""

    model_config = ConfigDict(frozen=True)

    graph: Graph
    curves: list[LinkCurve] = Field(default_factory=list)
    time: float = 0.0
    generation: int = 0

    @property
    def graph_id(self) -> str:
        return self.graph.graph_id


class RenderNode(BaseModel):
    id: str
    name: str
    source_tag: str
    type: str
    position: Point3
    size: float
    color: str


class RenderFrame(BaseModel):
    time: float
    generation: int
    nodes: list[RenderNode] = Field(default_factory=list)
    links: list[LinkCurve] = Field(default_factory=list)
