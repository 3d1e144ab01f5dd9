"""Graph API endpoints — current graph, import of dropped files, export."""

from __future__ import annotations

import json
from typing import Any, Literal

from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.responses import Response

from cosmos_engine.api.dependencies import get_pipeline
from cosmos_engine.api.v1.schemas.graph import GraphResponse
from cosmos_engine.services.pipeline import SearchPipeline
from cosmos_engine.utils.exceptions import GraphImportError
from cosmos_engine.utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/graph", tags=["graph"])


def _current_graph(pipeline: SearchPipeline) -> GraphResponse:
    if pipeline.state is None:
        raise HTTPException(status_code=404, detail="No graph has been built yet")
    return GraphResponse.from_state(pipeline.state)


@router.get("", response_model=GraphResponse)
async def get_graph(pipeline: SearchPipeline = Depends(get_pipeline)) -> GraphResponse:
    """The currently published graph, with node positions."""
    return _current_graph(pipeline)


@router.post("/import", response_model=GraphResponse)
async def import_graph(
    payload: Any = Body(...),
    pipeline: SearchPipeline = Depends(get_pipeline),
) -> GraphResponse:
    """Publish a dropped JSON file: a `{nodes, links}` object or an array of records."""
    try:
        state = pipeline.load(payload)
    except GraphImportError as exc:
        logger.warning("graph_import_rejected", error=str(exc))
        raise HTTPException(status_code=400, detail=str(exc))
    return GraphResponse.from_state(state)


@router.get("/export")
async def export_graph(
    format: Literal["json", "graphml"] = "json",
    pipeline: SearchPipeline = Depends(get_pipeline),
) -> Response:
    """Export the current graph in JSON or GraphML format."""
    graph_data = _current_graph(pipeline)
    filename = f"graph_{graph_data.graph_id}"

    if format == "json":
        content = json.dumps(graph_data.model_dump(mode="json"), indent=2)
        return Response(
            content=content,
            media_type="application/json",
            headers={"Content-Disposition": f"attachment; filename={filename}.json"},
        )

    return Response(
        content=_to_graphml(graph_data),
        media_type="application/xml",
        headers={"Content-Disposition": f"attachment; filename={filename}.graphml"},
    )


def _to_graphml(graph: GraphResponse) -> str:
    """Convert a graph response to GraphML XML."""
    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<graphml xmlns="http://graphml.graphdrawing.org/xmlns">',
        '  <key id="label" for="node" attr.name="label" attr.type="string"/>',
        '  <key id="source" for="node" attr.name="source" attr.type="string"/>',
        '  <key id="weight" for="node" attr.name="weight" attr.type="double"/>',
        '  <key id="strength" for="edge" attr.name="strength" attr.type="double"/>',
        '  <graph id="G" edgedefault="directed">',
    ]

    for node in graph.nodes:
        lines.append(f'    <node id="{_xml_escape(node.id)}">')
        lines.append(f'      <data key="label">{_xml_escape(node.name)} ({_xml_escape(node.type)})</data>')
        lines.append(f'      <data key="source">{_xml_escape(node.source_tag)}</data>')
        lines.append(f'      <data key="weight">{node.weight}</data>')
        lines.append("    </node>")

    for i, link in enumerate(graph.links):
        lines.append(
            f'    <edge id="e{i}" source="{_xml_escape(link.source_id)}" target="{_xml_escape(link.target_id)}">'
        )
        lines.append(f'      <data key="strength">{link.strength}</data>')
        lines.append("    </edge>")

    lines.append("  </graph>")
    lines.append("</graphml>")
    return "\n".join(lines)


def _xml_escape(s: str) -> str:
    return s.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;").replace('"', "&quot;")
