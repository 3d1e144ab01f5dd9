"""Spatial layout — Fibonacci-sphere placement, curved edges and the animation clock.

Node i of n is placed at polar angle acos(1 - 2(i + 0.5)/n) and azimuth
pi(1 + sqrt 5)i, the golden-angle spiral, which spreads any number of points
evenly over the sphere. Only the radius is random (base + [0, jitter)), so the
angular placement of index i is exactly reproducible.

Links are drawn as centripetal Catmull-Rom curves through the source, the
link midpoint pulled toward the centre, and the target. The curve evaluation
matches the three.js `CatmullRomCurve3` default so frames line up with
browser renderers fed the same control points.

`LayoutState` is immutable: `advance` returns a new state with a later clock,
and the vertical float is applied only when a frame is produced.
"""

from __future__ import annotations

import math
import random
from collections.abc import Sequence

from cosmos_engine.config import Settings
from cosmos_engine.models.schemas import (
    Graph,
    GraphNode,
    LayoutState,
    LinkCurve,
    Point3,
    RenderFrame,
    RenderNode,
    coerce_weight,
)
from cosmos_engine.utils.logging import get_logger

logger = get_logger(__name__)

GOLDEN_SPIRAL_STEP = math.pi * (1 + math.sqrt(5))
MIDPOINT_PULL = 0.8
OSCILLATION_AMPLITUDE = 2.0
OSCILLATION_FREQUENCY = 0.01

SOURCE_COLORS: dict[str, str] = {
    "content-gallery": "#FF6B6B",
    "model-repository": "#4ECDC4",
    "code-host": "#95E1D3",
    "local-index": "#F38181",
    "web-search": "#AA96DA",
}
DEFAULT_COLOR = "#FFFFFF"


# ── Geometry helpers ─────────────────────────────────────────────────


def sphere_angles(index: int, count: int) -> tuple[float, float]:
    """(phi, theta) of node `index` out of `count` on the golden spiral."""
    phi = math.acos(1 - 2 * (index + 0.5) / count)
    theta = GOLDEN_SPIRAL_STEP * index
    return phi, theta


def sphere_point(index: int, count: int, radius: float) -> Point3:
    phi, theta = sphere_angles(index, count)
    return (
        radius * math.sin(phi) * math.cos(theta),
        radius * math.sin(phi) * math.sin(theta),
        radius * math.cos(phi),
    )


def _dist_sq(a: Point3, b: Point3) -> float:
    return (a[0] - b[0]) ** 2 + (a[1] - b[1]) ** 2 + (a[2] - b[2]) ** 2


def _reflect(anchor: Point3, other: Point3) -> Point3:
    return (2 * anchor[0] - other[0], 2 * anchor[1] - other[1], 2 * anchor[2] - other[2])


def _segment_point(p0: Point3, p1: Point3, p2: Point3, p3: Point3, t: float) -> Point3:
    dt0 = _dist_sq(p0, p1) ** 0.25
    dt1 = _dist_sq(p1, p2) ** 0.25
    dt2 = _dist_sq(p2, p3) ** 0.25
    # coincident control points
    if dt1 < 1e-4:
        dt1 = 1.0
    if dt0 < 1e-4:
        dt0 = dt1
    if dt2 < 1e-4:
        dt2 = dt1

    out = []
    for x0, x1, x2, x3 in zip(p0, p1, p2, p3):
        t1 = ((x1 - x0) / dt0 - (x2 - x0) / (dt0 + dt1) + (x2 - x1) / dt1) * dt1
        t2 = ((x2 - x1) / dt1 - (x3 - x1) / (dt1 + dt2) + (x3 - x2) / dt2) * dt1
        c2 = -3 * x1 + 3 * x2 - 2 * t1 - t2
        c3 = 2 * x1 - 2 * x2 + t1 + t2
        out.append(x1 + t1 * t + c2 * t * t + c3 * t * t * t)
    return (out[0], out[1], out[2])


def catmull_rom_point(controls: Sequence[Point3], t: float) -> Point3:
    """Point at parameter t in [0, 1] on an open centripetal Catmull-Rom curve."""
    count = len(controls)
    p = (count - 1) * t
    segment = math.floor(p)
    weight = p - segment
    if segment >= count - 1:
        segment, weight = count - 2, 1.0

    p0 = controls[segment - 1] if segment > 0 else _reflect(controls[0], controls[1])
    p3 = controls[segment + 2] if segment + 2 < count else _reflect(controls[-1], controls[-2])
    return _segment_point(p0, controls[segment], controls[segment + 1], p3, weight)


def sample_curve(controls: Sequence[Point3], segments: int) -> list[Point3]:
    """`segments + 1` points at equal parameter steps, both endpoints included."""
    if not controls:
        return []
    if len(controls) == 1:
        return [tuple(controls[0])] * (segments + 1)  # type: ignore[list-item]
    return [catmull_rom_point(controls, step / segments) for step in range(segments + 1)]


def oscillate(position: Point3, time: float) -> Point3:
    x, y, z = position
    return (x, y + math.sin(time + x * OSCILLATION_FREQUENCY) * OSCILLATION_AMPLITUDE, z)


def node_size(weight: object) -> float:
    return 3 + coerce_weight(weight) * 2


def node_color(source_tag: str) -> str:
    return SOURCE_COLORS.get(source_tag, DEFAULT_COLOR)


# ── Layout engine ────────────────────────────────────────────────────


class SpatialLayout:
    """Lays out graphs and advances their animation state."""

    def __init__(
        self,
        base_radius: float = 50.0,
        radius_jitter: float = 30.0,
        curve_segments: int = 20,
        time_step: float = 0.01,
        rng: random.Random | None = None,
    ) -> None:
        self.base_radius = base_radius
        self.radius_jitter = radius_jitter
        self.curve_segments = max(curve_segments, 1)
        self.time_step = time_step
        self._rng = rng or random.Random()

    @classmethod
    def from_settings(cls, settings: Settings, rng: random.Random | None = None) -> SpatialLayout:
        return cls(
            base_radius=settings.LAYOUT_BASE_RADIUS,
            radius_jitter=settings.LAYOUT_RADIUS_JITTER,
            curve_segments=settings.CURVE_SEGMENTS,
            time_step=settings.TIME_STEP,
            rng=rng,
        )

    def layout(self, graph: Graph, generation: int = 0) -> LayoutState:
        """Position every node and build curves for every link; time starts at 0."""
        count = len(graph.nodes)
        positioned: dict[str, GraphNode] = {}
        for index, node in enumerate(graph.nodes.values()):
            radius = self.base_radius + self._rng.random() * self.radius_jitter
            position = sphere_point(index, count, radius)
            positioned[node.id] = node.model_copy(update={"spatial_position": position})

        laid_out = Graph(graph_id=graph.graph_id, nodes=positioned, links=graph.links)
        curves = self.build_curves(laid_out)

        logger.debug(
            "layout_computed",
            graph_id=graph.graph_id,
            nodes=count,
            curves=len(curves),
            generation=generation,
        )
        return LayoutState(graph=laid_out, curves=curves, time=0.0, generation=generation)

    def build_curves(self, graph: Graph) -> list[LinkCurve]:
        curves: list[LinkCurve] = []
        skipped = 0
        for link in graph.links:
            source = graph.nodes.get(link.source_id)
            target = graph.nodes.get(link.target_id)
            start = source.spatial_position if source else None
            end = target.spatial_position if target else None
            if start is None or end is None:
                skipped += 1
                continue

            midpoint = tuple((a + b) / 2 * MIDPOINT_PULL for a, b in zip(start, end))
            curves.append(LinkCurve(
                source_id=link.source_id,
                target_id=link.target_id,
                strength=link.strength,
                points=sample_curve([start, midpoint, end], self.curve_segments),  # type: ignore[list-item]
            ))

        if skipped:
            logger.warning("curves_skipped_unpositioned", graph_id=graph.graph_id, skipped=skipped)
        return curves

    def advance(self, state: LayoutState, delta_time: float | None = None) -> LayoutState:
        """New state with the clock moved forward; bad deltas leave it where it is."""
        step = self.time_step if delta_time is None else delta_time
        if isinstance(step, bool) or not isinstance(step, (int, float)) or not math.isfinite(step) or step < 0:
            logger.debug("advance_step_ignored", delta_time=delta_time)
            step = 0.0
        return state.model_copy(update={"time": state.time + step})

    def frame(self, state: LayoutState) -> RenderFrame:
        """Renderer view of `state` with the vertical float applied."""
        nodes = [
            RenderNode(
                id=node.id,
                name=node.name,
                source_tag=node.source_tag,
                type=node.type,
                position=oscillate(node.spatial_position, state.time),
                size=node_size(node.weight),
                color=node_color(node.source_tag),
            )
            for node in state.graph.nodes.values()
            if node.spatial_position is not None
        ]
        return RenderFrame(time=state.time, generation=state.generation, nodes=nodes, links=state.curves)
