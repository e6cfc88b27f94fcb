"""Assemble ray-cast hits into a polygon outline.

Ordering is purely combinatorial: vertices are split into the two half-planes
around a reference direction and compared by cross product, so no angle is ever
computed and ties cannot be reordered by trigonometric rounding.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from functools import cmp_to_key
from typing import Callable, List, Optional, Sequence

from ricochet_core.geometry import DEDUP_TOLERANCE, Point, Ray, cross2, dot, length_squared, line_intersection, sub
from visibility.sectors import RaySector


class VertexSource(str, Enum):
    SURFACE = "surface"
    ENDPOINT = "endpoint"
    SCREEN = "screen"
    START_LINE = "start_line"
    ORIGIN = "origin"


@dataclass(frozen=True)
class OutlineVertex:
    point: Point
    direction: Point
    source: VertexSource
    surface_id: Optional[str] = None


def _half(ref: Point, v: Point) -> int:
    c = cross2(ref, v)
    if c > 0.0 or (c == 0.0 and dot(ref, v) > 0.0):
        return 0
    return 1


def angular_comparator(origin: Point, reference: Point) -> Callable[[OutlineVertex, OutlineVertex], int]:
    """Counter-clockwise order starting at the direction origin->reference."""

    ref = sub(reference, origin)

    def compare(a: OutlineVertex, b: OutlineVertex) -> int:
        va = sub(a.direction, origin)
        vb = sub(b.direction, origin)
        ha, hb = _half(ref, va), _half(ref, vb)
        if ha != hb:
            return ha - hb
        c = cross2(va, vb)
        if c > 0.0:
            return -1
        if c < 0.0:
            return 1
        da = length_squared(sub(a.point, origin))
        db = length_squared(sub(b.point, origin))
        return (da > db) - (da < db)

    return compare


def near_point(sector: RaySector, boundary: Point) -> Point:
    """Where the boundary ray crosses the sector's start line, exact when it is an endpoint."""

    line = sector.start_line
    if line is None:
        return sector.origin
    if boundary == line.start or boundary == line.end:
        return boundary
    solved = line_intersection(sector.origin, boundary, line.start, line.end)
    if solved is None:
        return sector.origin
    return Ray(sector.origin, boundary).point_at(solved[0])


def _close(a: Point, b: Point, tol: float) -> bool:
    return abs(a.x - b.x) <= tol and abs(a.y - b.y) <= tol


def _merge(kept: OutlineVertex, other: OutlineVertex) -> OutlineVertex:
    if other.source is VertexSource.ENDPOINT and kept.source is not VertexSource.ENDPOINT:
        return other
    return kept


def dedup_vertices(vertices: Sequence[OutlineVertex], tol: float = DEDUP_TOLERANCE) -> List[OutlineVertex]:
    """Drop exact and near repeats (including across the wrap), keeping endpoint coordinates."""

    out: List[OutlineVertex] = []
    for v in vertices:
        if out and _close(out[-1].point, v.point, tol):
            out[-1] = _merge(out[-1], v)
            continue
        out.append(v)
    while len(out) > 1 and _close(out[0].point, out[-1].point, tol):
        out[0] = _merge(out[0], out.pop())
    return out


def assemble_outline(origin: Point, vertices: Sequence[OutlineVertex], sector: RaySector) -> List[OutlineVertex]:
    """Sort hits from the right boundary to the left one and close the outline.

    Full sectors wrap around on their own. Finite sectors close through the start
    line (near-left then near-right) when they have one, otherwise through the
    origin.
    """

    reference = Point(origin.x + 1.0, origin.y) if sector.is_full else sector.right
    ordered = sorted(vertices, key=cmp_to_key(angular_comparator(origin, reference)))
    if not sector.is_full:
        if sector.start_line is not None:
            ordered.append(OutlineVertex(near_point(sector, sector.left), sector.left, VertexSource.START_LINE))
            ordered.append(OutlineVertex(near_point(sector, sector.right), sector.right, VertexSource.START_LINE))
        else:
            ordered.insert(0, OutlineVertex(origin, origin, VertexSource.ORIGIN))
    return dedup_vertices(ordered)
