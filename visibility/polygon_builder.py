"""Visibility polygon from one origin within one angular sector.

Rays are cast at every critical point (obstacle endpoints, obstacle crossings,
screen corners and the sector boundaries) plus two grazing rays beside each,
so shadow edges behind obstacle endpoints are captured on both sides. The
outline is then clipped to the screen rectangle.

Example:
    >>> from ricochet_core.geometry import Point, ScreenBounds
    >>> from visibility.polygon_builder import build_visibility_polygon
    >>> vp = build_visibility_polygon(Point(50.0, 50.0), [], ScreenBounds(0.0, 0.0, 100.0, 100.0))
    >>> round(vp.area(), 6), vp.contains(Point(99.0, 1.0))
    (10000.0, True)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Collection, List, Optional, Tuple

from ricochet_core.geometry import DEDUP_TOLERANCE, GRAZING_ANGLE, Point, Ray, ScreenBounds
from ricochet_core.raycast import SurfaceArray
from ricochet_core.tracer import SurfaceSet, as_surface_array
from visibility.clipping import clip_to_screen, contains_point, polygon_area
from visibility.outline import OutlineVertex, VertexSource, assemble_outline
from visibility.sectors import RaySector


@dataclass(frozen=True)
class VisibilityPolygon:
    origin: Point
    sector: RaySector
    outline: Tuple[OutlineVertex, ...]
    vertices: Tuple[Point, ...]

    def __len__(self) -> int:
        return len(self.vertices)

    def area(self) -> float:
        return polygon_area(self.vertices)

    def contains(self, point: Point) -> bool:
        return contains_point(self.vertices, point)


def grazing_point(origin: Point, target: Point, sign: float, angle: float = GRAZING_ANGLE) -> Point:
    """``target`` rotated about ``origin`` by roughly ``sign * angle`` radians."""

    dx = target.x - origin.x
    dy = target.y - origin.y
    return Point(target.x - sign * angle * dy, target.y + sign * angle * dx)


def _cast(
    origin: Point,
    target: Point,
    surfaces: SurfaceArray,
    bounds: ScreenBounds,
    sector: RaySector,
    exclude_ids: Collection[str],
    snap: Optional[VertexSource],
) -> OutlineVertex:
    min_t = sector.start_parameter(target)
    ray = Ray(origin, target)
    t_exit = bounds.exit_parameter(origin, target, min_t)
    if t_exit is None:
        # nothing of this ray past its start is on screen
        src = VertexSource.START_LINE if sector.start_line is not None else VertexSource.ORIGIN
        return OutlineVertex(ray.point_at(min_t), target, src)
    found = surfaces.nearest_hit(ray, min_t, exclude_ids)
    if found is not None and found.t <= t_exit:
        vertex = OutlineVertex(found.point, target, VertexSource.SURFACE, found.surface.surface_id)
    else:
        vertex = OutlineVertex(bounds.clamp(ray.point_at(t_exit)), target, VertexSource.SCREEN)
    if snap is not None and abs(vertex.point.x - target.x) <= DEDUP_TOLERANCE and abs(vertex.point.y - target.y) <= DEDUP_TOLERANCE:
        return OutlineVertex(target, target, snap, vertex.surface_id)
    return vertex


def build_visibility_polygon(
    origin: Point,
    surfaces: SurfaceSet,
    bounds: ScreenBounds,
    sector: Optional[RaySector] = None,
    exclude_ids: Collection[str] = (),
) -> VisibilityPolygon:
    arr = as_surface_array(surfaces)
    sector = sector or RaySector.full(origin)

    critical: List[Tuple[Point, VertexSource]] = [(p, VertexSource.ENDPOINT) for p in arr.endpoints()]
    critical += [(p, VertexSource.ENDPOINT) for p in arr.crossing_points()]
    critical += [(p, VertexSource.SCREEN) for p in bounds.corners()]

    targets: List[Tuple[Point, Optional[VertexSource]]] = []
    for point, kind in critical:
        if point == origin:
            continue
        if sector.contains(point):
            targets.append((point, kind))
        for sign in (1.0, -1.0):
            g = grazing_point(origin, point, sign)
            if sector.contains(g):
                targets.append((g, None))
    if not sector.is_full:
        targets.append((sector.right, None))
        targets.append((sector.left, None))

    seen = set()
    vertices: List[OutlineVertex] = []
    for target, snap in targets:
        if target in seen:
            continue
        seen.add(target)
        vertices.append(_cast(origin, target, arr, bounds, sector, exclude_ids, snap))

    outline = assemble_outline(origin, vertices, sector)
    clipped = clip_to_screen([v.point for v in outline], bounds)
    return VisibilityPolygon(origin, sector, tuple(outline), tuple(clipped))
