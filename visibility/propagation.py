"""Light propagation through a planned surface sequence.

Step K works from origin K (the player, then its successive mirror images) and
a set of live sectors. Each sector yields one visibility polygon (valid[K]);
for K < N the polygons cropped to the window of surface K form planned[K]. The
parts of each sector whose rays actually reach surface K unobstructed are then
reflected through it and become the live sectors of step K + 1. The lit region
for the cursor is valid[N].

Example:
    >>> from ricochet_core.geometry import Point, ScreenBounds
    >>> from ricochet_core.surfaces import mirror
    >>> from visibility.propagation import propagate_visibility
    >>> bounds = ScreenBounds(0.0, 0.0, 400.0, 400.0)
    >>> m = mirror("m", (300.0, 300.0), (100.0, 300.0))  # reflective side faces -y
    >>> result = propagate_visibility(Point(200.0, 100.0), [m], [m], bounds)
    >>> result.is_valid, result.final_region.contains(Point(200.0, 200.0))
    (True, True)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import cmp_to_key
from typing import Collection, List, Optional, Sequence, Tuple

from ricochet_core.config import TraceConfig
from ricochet_core.geometry import Point, Ray, ScreenBounds, add, cross, normalize, sub
from ricochet_core.raycast import SurfaceArray
from ricochet_core.reflection_cache import ReflectionCache
from ricochet_core.surfaces import Surface
from ricochet_core.tracer import SurfaceSet, as_surface_array
from visibility.clipping import contains_point, crop_by_window, polygon_area
from visibility.polygon_builder import build_visibility_polygon
from visibility.sectors import RaySector

logger = logging.getLogger(__name__)

Polygon = Tuple[Point, ...]


@dataclass(frozen=True)
class PropagationStep:
    index: int
    origin: Point
    polygons: Tuple[Polygon, ...]
    sectors: Tuple[RaySector, ...]
    is_valid: bool = True

    def contains(self, point: Point) -> bool:
        return any(contains_point(p, point) for p in self.polygons)

    def area(self) -> float:
        return sum(abs(polygon_area(p)) for p in self.polygons)

    @property
    def vertex_count(self) -> int:
        return sum(len(p) for p in self.polygons)


@dataclass(frozen=True)
class VisibilityRegion:
    """Lit region as a union of simple polygons (empty when invalid).

    Each live sector contributes its own polygon and the pieces are never
    merged. Sectors split by an obstacle share only boundary rays from the
    same origin, so containment is a plain any() over the pieces and areas add
    up without double counting.
    """

    polygons: Tuple[Polygon, ...] = ()

    def contains(self, point: Point) -> bool:
        return any(contains_point(p, point) for p in self.polygons)

    @property
    def is_empty(self) -> bool:
        return not self.polygons

    @property
    def vertex_count(self) -> int:
        return sum(len(p) for p in self.polygons)

    def area(self) -> float:
        return sum(abs(polygon_area(p)) for p in self.polygons)


@dataclass(frozen=True)
class PropagationResult:
    valid_steps: Tuple[PropagationStep, ...]
    planned_steps: Tuple[PropagationStep, ...]
    final_region: VisibilityRegion
    final_origin: Point
    is_valid: bool
    bypass_at_surface: Optional[int] = None
    exhausted_at_surface: Optional[int] = None


def _ccw_key(origin: Point):
    def compare(a: Point, b: Point) -> int:
        c = cross(origin, a, b)
        return -1 if c > 0.0 else (1 if c < 0.0 else 0)

    return cmp_to_key(compare)


def _bisector(origin: Point, a: Point, b: Point) -> Point:
    ua = normalize(sub(a, origin))
    ub = normalize(sub(b, origin))
    return add(origin, add(ua, ub))


def reaching_sectors(
    sector: RaySector,
    surface: Surface,
    surfaces: SurfaceArray,
    critical: Sequence[Point],
    exclude_ids: Collection[str] = (),
) -> List[RaySector]:
    """Sub-sectors of ``sector`` whose rays meet ``surface`` before any other obstacle.

    Between two consecutive critical directions the first obstacle along a ray
    cannot change, so one sample ray per elementary interval decides it.
    """

    window = RaySector.from_segment(sector.origin, surface.segment, sector.start_line)
    if window is None:
        return []
    span = sector.intersect(window)
    if span is None:
        return []
    o = span.origin
    inner = sorted({c for c in critical if c != o and span.contains_strictly(c)}, key=_ccw_key(o))
    directions = [span.right] + inner + [span.left]

    out: List[RaySector] = []
    run_start: Optional[Point] = None
    run_end: Optional[Point] = None
    for a, b in zip(directions[:-1], directions[1:]):
        if cross(o, a, b) <= 0.0:
            continue
        sample = _bisector(o, a, b)
        found = surfaces.nearest_hit(Ray(o, sample), span.start_parameter(sample), exclude_ids)
        if found is not None and found.surface.surface_id == surface.surface_id:
            if run_start is None:
                run_start = a
            run_end = b
        elif run_start is not None:
            out.append(RaySector(o, run_end, run_start, span.start_line))
            run_start = run_end = None
    if run_start is not None:
        out.append(RaySector(o, run_end, run_start, span.start_line))
    return out


def propagate_visibility(
    player: Point,
    planned: Sequence[Surface],
    all_surfaces: SurfaceSet,
    bounds: ScreenBounds,
    config: Optional[TraceConfig] = None,
    cache: Optional[ReflectionCache] = None,
) -> PropagationResult:
    cfg = config or TraceConfig()
    if cache is None:
        cache = ReflectionCache()
    arr = as_surface_array(all_surfaces)
    critical = arr.endpoints() + arr.crossing_points()

    origin = player
    alive: List[RaySector] = [RaySector.full(player)]
    valid_steps: List[PropagationStep] = []
    planned_steps: List[PropagationStep] = []
    bypass_at: Optional[int] = None
    exhausted_at: Optional[int] = None

    n = len(planned)
    for k in range(n + 1):
        exclude = (planned[k - 1].surface_id,) if k > 0 else ()
        polygons: List[Polygon] = []
        for sector in alive:
            vp = build_visibility_polygon(origin, arr, bounds, sector, exclude)
            if len(vp) >= 3:
                polygons.append(vp.vertices)
        valid_steps.append(PropagationStep(k, origin, tuple(polygons), tuple(alive)))
        if k == n:
            break

        surface = planned[k]
        if k >= cfg.max_reflections or not surface.is_on_reflective_side(origin):
            bypass_at = k
            logger.debug("propagation stopped at surface %d (%s): origin cannot reflect", k, surface.surface_id)
            break

        cropped = (crop_by_window(p, origin, surface.segment) for p in polygons)
        planned_steps.append(PropagationStep(k, origin, tuple(tuple(p) for p in cropped if len(p) >= 3), tuple(alive)))

        reaching: List[RaySector] = []
        for sector in alive:
            reaching.extend(reaching_sectors(sector, surface, arr, critical, exclude))
        if not reaching:
            exhausted_at = k
            logger.debug("propagation exhausted at surface %d (%s)", k, surface.surface_id)
            break
        alive = [r.reflect(surface, cache) for r in reaching]
        origin = cache.reflect(origin, surface)

    is_valid = bypass_at is None and exhausted_at is None
    if not is_valid:
        valid_steps[-1] = PropagationStep(valid_steps[-1].index, valid_steps[-1].origin, valid_steps[-1].polygons, valid_steps[-1].sectors, False)
    region = VisibilityRegion(valid_steps[-1].polygons) if is_valid else VisibilityRegion()
    return PropagationResult(
        valid_steps=tuple(valid_steps),
        planned_steps=tuple(planned_steps),
        final_region=region,
        final_origin=origin,
        is_valid=is_valid,
        bypass_at_surface=bypass_at,
        exhausted_at_surface=exhausted_at,
    )
