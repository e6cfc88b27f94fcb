"""Physical forward tracing of a ray through the scene.

The tracer carries a pair of images (origin, target) instead of a point and a
direction. Each reflection mirrors both images through the struck surface via
the shared :class:`ReflectionCache`, so a trajectory that strikes the planned
surfaces in order reproduces the image-chain rays, and therefore the planned
reflection points, bit-for-bit.

Example:
    >>> from ricochet_core.geometry import Point
    >>> from ricochet_core.image_chain import build_image_chain
    >>> from ricochet_core.tracer import trace_actual_path
    >>> chain = build_image_chain(Point(0.0, 0.0), Point(10.0, 0.0), [])
    >>> path = trace_actual_path(chain, [])
    >>> path.waypoints, path.status.value
    ([Point(x=0.0, y=0.0), Point(x=10.0, y=0.0)], 'reached_cursor')
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

from ricochet_core.config import TraceConfig
from ricochet_core.geometry import Point, Ray, add, length_squared, line_intersection, normalize, point_on_ray_parameter, scale
from ricochet_core.image_chain import ImageChain
from ricochet_core.paths import HitInfo, PathResult, PathStatus
from ricochet_core.raycast import SurfaceArray
from ricochet_core.reflection_cache import ReflectionCache
from ricochet_core.surfaces import Surface

logger = logging.getLogger(__name__)

SurfaceSet = Union[SurfaceArray, Sequence[Surface]]


@dataclass(frozen=True)
class PropagatorState:
    origin: Point
    target: Point
    depth: int = 0
    last_surface: Optional[Surface] = None

    @property
    def ray(self) -> Ray:
        return Ray(self.origin, self.target)

    def start_parameter(self) -> float:
        """Parameter where the ray crosses the surface it last reflected from (0 if none)."""

        if self.last_surface is None:
            return 0.0
        solved = line_intersection(self.origin, self.target, self.last_surface.start, self.last_surface.end)
        if solved is None or solved[0] <= 0.0:
            return 0.0
        return solved[0]

    def reflect_through(self, surface: Surface, cache: ReflectionCache) -> "PropagatorState":
        return PropagatorState(cache.reflect(self.origin, surface), cache.reflect(self.target, surface), self.depth + 1, surface)


@dataclass(frozen=True)
class TraceResult:
    points: List[Point]
    hits: List[Optional[HitInfo]]
    status: PathStatus
    final_state: PropagatorState
    reflections: int
    stop_t: Optional[float] = None
    blocked_by: Optional[str] = None


def as_surface_array(surfaces: SurfaceSet) -> SurfaceArray:
    return surfaces if isinstance(surfaces, SurfaceArray) else SurfaceArray(surfaces)


def trace(
    state: PropagatorState,
    surfaces: SurfaceArray,
    start: Point,
    cache: ReflectionCache,
    max_reflections: int,
    max_distance: float,
    stop_at: Optional[Point] = None,
    min_t: Optional[float] = None,
) -> TraceResult:
    """Follow ``state`` until it reaches ``stop_at``, is blocked, or runs out of budget.

    ``min_t`` overrides the start parameter of the first leg only.
    """

    points: List[Point] = []
    hits: List[Optional[HitInfo]] = []
    reflections = 0
    leg_start = start
    first_min_t = min_t

    while True:
        ray = state.ray
        lo = state.start_parameter() if first_min_t is None else first_min_t
        first_min_t = None
        direction = ray.direction
        if length_squared(direction) == 0.0:
            points.append(leg_start)
            hits.append(None)
            return TraceResult(points, hits, PathStatus.MAX_DISTANCE, state, reflections)

        exclude = (state.last_surface.surface_id,) if state.last_surface is not None else ()
        found = surfaces.nearest_hit(ray, lo, exclude)

        if stop_at is not None:
            t_c = point_on_ray_parameter(ray, stop_at)
            if t_c is not None and t_c > lo and (found is None or t_c <= found.t):
                points.append(stop_at)
                hits.append(None)
                return TraceResult(points, hits, PathStatus.REACHED_CURSOR, state, reflections, stop_t=t_c)

        if found is None:
            points.append(add(leg_start, scale(normalize(direction), max_distance)))
            hits.append(None)
            logger.debug("trace escaped after %d reflections", reflections)
            return TraceResult(points, hits, PathStatus.MAX_DISTANCE, state, reflections)

        surface = found.surface
        reflects = surface.can_reflect_from(direction)
        points.append(found.point)
        if reflects and reflections >= max_reflections:
            hits.append(HitInfo(surface.surface_id, found.t, found.hit.s, True, False))
            return TraceResult(points, hits, PathStatus.MAX_REFLECTIONS, state, reflections)
        hits.append(HitInfo(surface.surface_id, found.t, found.hit.s, True, reflects))
        if not reflects:
            logger.debug("trace blocked by %s after %d reflections", surface.surface_id, reflections)
            return TraceResult(points, hits, PathStatus.BLOCKED, state, reflections, blocked_by=surface.surface_id)

        state = state.reflect_through(surface, cache)
        reflections += 1
        leg_start = found.point


def project_forward(
    state: PropagatorState,
    surfaces: SurfaceArray,
    start: Point,
    min_t: float,
    remaining_reflections: int,
    config: Optional[TraceConfig] = None,
    cache: Optional[ReflectionCache] = None,
) -> TraceResult:
    """Continue a ray past ``start`` (normally the cursor) with the remaining bounce budget."""

    cfg = config or TraceConfig()
    if cache is None:
        cache = ReflectionCache()
    return trace(state, surfaces, start, cache, max(remaining_reflections, 0), cfg.max_distance, min_t=min_t)


def trace_actual_path(
    chain: ImageChain,
    surfaces: SurfaceSet,
    config: Optional[TraceConfig] = None,
    cache: Optional[ReflectionCache] = None,
) -> PathResult:
    """Trace the arrow from the player along the chain's initial ray, ignoring the plan afterwards."""

    cfg = config or TraceConfig()
    if cache is None:
        cache = ReflectionCache()
    arr = as_surface_array(surfaces)

    if chain.immediate_arrival:
        return PathResult([chain.player], [None], True, PathStatus.REACHED_CURSOR, Point(0.0, 0.0))

    state = PropagatorState(chain.player, chain.targets[0])
    result = trace(state, arr, chain.player, cache, cfg.max_reflections, cfg.max_distance, stop_at=chain.cursor)
    reached = result.status is PathStatus.REACHED_CURSOR

    forward_points: List[Point] = []
    forward_hits: List[Optional[HitInfo]] = []
    if reached:
        forward = project_forward(result.final_state, arr, chain.cursor, result.stop_t, cfg.max_reflections - result.reflections, cfg, cache)
        forward_points, forward_hits = forward.points, forward.hits

    logger.debug("actual path: %s after %d reflections", result.status.value, result.reflections)
    return PathResult(
        waypoints=[chain.player] + result.points,
        hits=[None] + result.hits,
        reached_cursor=reached,
        status=result.status,
        initial_direction=chain.initial_direction,
        forward_projection=forward_points,
        forward_hits=forward_hits,
        blocked_by=result.blocked_by,
    )
