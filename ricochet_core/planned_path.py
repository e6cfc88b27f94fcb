"""Ideal path through the active surfaces, read straight off the image chain."""

from __future__ import annotations

from typing import List, Optional

from ricochet_core.config import TraceConfig
from ricochet_core.geometry import Point, add, sub
from ricochet_core.image_chain import ImageChain
from ricochet_core.paths import HitInfo, PathResult, PathStatus
from ricochet_core.reflection_cache import ReflectionCache
from ricochet_core.tracer import PropagatorState, SurfaceSet, as_surface_array, project_forward


def build_planned_path(
    chain: ImageChain,
    surfaces: SurfaceSet,
    config: Optional[TraceConfig] = None,
    cache: Optional[ReflectionCache] = None,
) -> PathResult:
    """Waypoints [player, reflection points..., cursor] plus the projection past the cursor.

    Off-segment reflection points are kept and flagged; reporting them is the
    divergence detector's job.
    """

    cfg = config or TraceConfig()
    if cache is None:
        cache = ReflectionCache()

    if chain.immediate_arrival:
        return PathResult([chain.player], [None], True, PathStatus.REACHED_CURSOR, Point(0.0, 0.0))

    waypoints: List[Point] = [chain.player]
    hits: List[Optional[HitInfo]] = [None]
    for k, surface in enumerate(chain.surfaces):
        hit = chain.hits[k]
        waypoints.append(hit.point)
        hits.append(HitInfo(surface.surface_id, hit.t, hit.s, hit.on_segment, hit.on_segment))
    waypoints.append(chain.cursor)
    hits.append(None)

    n = chain.depth
    last = chain.surfaces[-1] if n else None
    final_ray = chain.ray(n)
    if final_ray.target == chain.cursor:
        state = PropagatorState(final_ray.source, final_ray.target, n, last)
        min_t = 1.0
    else:
        # fallback aim: keep the final leg's direction but restart it at the cursor
        state = PropagatorState(chain.cursor, add(chain.cursor, sub(final_ray.target, final_ray.source)), n, last)
        min_t = 0.0
    forward = project_forward(state, as_surface_array(surfaces), chain.cursor, min_t, cfg.max_reflections - n, cfg, cache)

    return PathResult(
        waypoints=waypoints,
        hits=hits,
        reached_cursor=True,
        status=PathStatus.REACHED_CURSOR,
        initial_direction=chain.initial_direction,
        forward_projection=forward.points,
        forward_hits=forward.hits,
    )
