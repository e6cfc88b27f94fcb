"""One-shot evaluation of a plan: bypass, paths, divergence and lit region.

Example:
    >>> from ricochet_core.geometry import Point, ScreenBounds
    >>> from ricochet_core.engine import evaluate_plan
    >>> ev = evaluate_plan(Point(100.0, 100.0), Point(500.0, 100.0), [], [], ScreenBounds(0.0, 0.0, 1280.0, 720.0))
    >>> ev.is_fully_aligned, ev.is_cursor_lit, ev.lit_matches_validity
    (True, True, True)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from ricochet_core.bypass import BypassResult, evaluate_bypass
from ricochet_core.config import TraceConfig
from ricochet_core.divergence import DivergenceInfo, find_divergence
from ricochet_core.geometry import Point, ScreenBounds
from ricochet_core.image_chain import ImageChain, build_image_chain
from ricochet_core.paths import PathResult
from ricochet_core.planned_path import build_planned_path
from ricochet_core.raycast import SurfaceArray
from ricochet_core.reflection_cache import ReflectionCache
from ricochet_core.surfaces import Surface, surfaces_by_id
from ricochet_core.tracer import trace_actual_path
from visibility.propagation import PropagationResult, propagate_visibility

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlanEvaluation:
    player: Point
    cursor: Point
    planned: Sequence[Surface]
    bypass: BypassResult
    chain: ImageChain
    planned_path: PathResult
    actual_path: PathResult
    divergence: DivergenceInfo
    visibility: PropagationResult

    @property
    def is_cursor_reachable(self) -> bool:
        return self.actual_path.reached_cursor

    @property
    def is_fully_aligned(self) -> bool:
        return self.divergence.is_aligned

    @property
    def is_plan_valid(self) -> bool:
        return self.bypass.is_empty and self.divergence.is_aligned

    @property
    def is_cursor_lit(self) -> bool:
        return self.visibility.final_region.contains(self.cursor)

    @property
    def lit_matches_validity(self) -> bool:
        """Lit exactly when nothing was bypassed and the paths agree."""

        return self.is_cursor_lit == self.is_plan_valid


def evaluate_plan(
    player: Point,
    cursor: Point,
    planned: Sequence[Surface],
    all_surfaces: Sequence[Surface],
    bounds: ScreenBounds,
    config: Optional[TraceConfig] = None,
) -> PlanEvaluation:
    cfg = config or TraceConfig()
    surfaces_by_id(all_surfaces)
    cache = ReflectionCache()
    arr = SurfaceArray(all_surfaces)

    bypass = evaluate_bypass(player, cursor, planned, cfg, cache)
    chain = build_image_chain(player, cursor, bypass.active, cache)
    planned_path = build_planned_path(chain, arr, cfg, cache)
    actual_path = trace_actual_path(chain, arr, cfg, cache)
    divergence = find_divergence(planned_path.waypoints, actual_path.waypoints)
    visibility = propagate_visibility(player, planned, arr, bounds, cfg, cache)

    logger.debug(
        "plan %s: bypassed=%s aligned=%s status=%s cache=%s",
        [s.surface_id for s in planned],
        [b.surface.surface_id for b in bypass.bypassed],
        divergence.is_aligned,
        actual_path.status.value,
        cache.stats(),
    )
    return PlanEvaluation(player, cursor, tuple(planned), bypass, chain, planned_path, actual_path, divergence, visibility)
