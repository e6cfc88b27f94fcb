"""Cursor-grid sweeps checking that the lit region agrees with plan validity.

A cursor should be lit exactly when no planned surface is bypassed and the
actual path follows the planned one. Two kinds of cursor are reported
separately and never count as mismatches:

- within ``boundary_margin`` of the lit region's outline: a point on the
  outline is lit or unlit depending on rounding;
- within ``boundary_margin`` of an earlier leg of the planned path: the arrow
  reaches the cursor on that leg and stops, so the paths diverge, while light
  reflected later in the chain can still cover the point.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import numpy as np

from ricochet_core.config import TraceConfig
from ricochet_core.engine import PlanEvaluation, evaluate_plan
from ricochet_core.geometry import Point, ScreenBounds
from ricochet_core.surfaces import Surface
from visibility.propagation import VisibilityRegion


@dataclass
class SweepConfig:
    nx: int = 24
    ny: int = 14
    margin: float = 5.0
    boundary_margin: float = 1e-3


@dataclass
class SweepResult:
    cursors: np.ndarray
    lit: np.ndarray
    plan_valid: np.ndarray
    bypassed: np.ndarray
    aligned: np.ndarray
    near_boundary: np.ndarray
    on_earlier_leg: np.ndarray
    statuses: List[str] = field(default_factory=list)

    @property
    def undecidable(self) -> np.ndarray:
        return self.near_boundary | self.on_earlier_leg

    @property
    def mismatches(self) -> np.ndarray:
        """Indices of decidable cursors where lit != plan valid."""

        return np.flatnonzero((self.lit != self.plan_valid) & ~self.undecidable)

    @property
    def agreement(self) -> float:
        decidable = int(np.count_nonzero(~self.undecidable))
        if decidable == 0:
            return 1.0
        return 1.0 - len(self.mismatches) / decidable


def cursor_grid(bounds: ScreenBounds, nx: int, ny: int, margin: float = 5.0) -> np.ndarray:
    xs = np.linspace(bounds.min_x + margin, bounds.max_x - margin, nx)
    ys = np.linspace(bounds.min_y + margin, bounds.max_y - margin, ny)
    gx, gy = np.meshgrid(xs, ys)
    return np.stack([gx.ravel(), gy.ravel()], axis=1)


def _distance_to_edges(a: np.ndarray, b: np.ndarray, point: Point) -> float:
    if len(a) == 0:
        return float(np.inf)
    p = np.array([point.x, point.y], dtype=float)
    ab = b - a
    denom = np.einsum("ij,ij->i", ab, ab)
    t = np.where(denom > 0, np.einsum("ij,ij->i", p - a, ab) / np.where(denom > 0, denom, 1.0), 0.0)
    t = np.clip(t, 0.0, 1.0)
    proj = a + t[:, None] * ab
    return float(np.sqrt(np.min(np.sum((proj - p) ** 2, axis=1))))


def distance_to_outline(region: VisibilityRegion, point: Point) -> float:
    """Smallest distance from ``point`` to any edge of the region (inf when empty)."""

    best = float(np.inf)
    for poly in region.polygons:
        a = np.asarray(poly, dtype=float)
        best = min(best, _distance_to_edges(a, np.roll(a, -1, axis=0), point))
    return best


def distance_to_earlier_legs(waypoints: Sequence[Point], point: Point) -> float:
    """Distance from ``point`` to the planned legs before the final one (inf when there are none)."""

    if len(waypoints) < 3:
        return float(np.inf)
    pts = np.asarray(waypoints[:-1], dtype=float)
    return _distance_to_edges(pts[:-1], pts[1:], point)


def sweep_plan(
    player: Point,
    planned: Sequence[Surface],
    all_surfaces: Sequence[Surface],
    bounds: ScreenBounds,
    cursors: Optional[np.ndarray] = None,
    config: Optional[TraceConfig] = None,
    sweep: Optional[SweepConfig] = None,
) -> SweepResult:
    scfg = sweep or SweepConfig()
    if cursors is None:
        cursors = cursor_grid(bounds, scfg.nx, scfg.ny, scfg.margin)
    n = len(cursors)
    lit = np.zeros(n, dtype=bool)
    valid = np.zeros(n, dtype=bool)
    bypassed = np.zeros(n, dtype=bool)
    aligned = np.zeros(n, dtype=bool)
    near = np.zeros(n, dtype=bool)
    on_leg = np.zeros(n, dtype=bool)
    statuses: List[str] = []
    for i, (x, y) in enumerate(np.asarray(cursors, dtype=float)):
        ev = evaluate_plan(player, Point(float(x), float(y)), planned, all_surfaces, bounds, config)
        lit[i] = ev.is_cursor_lit
        valid[i] = ev.is_plan_valid
        bypassed[i] = not ev.bypass.is_empty
        aligned[i] = ev.is_fully_aligned
        near[i] = distance_to_outline(ev.visibility.final_region, ev.cursor) <= scfg.boundary_margin
        on_leg[i] = distance_to_earlier_legs(ev.planned_path.waypoints, ev.cursor) <= scfg.boundary_margin
        statuses.append(ev.actual_path.status.value)
    return SweepResult(np.asarray(cursors, dtype=float), lit, valid, bypassed, aligned, near, on_leg, statuses)


def summarize_sweep(result: SweepResult) -> Dict[str, Any]:
    status_counts: Dict[str, int] = {}
    for s in result.statuses:
        status_counts[s] = status_counts.get(s, 0) + 1
    return {
        "cursors": int(len(result.cursors)),
        "lit": int(np.count_nonzero(result.lit)),
        "plan_valid": int(np.count_nonzero(result.plan_valid)),
        "bypassed": int(np.count_nonzero(result.bypassed)),
        "near_boundary": int(np.count_nonzero(result.near_boundary)),
        "on_earlier_leg": int(np.count_nonzero(result.on_earlier_leg)),
        "mismatches": int(len(result.mismatches)),
        "agreement": float(result.agreement),
        "status_counts": status_counts,
    }


def evaluations_identical(a: PlanEvaluation, b: PlanEvaluation) -> bool:
    return (
        a.planned_path.waypoints == b.planned_path.waypoints
        and a.actual_path.waypoints == b.actual_path.waypoints
        and a.divergence == b.divergence
        and a.bypass.bypassed_ids() == b.bypass.bypassed_ids()
        and a.visibility.final_region.polygons == b.visibility.final_region.polygons
    )


def check_determinism(
    player: Point,
    cursor: Point,
    planned: Sequence[Surface],
    all_surfaces: Sequence[Surface],
    bounds: ScreenBounds,
    repeats: int = 3,
    config: Optional[TraceConfig] = None,
) -> bool:
    """Re-run one evaluation and require bit-identical outputs every time."""

    first = evaluate_plan(player, cursor, planned, all_surfaces, bounds, config)
    return all(evaluations_identical(first, evaluate_plan(player, cursor, planned, all_surfaces, bounds, config)) for _ in range(repeats - 1))


def save_stats_json(path: str, stats: Mapping[str, Any]) -> None:
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(stats, f, indent=2)
