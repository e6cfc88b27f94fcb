"""Scene overlays: surfaces, planned/actual paths, lit region and lit/valid agreement grids."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence
import warnings

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.patches import Polygon as PolygonPatch

from analysis.consistency import SweepResult
from ricochet_core.engine import PlanEvaluation
from ricochet_core.geometry import ScreenBounds
from ricochet_core.surfaces import Surface


def _save(fig: plt.Figure, outdir: str, name: str) -> str:
    Path(outdir).mkdir(parents=True, exist_ok=True)
    png = Path(outdir) / f"{name}.png"
    pdf = Path(outdir) / f"{name}.pdf"
    fig.savefig(png, dpi=150, bbox_inches="tight")
    try:
        fig.savefig(pdf, bbox_inches="tight")
    except PermissionError:
        warnings.warn(
            f"Could not write '{pdf}' (permission denied). Saved PNG only.",
            RuntimeWarning,
            stacklevel=2,
        )
    plt.close(fig)
    return str(png)


def _setup_axes(ax: plt.Axes, bounds: ScreenBounds) -> None:
    ax.set_xlim(bounds.min_x, bounds.max_x)
    # screen coordinates grow downwards
    ax.set_ylim(bounds.max_y, bounds.min_y)
    ax.set_aspect("equal")
    ax.add_patch(plt.Rectangle((bounds.min_x, bounds.min_y), bounds.width, bounds.height, fill=False, ec="0.6", lw=0.8))


def draw_surfaces(ax: plt.Axes, surfaces: Sequence[Surface], planned_ids: Sequence[str] = ()) -> None:
    for s in surfaces:
        color = "tab:blue" if s.reflective else "0.2"
        lw = 3.0 if s.surface_id in planned_ids else 1.8
        ax.plot([s.start.x, s.end.x], [s.start.y, s.end.y], color=color, lw=lw, solid_capstyle="round")
        if s.reflective:
            # short tick on the reflective side
            m, n = s.midpoint, s.normal
            k = 12.0 / max(np.hypot(n.x, n.y), 1e-12)
            ax.plot([m.x, m.x + n.x * k], [m.y, m.y + n.y * k], color=color, lw=0.8)
        ax.annotate(s.surface_id, (s.midpoint.x, s.midpoint.y), fontsize=7, color=color)


def plot_evaluation(ev: PlanEvaluation, surfaces: Sequence[Surface], bounds: ScreenBounds, outdir: str, name: str = "overlay") -> str:
    fig, ax = plt.subplots(figsize=(9, 5.2))
    _setup_axes(ax, bounds)

    for poly in ev.visibility.final_region.polygons:
        ax.add_patch(PolygonPatch(np.asarray(poly, dtype=float), closed=True, fc="gold", ec="goldenrod", alpha=0.3, lw=0.6))
    draw_surfaces(ax, surfaces, [s.surface_id for s in ev.planned])

    planned = np.asarray(ev.planned_path.waypoints, dtype=float)
    actual = np.asarray(ev.actual_path.waypoints, dtype=float)
    ax.plot(planned[:, 0], planned[:, 1], "--", color="tab:green", lw=1.4, label="planned")
    ax.plot(actual[:, 0], actual[:, 1], "-", color="tab:red", lw=1.0, label=f"actual ({ev.actual_path.status.value})")
    if ev.actual_path.forward_projection:
        fwd = np.asarray([ev.cursor] + ev.actual_path.forward_projection, dtype=float)
        ax.plot(fwd[:, 0], fwd[:, 1], ":", color="tab:red", lw=0.8)

    ax.scatter([ev.player.x], [ev.player.y], marker="o", color="k", zorder=5, label="player")
    ax.scatter([ev.cursor.x], [ev.cursor.y], marker="x", color="k", zorder=5, label="cursor")
    if ev.divergence.point is not None:
        ax.scatter([ev.divergence.point.x], [ev.divergence.point.y], marker="D", color="tab:purple", zorder=6, label="divergence")

    ax.set_title(f"{name}: lit={ev.is_cursor_lit} valid={ev.is_plan_valid} bypassed={ev.bypass.bypassed_ids()}")
    ax.legend(loc="upper right", fontsize=7)
    return _save(fig, outdir, name)


def plot_agreement_grid(
    result: SweepResult,
    surfaces: Sequence[Surface],
    bounds: ScreenBounds,
    outdir: str,
    name: str = "agreement_grid",
    planned_ids: Optional[Sequence[str]] = None,
) -> str:
    fig, ax = plt.subplots(figsize=(9, 5.2))
    _setup_axes(ax, bounds)
    draw_surfaces(ax, surfaces, planned_ids or ())
    c = result.cursors
    agree = (result.lit == result.plan_valid) & ~result.undecidable
    ax.scatter(c[agree & result.lit, 0], c[agree & result.lit, 1], s=10, color="tab:green", label="lit & valid")
    ax.scatter(c[agree & ~result.lit, 0], c[agree & ~result.lit, 1], s=6, color="0.7", label="dark & invalid")
    skip = result.undecidable
    ax.scatter(c[skip, 0], c[skip, 1], s=14, facecolors="none", edgecolors="tab:orange", label="undecidable")
    bad = ~agree & ~skip
    ax.scatter(c[bad, 0], c[bad, 1], s=22, marker="x", color="tab:red", label="mismatch")
    ax.set_title(f"{name}: agreement={result.agreement:.4f}")
    ax.legend(loc="upper right", fontsize=7)
    return _save(fig, outdir, name)
