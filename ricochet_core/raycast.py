"""Batched nearest-hit queries over all scene surfaces.

The candidate search is vectorised with numpy; the winning surface is solved
again with the scalar :func:`intersect_ray_segment` so that the returned point is
the exact value every other pipeline stage computes for the same inputs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Collection, List, Optional, Sequence

import numpy as np
from numpy.typing import NDArray

from ricochet_core.geometry import ON_SEGMENT_TOLERANCE, Point, Ray, RayHit, intersect_ray_segment, line_intersection
from ricochet_core.surfaces import Surface


@dataclass(frozen=True)
class SurfaceHit:
    surface: Surface
    hit: RayHit

    @property
    def point(self) -> Point:
        return self.hit.point

    @property
    def t(self) -> float:
        return self.hit.t


class SurfaceArray:
    """Immutable numpy view of a surface list."""

    def __init__(self, surfaces: Sequence[Surface]):
        self.surfaces: List[Surface] = list(surfaces)
        n = len(self.surfaces)
        self.starts: NDArray[np.float64] = np.array([[s.start.x, s.start.y] for s in self.surfaces], dtype=float).reshape(n, 2)
        self.ends: NDArray[np.float64] = np.array([[s.end.x, s.end.y] for s in self.surfaces], dtype=float).reshape(n, 2)
        self.ids: List[str] = [s.surface_id for s in self.surfaces]

    def __len__(self) -> int:
        return len(self.surfaces)

    def solve(self, source: Point, target: Point) -> tuple[NDArray[np.float64], NDArray[np.float64], NDArray[np.bool_]]:
        """Ray parameter t, segment parameter s and a validity mask for every surface."""

        d1x = target.x - source.x
        d1y = target.y - source.y
        d2 = self.ends - self.starts
        denom = d1x * d2[:, 1] - d1y * d2[:, 0]
        valid = denom != 0.0
        safe = np.where(valid, denom, 1.0)
        dx = self.starts[:, 0] - source.x
        dy = self.starts[:, 1] - source.y
        t = (dx * d2[:, 1] - dy * d2[:, 0]) / safe
        s = (dx * d1y - dy * d1x) / safe
        return t, s, valid

    def nearest_hit(
        self,
        ray: Ray,
        min_t: float = 0.0,
        exclude_ids: Collection[str] = (),
        tol: float = ON_SEGMENT_TOLERANCE,
    ) -> Optional[SurfaceHit]:
        """Closest on-segment hit strictly beyond ``min_t``; ties keep the lowest index."""

        if not self.surfaces:
            return None
        t, s, valid = self.solve(ray.source, ray.target)
        mask = valid & (t > min_t) & (s >= -tol) & (s <= 1.0 + tol)
        if exclude_ids:
            mask &= ~np.isin(np.array(self.ids, dtype=object), list(exclude_ids))
        if not mask.any():
            return None
        candidates = np.flatnonzero(mask)
        best = int(candidates[np.argmin(t[candidates])])
        surface = self.surfaces[best]
        hit = intersect_ray_segment(Ray(ray.source, ray.target), surface.segment)
        if hit is None:
            return None
        return SurfaceHit(surface, RayHit(hit.point, hit.t, hit.s, True))

    def endpoints(self) -> List[Point]:
        out: List[Point] = []
        for s in self.surfaces:
            out.append(s.start)
            out.append(s.end)
        return out

    def crossing_points(self) -> List[Point]:
        """Proper intersection points between pairs of surfaces (shared endpoints excluded)."""

        out: List[Point] = []
        n = len(self.surfaces)
        for i in range(n):
            a = self.surfaces[i]
            for j in range(i + 1, n):
                b = self.surfaces[j]
                solved = line_intersection(a.start, a.end, b.start, b.end)
                if solved is None:
                    continue
                t, s = solved
                if 0.0 < t < 1.0 and 0.0 < s < 1.0:
                    out.append(Ray(a.start, a.end).point_at(t))
        return out
