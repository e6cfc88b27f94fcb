"""Angular sectors bounded by exact points rather than angles.

A sector spans counter-clockwise from ``right`` to ``left`` as seen from
``origin``. Equal boundaries mean the full circle. A reflected sector carries a
start line: rays only become physical once they have crossed it.

Example:
    >>> from ricochet_core.geometry import Point, Segment
    >>> from visibility.sectors import RaySector
    >>> sec = RaySector.from_segment(Point(0.0, 0.0), Segment(Point(10.0, -5.0), Point(10.0, 5.0)))
    >>> sec.contains(Point(20.0, 0.0)), sec.contains(Point(-20.0, 0.0))
    (True, False)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ricochet_core.geometry import Point, Segment, cross, dot, line_intersection, sub
from ricochet_core.reflection_cache import ReflectionCache
from ricochet_core.surfaces import Surface


@dataclass(frozen=True)
class RaySector:
    origin: Point
    left: Point
    right: Point
    start_line: Optional[Segment] = None

    @classmethod
    def full(cls, origin: Point, start_line: Optional[Segment] = None) -> "RaySector":
        ref = Point(origin.x + 1.0, origin.y)
        return cls(origin, ref, ref, start_line)

    @classmethod
    def from_segment(cls, origin: Point, segment: Segment, start_line: Optional[Segment] = None) -> Optional["RaySector"]:
        """Sector subtended by ``segment``; None when the origin is on its line."""

        c = cross(origin, segment.start, segment.end)
        if c > 0.0:
            return cls(origin, segment.end, segment.start, start_line)
        if c < 0.0:
            return cls(origin, segment.start, segment.end, start_line)
        return None

    @property
    def is_full(self) -> bool:
        return self.left == self.right

    def contains(self, point: Point) -> bool:
        """Angular containment, boundaries included."""

        if self.is_full:
            return True
        o = self.origin
        if point == o:
            return False
        span = cross(o, self.right, self.left)
        if span > 0.0:
            return cross(o, self.right, point) >= 0.0 and cross(o, point, self.left) >= 0.0
        if span < 0.0:
            return not (cross(o, self.left, point) > 0.0 and cross(o, point, self.right) > 0.0)
        if dot(sub(self.right, o), sub(self.left, o)) > 0.0:
            return cross(o, self.right, point) == 0.0 and dot(sub(self.right, o), sub(point, o)) > 0.0
        return cross(o, self.right, point) >= 0.0

    def contains_strictly(self, point: Point) -> bool:
        if self.is_full:
            return point != self.origin
        o = self.origin
        return self.contains(point) and cross(o, self.right, point) != 0.0 and cross(o, self.left, point) != 0.0

    def intersect(self, other: "RaySector") -> Optional["RaySector"]:
        """Intersection with a convex sector sharing the same origin; keeps this sector's start line."""

        if other.is_full:
            return self
        if self.is_full:
            return RaySector(self.origin, other.left, other.right, self.start_line)
        if self.contains(other.right):
            right = other.right
        elif other.contains(self.right):
            right = self.right
        else:
            return None
        if self.contains(other.left):
            left = other.left
        elif other.contains(self.left):
            left = self.left
        else:
            return None
        if cross(self.origin, right, left) <= 0.0:
            return None
        return RaySector(self.origin, left, right, self.start_line)

    def reflect(self, surface: Surface, cache: Optional[ReflectionCache] = None) -> "RaySector":
        """Mirror through ``surface``; orientation flips so the boundaries swap."""

        if cache is None:
            cache = ReflectionCache()
        origin = cache.reflect(self.origin, surface)
        if self.is_full:
            return RaySector.full(origin, surface.segment)
        return RaySector(origin, cache.reflect(self.right, surface), cache.reflect(self.left, surface), surface.segment)

    def start_parameter(self, target: Point) -> float:
        """Ray parameter (origin=0, target=1) where origin->target crosses the start line."""

        if self.start_line is None:
            return 0.0
        solved = line_intersection(self.origin, target, self.start_line.start, self.start_line.end)
        if solved is None or solved[0] <= 0.0:
            return 0.0
        return solved[0]
