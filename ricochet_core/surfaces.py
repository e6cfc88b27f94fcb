"""Line-segment surfaces: mirrors that reflect on one side and walls that only block."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable

from ricochet_core.geometry import Point, Segment, dot, midpoint, reflect_direction, side_of_line


@dataclass(frozen=True)
class Surface:
    """Obstacle segment.

    The reflective side is the left of start->end, where the raw normal
    (-(ey - sy), ex - sx) points. Non-reflective surfaces block from both sides.
    """

    surface_id: str
    start: Point
    end: Point
    reflective: bool = True

    @property
    def segment(self) -> Segment:
        return Segment(self.start, self.end)

    @property
    def normal(self) -> Point:
        return Point(-(self.end.y - self.start.y), self.end.x - self.start.x)

    @property
    def midpoint(self) -> Point:
        return midpoint(self.start, self.end)

    @property
    def length_squared(self) -> float:
        dx = self.end.x - self.start.x
        dy = self.end.y - self.start.y
        return dx * dx + dy * dy

    def side(self, point: Point) -> float:
        return side_of_line(point, self.start, self.end)

    def is_on_reflective_side(self, point: Point) -> bool:
        return self.reflective and self.side(point) > 0.0

    def can_reflect_from(self, direction: Point) -> bool:
        """True when a ray travelling along ``direction`` strikes the reflective face."""

        return self.reflective and dot(direction, self.normal) < 0.0

    def reflect_direction(self, direction: Point) -> Point:
        return reflect_direction(direction, self.normal)


def mirror(surface_id: str, start: tuple, end: tuple) -> Surface:
    return Surface(surface_id, Point(float(start[0]), float(start[1])), Point(float(end[0]), float(end[1])), True)


def wall(surface_id: str, start: tuple, end: tuple) -> Surface:
    return Surface(surface_id, Point(float(start[0]), float(start[1])), Point(float(end[0]), float(end[1])), False)


def surfaces_by_id(surfaces: Iterable[Surface]) -> Dict[str, Surface]:
    out: Dict[str, Surface] = {}
    for s in surfaces:
        if s.surface_id in out:
            raise ValueError(f"duplicate surface id: {s.surface_id}")
        out[s.surface_id] = s
    return out
