"""Result types shared by the planned-path builder and the actual-path tracer."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from ricochet_core.geometry import Point, distance


class PathStatus(str, Enum):
    REACHED_CURSOR = "reached_cursor"
    BLOCKED = "blocked"
    MAX_REFLECTIONS = "max_reflections"
    MAX_DISTANCE = "max_distance"


@dataclass(frozen=True)
class HitInfo:
    """Surface contact recorded at a waypoint.

    reflected is False when the ray stopped there (wall, back face, bounce cap)
    or, for planned paths, when the point lies off the segment.
    """

    surface_id: str
    t: float
    s: float
    on_segment: bool
    reflected: bool


@dataclass(frozen=True)
class PathResult:
    waypoints: List[Point]
    hits: List[Optional[HitInfo]]
    reached_cursor: bool
    status: PathStatus
    initial_direction: Point
    forward_projection: List[Point] = field(default_factory=list)
    forward_hits: List[Optional[HitInfo]] = field(default_factory=list)
    blocked_by: Optional[str] = None

    def length(self) -> float:
        return sum(distance(a, b) for a, b in zip(self.waypoints[:-1], self.waypoints[1:]))

    def reflection_ids(self) -> Tuple[str, ...]:
        return tuple(h.surface_id for h in self.hits if h is not None and h.reflected)
