"""2D geometry primitives shared by the trajectory and visibility pipelines.

All constructions use only ``+ - * /`` on the input coordinates so that the same
inputs always produce bit-identical outputs. Tolerances are never applied inside
the primitives; callers use the named constants below where they need one.

Example:
    >>> from ricochet_core.geometry import Point, Ray, Segment, intersect_ray_segment
    >>> hit = intersect_ray_segment(Ray(Point(0.0, 0.0), Point(2.0, 0.0)), Segment(Point(1.0, -1.0), Point(1.0, 1.0)))
    >>> hit.point, hit.t, hit.s, hit.on_segment
    (Point(x=1.0, y=0.0), 0.5, 0.5, True)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, NamedTuple, Optional, Tuple

# Segment parameter slack for "the hit lies on the segment" checks.
ON_SEGMENT_TOLERANCE = 1e-10
# Perpendicular distance (px) below which a point counts as lying on a ray.
COLLINEAR_TOLERANCE = 1e-9
# Outline vertices closer than this (px) are merged.
DEDUP_TOLERANCE = 1e-6
# Slack (px) for on-screen checks.
ON_SCREEN_TOLERANCE = 1e-9
# Angular offset (rad) of the two grazing rays cast beside every critical point.
GRAZING_ANGLE = 1e-7


class Point(NamedTuple):
    x: float
    y: float


class Segment(NamedTuple):
    start: Point
    end: Point


class RayHit(NamedTuple):
    """Intersection of a ray line with a segment line.

    t: parameter along the ray (0 at source, 1 at target).
    s: parameter along the segment (0 at start, 1 at end).
    """

    point: Point
    t: float
    s: float
    on_segment: bool


@dataclass(frozen=True)
class Ray:
    """Ray defined by two points; ``start_ratio`` marks where it physically begins."""

    source: Point
    target: Point
    start_ratio: float = 0.0

    @property
    def direction(self) -> Point:
        return sub(self.target, self.source)

    def point_at(self, t: float) -> Point:
        return Point(self.source.x + t * (self.target.x - self.source.x), self.source.y + t * (self.target.y - self.source.y))

    @property
    def effective_start(self) -> Point:
        if self.start_ratio == 0.0:
            return self.source
        return self.point_at(self.start_ratio)


def sub(a: Point, b: Point) -> Point:
    return Point(a.x - b.x, a.y - b.y)


def add(a: Point, b: Point) -> Point:
    return Point(a.x + b.x, a.y + b.y)


def scale(v: Point, k: float) -> Point:
    return Point(v.x * k, v.y * k)


def dot(a: Point, b: Point) -> float:
    return a.x * b.x + a.y * b.y


def cross2(a: Point, b: Point) -> float:
    """z-component of the cross product of two vectors."""

    return a.x * b.y - a.y * b.x


def cross(origin: Point, a: Point, b: Point) -> float:
    """Cross product of (a - origin) and (b - origin); > 0 when b is counter-clockwise of a."""

    return (a.x - origin.x) * (b.y - origin.y) - (a.y - origin.y) * (b.x - origin.x)


def side_of_line(point: Point, start: Point, end: Point) -> float:
    """Positive on the left of start->end, negative on the right, zero on the line."""

    return (end.x - start.x) * (point.y - start.y) - (end.y - start.y) * (point.x - start.x)


def length_squared(v: Point) -> float:
    return v.x * v.x + v.y * v.y


def distance(a: Point, b: Point) -> float:
    return length_squared(sub(a, b)) ** 0.5


def midpoint(a: Point, b: Point) -> Point:
    return Point((a.x + b.x) / 2.0, (a.y + b.y) / 2.0)


def normalize(v: Point) -> Point:
    n = length_squared(v) ** 0.5
    if n == 0:
        raise ValueError("Cannot normalize zero vector")
    return Point(v.x / n, v.y / n)


def is_within_segment(s: float, tol: float = ON_SEGMENT_TOLERANCE) -> bool:
    return -tol <= s <= 1.0 + tol


def line_intersection(p1: Point, p2: Point, p3: Point, p4: Point) -> Optional[Tuple[float, float]]:
    """Solve p1 + t (p2 - p1) == p3 + s (p4 - p3); None when the lines are parallel."""

    d1x = p2.x - p1.x
    d1y = p2.y - p1.y
    d2x = p4.x - p3.x
    d2y = p4.y - p3.y
    denom = d1x * d2y - d1y * d2x
    if denom == 0.0:
        return None
    dx = p3.x - p1.x
    dy = p3.y - p1.y
    t = (dx * d2y - dy * d2x) / denom
    s = (dx * d1y - dy * d1x) / denom
    return t, s


def intersect_ray_segment(ray: Ray, segment: Segment) -> Optional[RayHit]:
    """Intersect a ray with a segment line.

    Returns None for parallel lines or when the crossing lies before the ray's
    effective start. ``on_segment`` is the exact test 0 <= s <= 1.
    """

    solved = line_intersection(ray.source, ray.target, segment.start, segment.end)
    if solved is None:
        return None
    t, s = solved
    if t < ray.start_ratio:
        return None
    return RayHit(ray.point_at(t), t, s, 0.0 <= s <= 1.0)


def reflect_point(point: Point, segment: Segment) -> Point:
    """Mirror a point through the infinite line carrying ``segment``.

    Segment endpoints are fixed points of the reflection and are returned
    unchanged; a zero-length segment leaves every point where it is.
    """

    if point == segment.start or point == segment.end:
        return point
    dx = segment.end.x - segment.start.x
    dy = segment.end.y - segment.start.y
    len_sq = dx * dx + dy * dy
    if len_sq == 0.0:
        return point
    t = ((point.x - segment.start.x) * dx + (point.y - segment.start.y) * dy) / len_sq
    proj_x = segment.start.x + t * dx
    proj_y = segment.start.y + t * dy
    return Point(2.0 * proj_x - point.x, 2.0 * proj_y - point.y)


def reflect_direction(direction: Point, normal: Point) -> Point:
    """Specular reflection r = d - 2 (d.n)/(n.n) n; the normal need not be unit length."""

    nn = length_squared(normal)
    if nn == 0.0:
        return direction
    k = 2.0 * dot(direction, normal) / nn
    return Point(direction.x - k * normal.x, direction.y - k * normal.y)


def point_on_ray_parameter(ray: Ray, point: Point, tol: float = COLLINEAR_TOLERANCE) -> Optional[float]:
    """Parameter of ``point`` along the ray line, or None if it is off the line.

    The ray target itself maps to exactly 1.0.
    """

    if point == ray.target:
        return 1.0
    if point == ray.source:
        return 0.0
    d = ray.direction
    len_sq = length_squared(d)
    if len_sq == 0.0:
        return None
    w = sub(point, ray.source)
    c = cross2(d, w)
    if c * c > tol * tol * len_sq:
        return None
    return dot(w, d) / len_sq


@dataclass(frozen=True)
class ScreenBounds:
    """Axis-aligned playable rectangle."""

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    def __post_init__(self) -> None:
        if not (self.max_x > self.min_x and self.max_y > self.min_y):
            raise ValueError("ScreenBounds must have positive width and height")

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    def corners(self) -> List[Point]:
        """Corners in counter-clockwise order."""

        return [
            Point(self.min_x, self.min_y),
            Point(self.max_x, self.min_y),
            Point(self.max_x, self.max_y),
            Point(self.min_x, self.max_y),
        ]

    def edges(self) -> List[Segment]:
        c = self.corners()
        return [Segment(c[i], c[(i + 1) % 4]) for i in range(4)]

    def contains(self, point: Point, tol: float = ON_SCREEN_TOLERANCE) -> bool:
        return self.min_x - tol <= point.x <= self.max_x + tol and self.min_y - tol <= point.y <= self.max_y + tol

    def clamp(self, point: Point) -> Point:
        return Point(min(max(point.x, self.min_x), self.max_x), min(max(point.y, self.min_y), self.max_y))

    def exit_parameter(self, source: Point, target: Point, min_t: float = 0.0) -> Optional[float]:
        """Ray parameter where source->target leaves the rectangle beyond ``min_t``.

        None when no part of the ray past ``min_t`` lies inside the rectangle.
        """

        t_lo = min_t
        t_hi = float("inf")
        for s, e, lo, hi in ((source.x, target.x, self.min_x, self.max_x), (source.y, target.y, self.min_y, self.max_y)):
            d = e - s
            if d == 0.0:
                if s < lo or s > hi:
                    return None
                continue
            t1 = (lo - s) / d
            t2 = (hi - s) / d
            if t1 > t2:
                t1, t2 = t2, t1
            t_lo = max(t_lo, t1)
            t_hi = min(t_hi, t2)
        if t_hi <= t_lo:
            return None
        return t_hi
