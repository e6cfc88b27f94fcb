"""Polygon clipping (Sutherland–Hodgman) and polygon measures.

Polygons are lists of :class:`Point` in counter-clockwise order; a clip keeps
the part on the left of each directed clip edge.

Example:
    >>> from ricochet_core.geometry import Point
    >>> from visibility.clipping import clip_by_edge, polygon_area
    >>> square = [Point(0.0, 0.0), Point(2.0, 0.0), Point(2.0, 2.0), Point(0.0, 2.0)]
    >>> half = clip_by_edge(square, Point(1.0, 0.0), Point(1.0, 2.0))
    >>> float(polygon_area(half))
    2.0
"""

from __future__ import annotations

from typing import List, Sequence

import numpy as np

from ricochet_core.geometry import Point, Ray, ScreenBounds, Segment, cross, line_intersection, side_of_line


def _edge_crossing(p: Point, q: Point, a: Point, b: Point) -> Point:
    solved = line_intersection(p, q, a, b)
    if solved is None:
        return q
    t = min(max(solved[0], 0.0), 1.0)
    return Ray(p, q).point_at(t)


def _drop_repeats(points: List[Point]) -> List[Point]:
    out: List[Point] = []
    for p in points:
        if not out or out[-1] != p:
            out.append(p)
    while len(out) > 1 and out[0] == out[-1]:
        out.pop()
    return out


def clip_by_edge(polygon: Sequence[Point], a: Point, b: Point) -> List[Point]:
    out: List[Point] = []
    n = len(polygon)
    for i in range(n):
        cur = polygon[i]
        prev = polygon[i - 1]
        cur_in = side_of_line(cur, a, b) >= 0.0
        prev_in = side_of_line(prev, a, b) >= 0.0
        if cur_in:
            if not prev_in:
                out.append(_edge_crossing(prev, cur, a, b))
            out.append(cur)
        elif prev_in:
            out.append(_edge_crossing(prev, cur, a, b))
    return _drop_repeats(out)


def clip_by_convex(polygon: Sequence[Point], convex: Sequence[Point]) -> List[Point]:
    """Clip by a counter-clockwise convex polygon."""

    out = list(polygon)
    m = len(convex)
    for i in range(m):
        if len(out) < 3:
            return []
        out = clip_by_edge(out, convex[i], convex[(i + 1) % m])
    return out if len(out) >= 3 else []


def clip_to_screen(polygon: Sequence[Point], bounds: ScreenBounds) -> List[Point]:
    return clip_by_convex(polygon, bounds.corners())


def window_triangle(origin: Point, segment: Segment) -> List[Point]:
    if cross(origin, segment.start, segment.end) >= 0.0:
        return [origin, segment.start, segment.end]
    return [origin, segment.end, segment.start]


def crop_by_window(polygon: Sequence[Point], origin: Point, segment: Segment) -> List[Point]:
    """Keep the part of ``polygon`` inside the triangle (origin, segment endpoints)."""

    return clip_by_convex(polygon, window_triangle(origin, segment))


def polygon_area(polygon: Sequence[Point]) -> float:
    """Signed shoelace area; positive for counter-clockwise polygons."""

    if len(polygon) < 3:
        return 0.0
    pts = np.asarray(polygon, dtype=float)
    x, y = pts[:, 0], pts[:, 1]
    return 0.5 * float(np.dot(x, np.roll(y, -1)) - np.dot(np.roll(x, -1), y))


def contains_point(polygon: Sequence[Point], point: Point) -> bool:
    """Even-odd rule."""

    if len(polygon) < 3:
        return False
    pts = np.asarray(polygon, dtype=float)
    x, y = pts[:, 0], pts[:, 1]
    xn, yn = np.roll(x, -1), np.roll(y, -1)
    straddles = (y > point.y) != (yn > point.y)
    with np.errstate(divide="ignore", invalid="ignore"):
        x_cross = x + (point.y - y) * (xn - x) / (yn - y)
    return bool(np.count_nonzero(straddles & (point.x < x_cross)) % 2 == 1)


def _segments_cross(p1: Point, p2: Point, q1: Point, q2: Point) -> bool:
    d1 = cross(q1, q2, p1)
    d2 = cross(q1, q2, p2)
    d3 = cross(p1, p2, q1)
    d4 = cross(p1, p2, q2)
    return ((d1 > 0) != (d2 > 0)) and ((d3 > 0) != (d4 > 0)) and d1 != 0 and d2 != 0 and d3 != 0 and d4 != 0


def is_simple(polygon: Sequence[Point]) -> bool:
    """True when no two non-adjacent edges properly cross and no vertex repeats."""

    n = len(polygon)
    if n < 3:
        return False
    if len(set(polygon)) != n:
        return False
    edges = [(polygon[i], polygon[(i + 1) % n]) for i in range(n)]
    for i in range(n):
        for j in range(i + 2, n):
            if i == 0 and j == n - 1:
                continue
            if _segments_cross(edges[i][0], edges[i][1], edges[j][0], edges[j][1]):
                return False
    return True
