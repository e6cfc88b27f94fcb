"""First point where the planned and actual waypoint lists stop agreeing.

Waypoints are compared with exact equality; shared prefixes are bit-identical by
construction, so any difference is a genuine divergence.

Example:
    >>> from ricochet_core.geometry import Point
    >>> from ricochet_core.divergence import find_divergence
    >>> a, b, c = Point(0.0, 0.0), Point(1.0, 0.0), Point(2.0, 0.0)
    >>> find_divergence([a, b, c], [a, c]).segment_index
    0
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from ricochet_core.geometry import Point


@dataclass(frozen=True)
class DivergenceInfo:
    """is_aligned: both lists are equal.

    waypoint_index: first index whose waypoints differ (or where one list ends).
    segment_index: first divergent path segment; it starts at ``point``, the last
    shared waypoint.
    """

    is_aligned: bool
    segment_index: int = -1
    waypoint_index: int = -1
    point: Optional[Point] = None


ALIGNED = DivergenceInfo(True)


def find_divergence(planned: Sequence[Point], actual: Sequence[Point]) -> DivergenceInfo:
    n = min(len(planned), len(actual))
    for i in range(n):
        if planned[i] != actual[i]:
            if i == 0:
                return DivergenceInfo(False, -1, 0, None)
            return DivergenceInfo(False, i - 1, i, planned[i - 1])
    if len(planned) == len(actual):
        return ALIGNED
    if n == 0:
        return DivergenceInfo(False, -1, 0, None)
    return DivergenceInfo(False, n - 1, n, planned[n - 1])
