"""Memoised point reflections shared by one evaluation.

Every computed reflection is stored in both directions, so reflecting an image
back through the same surface returns the original point exactly rather than a
recomputed value that may differ in the last bit.

Example:
    >>> from ricochet_core.geometry import Point
    >>> from ricochet_core.surfaces import mirror
    >>> from ricochet_core.reflection_cache import ReflectionCache
    >>> cache = ReflectionCache()
    >>> m = mirror("m", (0.3, 0.0), (0.7, 1.1))
    >>> p = Point(0.1, 0.7)
    >>> cache.reflect(cache.reflect(p, m), m) == p
    True
"""

from __future__ import annotations

import logging
from typing import Dict, Optional, Tuple

from ricochet_core.geometry import Point, reflect_point
from ricochet_core.surfaces import Surface

logger = logging.getLogger(__name__)


class ReflectionCache:
    def __init__(self) -> None:
        self._table: Dict[Tuple[Point, str], Point] = {}
        self.hits = 0
        self.misses = 0

    def reflect(self, point: Point, surface: Surface) -> Point:
        key = (point, surface.surface_id)
        cached = self._table.get(key)
        if cached is not None:
            self.hits += 1
            return cached
        self.misses += 1
        image = reflect_point(point, surface.segment)
        self._table[key] = image
        # the reverse entry keeps reflect(reflect(p)) == p exact
        self._table.setdefault((image, surface.surface_id), point)
        return image

    def get(self, point: Point, surface: Surface) -> Optional[Point]:
        return self._table.get((point, surface.surface_id))

    def __contains__(self, key: Tuple[Point, Surface]) -> bool:
        point, surface = key
        return (point, surface.surface_id) in self._table

    def __len__(self) -> int:
        return len(self._table)

    def clear(self) -> None:
        self._table.clear()
        self.hits = 0
        self.misses = 0

    def stats(self) -> Dict[str, int]:
        return {"hits": self.hits, "misses": self.misses, "size": len(self._table)}
