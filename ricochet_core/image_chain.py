"""Player/cursor mirror images for an ordered list of surfaces.

player_images[0] is the player and player_images[i + 1] its reflection through
surface i; cursor_images[0] is the cursor and cursor_images[i + 1] its
reflection through surface N - 1 - i. Ray k runs from player_images[k] to
targets[k]; when no fallback was needed targets[k] == cursor_images[N - k]
exactly, because the targets are produced by reflecting forward through the
same cache that produced the cursor images backward.

Example:
    >>> from ricochet_core.geometry import Point
    >>> from ricochet_core.surfaces import mirror
    >>> from ricochet_core.image_chain import build_image_chain
    >>> chain = build_image_chain(Point(100.0, 300.0), Point(300.0, 300.0), [mirror("m", (200.0, 100.0), (200.0, 500.0))])
    >>> chain.player_image(1), chain.cursor_image(1)
    (Point(x=300.0, y=300.0), Point(x=100.0, y=300.0))
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from ricochet_core.geometry import Point, Ray, RayHit, is_within_segment, line_intersection, sub
from ricochet_core.reflection_cache import ReflectionCache
from ricochet_core.surfaces import Surface


@dataclass(frozen=True)
class ImageChain:
    player: Point
    cursor: Point
    surfaces: Tuple[Surface, ...]
    player_images: Tuple[Point, ...]
    cursor_images: Tuple[Point, ...]
    targets: Tuple[Point, ...]
    hits: Tuple[RayHit, ...]
    immediate_arrival: bool = False
    used_fallback: bool = False

    @property
    def depth(self) -> int:
        return len(self.surfaces)

    def player_image(self, depth: int) -> Point:
        return self._at(self.player_images, depth, "player image")

    def cursor_image(self, depth: int) -> Point:
        return self._at(self.cursor_images, depth, "cursor image")

    def ray(self, k: int) -> Ray:
        """Ray of leg k; leg 0 leaves the player, leg N ends at the cursor."""

        return Ray(self._at(self.player_images, k, "ray"), self.targets[k])

    def reflection_point(self, k: int) -> Point:
        return self._at(self.hits, k, "reflection point").point

    def is_reflection_on_segment(self, k: int) -> bool:
        return self._at(self.hits, k, "reflection point").on_segment

    @property
    def initial_direction(self) -> Point:
        return sub(self.targets[0], self.player)

    @staticmethod
    def _at(seq: Sequence, index: int, label: str):
        if index < 0 or index >= len(seq):
            raise IndexError(f"{label} index {index} out of range 0..{len(seq) - 1}")
        return seq[index]


def _initial_target(player: Point, cursor: Point, cursor_image: Point, surfaces: Sequence[Surface]) -> Tuple[Optional[Point], bool]:
    if cursor_image != player:
        return cursor_image, False
    if surfaces and surfaces[0].midpoint != player:
        return surfaces[0].midpoint, True
    if cursor != player:
        return cursor, True
    return None, True


def build_image_chain(
    player: Point,
    cursor: Point,
    surfaces: Sequence[Surface],
    cache: Optional[ReflectionCache] = None,
) -> ImageChain:
    """Compute images, ray targets and planned reflection points for ``surfaces``."""

    if cache is None:
        cache = ReflectionCache()
    surfaces = tuple(surfaces)
    n = len(surfaces)

    player_images: List[Point] = [player]
    for surface in surfaces:
        player_images.append(cache.reflect(player_images[-1], surface))

    cursor_images: List[Point] = [cursor]
    for surface in reversed(surfaces):
        cursor_images.append(cache.reflect(cursor_images[-1], surface))

    first, used_fallback = _initial_target(player, cursor, cursor_images[n], surfaces)
    if first is None:
        # player and cursor coincide and nothing usable remains to aim at
        return ImageChain(player, cursor, surfaces, tuple(player_images), tuple(cursor_images), (cursor,) * (n + 1), (), True, True)

    targets: List[Point] = [first]
    for surface in surfaces:
        targets.append(cache.reflect(targets[-1], surface))

    hits: List[RayHit] = []
    for k, surface in enumerate(surfaces):
        source = player_images[k]
        solved = line_intersection(source, targets[k], surface.start, surface.end)
        if solved is None:
            hits.append(RayHit(surface.midpoint, 0.0, 0.5, False))
            continue
        t, s = solved
        point = Ray(source, targets[k]).point_at(t)
        hits.append(RayHit(point, t, s, is_within_segment(s)))

    return ImageChain(
        player=player,
        cursor=cursor,
        surfaces=surfaces,
        player_images=tuple(player_images),
        cursor_images=tuple(cursor_images),
        targets=tuple(targets),
        hits=tuple(hits),
        immediate_arrival=False,
        used_fallback=used_fallback,
    )
