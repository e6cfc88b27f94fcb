"""Drop planned surfaces that cannot take part in a physically valid reflection.

Example:
    >>> from ricochet_core.geometry import Point
    >>> from ricochet_core.surfaces import mirror
    >>> from ricochet_core.bypass import evaluate_bypass
    >>> m = mirror("m", (200.0, 500.0), (200.0, 100.0))  # reflective side faces +x
    >>> result = evaluate_bypass(Point(100.0, 300.0), Point(150.0, 300.0), [m])
    >>> [(b.surface.surface_id, b.reason.value) for b in result.bypassed]
    [('m', 'player_wrong_side')]
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from ricochet_core.config import TraceConfig
from ricochet_core.geometry import Point
from ricochet_core.reflection_cache import ReflectionCache
from ricochet_core.surfaces import Surface

logger = logging.getLogger(__name__)


class BypassReason(str, Enum):
    NON_REFLECTIVE = "non_reflective"
    PLAYER_WRONG_SIDE = "player_wrong_side"
    CURSOR_WRONG_SIDE = "cursor_wrong_side"
    CHAIN_BREAK = "chain_break"
    EXCEEDS_MAX_REFLECTIONS = "exceeds_max_reflections"


@dataclass(frozen=True)
class BypassedSurface:
    surface: Surface
    reason: BypassReason
    original_index: int


@dataclass(frozen=True)
class BypassResult:
    active: Tuple[Surface, ...]
    active_indices: Tuple[int, ...]
    bypassed: Tuple[BypassedSurface, ...]

    @property
    def is_empty(self) -> bool:
        """True when nothing was bypassed."""

        return not self.bypassed

    def bypassed_ids(self) -> List[str]:
        return [b.surface.surface_id for b in self.bypassed]


def evaluate_bypass(
    player: Point,
    cursor: Point,
    planned: Sequence[Surface],
    config: Optional[TraceConfig] = None,
    cache: Optional[ReflectionCache] = None,
) -> BypassResult:
    """Partition ``planned`` into active and bypassed surfaces, keeping plan order."""

    cfg = config or TraceConfig()
    if cache is None:
        cache = ReflectionCache()
    active: List[Tuple[int, Surface]] = []
    bypassed: List[BypassedSurface] = []
    image = player

    for i, surface in enumerate(planned):
        reason: Optional[BypassReason] = None
        if not surface.reflective:
            reason = BypassReason.NON_REFLECTIVE
        elif len(active) >= cfg.max_reflections:
            reason = BypassReason.EXCEEDS_MAX_REFLECTIONS
        elif not surface.is_on_reflective_side(image):
            reason = BypassReason.CHAIN_BREAK if active else BypassReason.PLAYER_WRONG_SIDE
        if reason is not None:
            logger.debug("bypass %s at plan index %d: %s", surface.surface_id, i, reason.value)
            bypassed.append(BypassedSurface(surface, reason, i))
            continue
        active.append((i, surface))
        image = cache.reflect(image, surface)

    while active and not active[-1][1].is_on_reflective_side(cursor):
        i, surface = active.pop()
        logger.debug("bypass %s at plan index %d: %s", surface.surface_id, i, BypassReason.CURSOR_WRONG_SIDE.value)
        bypassed.append(BypassedSurface(surface, BypassReason.CURSOR_WRONG_SIDE, i))

    bypassed.sort(key=lambda b: b.original_index)
    return BypassResult(
        active=tuple(s for _, s in active),
        active_indices=tuple(i for i, _ in active),
        bypassed=tuple(bypassed),
    )
