from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TraceConfig:
    """Limits shared by path tracing, bypass evaluation and visibility propagation.

    max_reflections: bounce cap for the tracer, the forward projection and the plan.
    max_distance: length of the final leg when a ray escapes every surface.
    """

    max_reflections: int = 10
    max_distance: float = 10000.0

    def __post_init__(self) -> None:
        if self.max_reflections < 0:
            raise ValueError("max_reflections must be >= 0")
        if self.max_distance <= 0:
            raise ValueError("max_distance must be > 0")
