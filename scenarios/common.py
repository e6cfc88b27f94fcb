"""Common scenario helpers."""

from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from ricochet_core.config import TraceConfig
from ricochet_core.engine import PlanEvaluation
from ricochet_core.geometry import Point, ScreenBounds
from ricochet_core.surfaces import Surface
from ricochet_io.hdf5_io import SceneInputs

SCREEN = ScreenBounds(0.0, 0.0, 1280.0, 720.0)


def as_point(xy: Sequence[float]) -> Point:
    return Point(float(xy[0]), float(xy[1]))


def case_config(params: Mapping[str, Any]) -> TraceConfig:
    if "max_reflections" in params:
        return TraceConfig(max_reflections=int(params["max_reflections"]))
    return TraceConfig()


def make_inputs(params: Mapping[str, Any], surfaces: Sequence[Surface]) -> SceneInputs:
    """Inputs for one case; the trace limits travel with them into the fixture."""

    return SceneInputs(
        player=as_point(params["player"]),
        cursor=as_point(params["cursor"]),
        bounds=SCREEN,
        surfaces=list(surfaces),
        planned_ids=list(params.get("planned", [])),
        config=case_config(params),
    )


def run_inputs(inputs: SceneInputs, params: Optional[Mapping[str, Any]] = None) -> PlanEvaluation:
    if params is None:
        return inputs.evaluate()
    return inputs.evaluate(case_config(params))
