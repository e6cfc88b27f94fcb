"""HDF5 regression fixtures: scene inputs plus the outputs they produced.

Replaying a fixture re-evaluates every case and requires bit-identical
waypoints, divergence and bypass results.

Structure:
    /
      meta                          (attrs: created_at, schema_version)
      scenarios/{scenario_id}/cases/{case_id}/
          params_json               (scalar utf-8 JSON)
          inputs/
              player                (2,)
              cursor                (2,)
              bounds                (4,) min_x, min_y, max_x, max_y
              surface_ids           (S,) utf-8
              surface_segments      (S,2,2)
              surface_reflective    (S,) bool
              planned_ids           (N,) utf-8
              (attrs: max_reflections, max_distance)
          outputs/
              planned_waypoints     (P,2)
              actual_waypoints      (A,2)
              actual_status         scalar utf-8
              divergence            (3,) int64: aligned flag, segment index, waypoint index
              bypassed_indices      (B,) int64
              bypassed_reasons      (B,) utf-8
              region_vertices       (V,2)
              region_offsets        (R+1,) int64
              is_lit                scalar bool
              lit_matches_validity          scalar bool

Example:
    >>> from ricochet_core.geometry import Point, ScreenBounds
    >>> from ricochet_core.surfaces import mirror
    >>> m = mirror("m", (400.0, 600.0), (400.0, 100.0))
    >>> inputs = SceneInputs(Point(100.0, 360.0), Point(200.0, 300.0), ScreenBounds(0.0, 0.0, 1280.0, 720.0), [m], ["m"])
    >>> save_fixture("/tmp/ricochet_example.h5", {"S2": {"case0": CaseData({"note": "doc"}, inputs)}})
    >>> loaded, meta = load_fixture("/tmp/ricochet_example.h5")
    >>> list(loaded["S2"].keys()), loaded["S2"]["case0"].inputs.planned_ids
    (['case0'], ['m'])
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
import json
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import h5py
import numpy as np

from ricochet_core.config import TraceConfig
from ricochet_core.engine import PlanEvaluation, evaluate_plan
from ricochet_core.geometry import Point, ScreenBounds
from ricochet_core.surfaces import Surface, surfaces_by_id

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1


@dataclass
class SceneInputs:
    player: Point
    cursor: Point
    bounds: ScreenBounds
    surfaces: List[Surface]
    planned_ids: List[str]
    config: TraceConfig = field(default_factory=TraceConfig)

    def planned(self) -> List[Surface]:
        by_id = surfaces_by_id(self.surfaces)
        try:
            return [by_id[i] for i in self.planned_ids]
        except KeyError as exc:
            raise ValueError(f"planned surface {exc.args[0]!r} is not in the scene") from exc

    def evaluate(self, config: Optional[TraceConfig] = None) -> PlanEvaluation:
        """Evaluate with ``config``, or with the recorded limits when it is None."""

        return evaluate_plan(self.player, self.cursor, self.planned(), self.surfaces, self.bounds, config or self.config)


@dataclass
class RecordedOutputs:
    planned_waypoints: np.ndarray
    actual_waypoints: np.ndarray
    actual_status: str
    divergence: np.ndarray
    bypassed_indices: np.ndarray
    bypassed_reasons: List[str]
    region_vertices: np.ndarray
    region_offsets: np.ndarray
    is_lit: bool
    lit_matches_validity: bool

    def region_polygons(self) -> List[np.ndarray]:
        return [self.region_vertices[a:b] for a, b in zip(self.region_offsets[:-1], self.region_offsets[1:])]


@dataclass
class CaseData:
    params: Dict[str, Any]
    inputs: SceneInputs
    outputs: Optional[RecordedOutputs] = None


@dataclass
class FixtureMeta:
    created_at: str
    schema_version: int


def _json_default(obj: Any) -> Any:
    if isinstance(obj, (np.integer, np.floating)):
        return obj.item()
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    raise TypeError(f"Unsupported JSON type: {type(obj)}")


def _points(points: Sequence[Point]) -> np.ndarray:
    return np.asarray(points, dtype=np.float64).reshape(len(points), 2)


def _as_str(value: Any) -> str:
    return value.decode() if isinstance(value, bytes) else str(value)


def record_outputs(ev: PlanEvaluation) -> RecordedOutputs:
    polygons = ev.visibility.final_region.polygons
    offsets = np.cumsum([0] + [len(p) for p in polygons]).astype(np.int64)
    vertices = _points([v for p in polygons for v in p])
    div = ev.divergence
    return RecordedOutputs(
        planned_waypoints=_points(ev.planned_path.waypoints),
        actual_waypoints=_points(ev.actual_path.waypoints),
        actual_status=ev.actual_path.status.value,
        divergence=np.array([int(div.is_aligned), div.segment_index, div.waypoint_index], dtype=np.int64),
        bypassed_indices=np.array([b.original_index for b in ev.bypass.bypassed], dtype=np.int64),
        bypassed_reasons=[b.reason.value for b in ev.bypass.bypassed],
        region_vertices=vertices,
        region_offsets=offsets,
        is_lit=bool(ev.is_cursor_lit),
        lit_matches_validity=bool(ev.lit_matches_validity),
    )


def _write_inputs(g: h5py.Group, inputs: SceneInputs) -> None:
    dt = h5py.string_dtype(encoding="utf-8")
    g.create_dataset("player", data=np.array(inputs.player, dtype=np.float64))
    g.create_dataset("cursor", data=np.array(inputs.cursor, dtype=np.float64))
    b = inputs.bounds
    g.create_dataset("bounds", data=np.array([b.min_x, b.min_y, b.max_x, b.max_y], dtype=np.float64))
    g.create_dataset("surface_ids", data=np.asarray([s.surface_id for s in inputs.surfaces], dtype=dt))
    segs = np.array([[s.start, s.end] for s in inputs.surfaces], dtype=np.float64).reshape(len(inputs.surfaces), 2, 2)
    g.create_dataset("surface_segments", data=segs)
    g.create_dataset("surface_reflective", data=np.asarray([s.reflective for s in inputs.surfaces], dtype=bool))
    g.create_dataset("planned_ids", data=np.asarray(inputs.planned_ids, dtype=dt))
    g.attrs["max_reflections"] = inputs.config.max_reflections
    g.attrs["max_distance"] = inputs.config.max_distance


def _write_outputs(g: h5py.Group, out: RecordedOutputs) -> None:
    dt = h5py.string_dtype(encoding="utf-8")
    g.create_dataset("planned_waypoints", data=out.planned_waypoints)
    g.create_dataset("actual_waypoints", data=out.actual_waypoints)
    g.create_dataset("actual_status", data=out.actual_status, dtype=dt)
    g.create_dataset("divergence", data=out.divergence)
    g.create_dataset("bypassed_indices", data=out.bypassed_indices)
    g.create_dataset("bypassed_reasons", data=np.asarray(out.bypassed_reasons, dtype=dt))
    g.create_dataset("region_vertices", data=out.region_vertices)
    g.create_dataset("region_offsets", data=out.region_offsets)
    g.create_dataset("is_lit", data=out.is_lit)
    g.create_dataset("lit_matches_validity", data=out.lit_matches_validity)


def save_fixture(filepath: str, scenarios: Mapping[str, Mapping[str, CaseData]]) -> None:
    """Save scene inputs and recorded outputs with a fixed schema contract."""

    with h5py.File(filepath, "w") as h5:
        meta = h5.create_group("meta")
        meta.attrs["created_at"] = datetime.now(timezone.utc).isoformat()
        meta.attrs["schema_version"] = SCHEMA_VERSION
        g_scenarios = h5.create_group("scenarios")
        for scenario_id, cases in scenarios.items():
            g_cases = g_scenarios.create_group(str(scenario_id)).create_group("cases")
            for case_id, case in cases.items():
                g_case = g_cases.create_group(str(case_id))
                g_case.create_dataset("params_json", data=json.dumps(case.params, default=_json_default))
                _write_inputs(g_case.create_group("inputs"), case.inputs)
                if case.outputs is not None:
                    _write_outputs(g_case.create_group("outputs"), case.outputs)
    logger.debug("wrote fixture %s (%d scenarios)", filepath, len(scenarios))


def _read_inputs(g: h5py.Group) -> SceneInputs:
    ids = [_as_str(s) for s in g["surface_ids"][()]]
    segs = np.asarray(g["surface_segments"][()], dtype=np.float64)
    refl = np.asarray(g["surface_reflective"][()], dtype=bool)
    surfaces = [
        Surface(sid, Point(float(seg[0, 0]), float(seg[0, 1])), Point(float(seg[1, 0]), float(seg[1, 1])), bool(r))
        for sid, seg, r in zip(ids, segs, refl)
    ]
    player = np.asarray(g["player"][()], dtype=np.float64)
    cursor = np.asarray(g["cursor"][()], dtype=np.float64)
    b = np.asarray(g["bounds"][()], dtype=np.float64)
    return SceneInputs(
        player=Point(float(player[0]), float(player[1])),
        cursor=Point(float(cursor[0]), float(cursor[1])),
        bounds=ScreenBounds(float(b[0]), float(b[1]), float(b[2]), float(b[3])),
        surfaces=surfaces,
        planned_ids=[_as_str(s) for s in g["planned_ids"][()]],
        config=TraceConfig(
            max_reflections=int(g.attrs.get("max_reflections", TraceConfig.max_reflections)),
            max_distance=float(g.attrs.get("max_distance", TraceConfig.max_distance)),
        ),
    )


def _read_outputs(g: h5py.Group) -> RecordedOutputs:
    return RecordedOutputs(
        planned_waypoints=np.asarray(g["planned_waypoints"][()], dtype=np.float64).reshape(-1, 2),
        actual_waypoints=np.asarray(g["actual_waypoints"][()], dtype=np.float64).reshape(-1, 2),
        actual_status=_as_str(g["actual_status"][()]),
        divergence=np.asarray(g["divergence"][()], dtype=np.int64),
        bypassed_indices=np.asarray(g["bypassed_indices"][()], dtype=np.int64),
        bypassed_reasons=[_as_str(s) for s in g["bypassed_reasons"][()]],
        region_vertices=np.asarray(g["region_vertices"][()], dtype=np.float64).reshape(-1, 2),
        region_offsets=np.asarray(g["region_offsets"][()], dtype=np.int64),
        is_lit=bool(g["is_lit"][()]),
        lit_matches_validity=bool(g["lit_matches_validity"][()]),
    )


def load_fixture(filepath: str) -> Tuple[Dict[str, Dict[str, CaseData]], FixtureMeta]:
    scenarios: Dict[str, Dict[str, CaseData]] = {}
    with h5py.File(filepath, "r") as h5:
        version = int(h5["meta"].attrs.get("schema_version", 0))
        if version != SCHEMA_VERSION:
            raise ValueError(f"unsupported fixture schema version {version} (expected {SCHEMA_VERSION})")
        meta = FixtureMeta(created_at=_as_str(h5["meta"].attrs.get("created_at", "")), schema_version=version)
        for scenario_id, g_scenario in h5["scenarios"].items():
            scenarios[scenario_id] = {}
            for case_id, g_case in g_scenario["cases"].items():
                params = json.loads(_as_str(g_case["params_json"][()]))
                inputs = _read_inputs(g_case["inputs"])
                outputs = _read_outputs(g_case["outputs"]) if "outputs" in g_case else None
                scenarios[scenario_id][case_id] = CaseData(params=params, inputs=inputs, outputs=outputs)
    return scenarios, meta


def compare_outputs(expected: RecordedOutputs, actual: RecordedOutputs) -> List[str]:
    """Differences between two recordings; waypoints must match bit for bit."""

    problems: List[str] = []
    if not np.array_equal(expected.planned_waypoints, actual.planned_waypoints):
        problems.append("planned waypoints differ")
    if not np.array_equal(expected.actual_waypoints, actual.actual_waypoints):
        problems.append("actual waypoints differ")
    if expected.actual_status != actual.actual_status:
        problems.append(f"status {expected.actual_status} -> {actual.actual_status}")
    if not np.array_equal(expected.divergence, actual.divergence):
        problems.append(f"divergence {expected.divergence.tolist()} -> {actual.divergence.tolist()}")
    if not np.array_equal(expected.bypassed_indices, actual.bypassed_indices) or expected.bypassed_reasons != actual.bypassed_reasons:
        problems.append("bypass result differs")
    if not (np.array_equal(expected.region_offsets, actual.region_offsets) and np.array_equal(expected.region_vertices, actual.region_vertices)):
        problems.append("lit region differs")
    if expected.is_lit != actual.is_lit:
        problems.append(f"is_lit {expected.is_lit} -> {actual.is_lit}")
    return problems


def replay_fixture(filepath: str, config: Optional[TraceConfig] = None) -> Dict[str, List[str]]:
    """Re-evaluate every recorded case; returns problems keyed by 'scenario/case'.

    Each case runs under its recorded trace limits unless ``config`` overrides them.
    """

    scenarios, _ = load_fixture(filepath)
    report: Dict[str, List[str]] = {}
    for scenario_id, cases in scenarios.items():
        for case_id, case in cases.items():
            if case.outputs is None:
                continue
            report[f"{scenario_id}/{case_id}"] = compare_outputs(case.outputs, record_outputs(case.inputs.evaluate(config)))
    return report


def self_test_roundtrip(filepath: str) -> bool:
    """Write->read->replay self-test on a one-mirror scene."""

    inputs = SceneInputs(
        player=Point(150.0, 360.0),
        cursor=Point(260.0, 420.0),
        bounds=ScreenBounds(0.0, 0.0, 1280.0, 720.0),
        surfaces=[
            Surface("mirror", Point(600.0, 600.0), Point(600.0, 120.0), True),
            Surface("wall", Point(300.0, 80.0), Point(300.0, 160.0), False),
        ],
        planned_ids=["mirror"],
    )
    recorded = record_outputs(inputs.evaluate())
    save_fixture(filepath, {"selftest": {"case0": CaseData(params={"seed": 0}, inputs=inputs, outputs=recorded)}})
    loaded, _ = load_fixture(filepath)
    case = loaded["selftest"]["case0"]
    same_inputs = case.inputs.surfaces == inputs.surfaces and case.inputs.player == inputs.player and case.inputs.cursor == inputs.cursor
    problems = replay_fixture(filepath)
    return bool(same_inputs and case.outputs is not None and not compare_outputs(recorded, case.outputs) and not any(problems.values()))
