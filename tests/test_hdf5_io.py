import os
import tempfile

import numpy as np

from ricochet_core.config import TraceConfig
from ricochet_core.geometry import Point, ScreenBounds
from ricochet_core.surfaces import mirror, wall
from ricochet_io.hdf5_io import CaseData, SceneInputs, load_fixture, record_outputs, replay_fixture, save_fixture, self_test_roundtrip


def _inputs(cursor=Point(100.0, 500.0)) -> SceneInputs:
    return SceneInputs(
        player=Point(100.0, 300.0),
        cursor=cursor,
        bounds=ScreenBounds(0.0, 0.0, 1280.0, 720.0),
        surfaces=[mirror("m1", (200.0, 100.0), (200.0, 500.0)), wall("w1", (50.0, 600.0), (150.0, 650.0))],
        planned_ids=["m1"],
    )


def test_hdf5_schema_roundtrip():
    inputs = _inputs()
    outputs = record_outputs(inputs.evaluate())
    payload = {"S2": {"case_0": CaseData(params={"case_id": "case_0", "planned": ["m1"]}, inputs=inputs, outputs=outputs)}}
    with tempfile.TemporaryDirectory() as td:
        fp = os.path.join(td, "fixtures.h5")
        save_fixture(fp, payload)
        loaded, meta = load_fixture(fp)

    assert meta.schema_version == 1
    case = loaded["S2"]["case_0"]
    assert case.params["planned"] == ["m1"]
    assert case.inputs.surfaces == inputs.surfaces
    assert case.inputs.surfaces[1].reflective is False
    assert np.array_equal(case.outputs.planned_waypoints, [[100.0, 300.0], [200.0, 400.0], [100.0, 500.0]])
    assert case.outputs.is_lit
    assert len(case.outputs.region_polygons()) == len(outputs.region_polygons())


def test_replay_detects_changed_outputs():
    recorded = record_outputs(_inputs(Point(100.0, 500.0)).evaluate())
    moved = _inputs(Point(120.0, 480.0))
    with tempfile.TemporaryDirectory() as td:
        fp = os.path.join(td, "tampered.h5")
        save_fixture(fp, {"S2": {"c": CaseData(params={}, inputs=moved, outputs=recorded)}})
        report = replay_fixture(fp)
    assert "actual waypoints differ" in report["S2/c"]


def test_self_test_roundtrip_function():
    with tempfile.TemporaryDirectory() as td:
        fp = os.path.join(td, "selftest.h5")
        assert self_test_roundtrip(fp)


def test_replay_uses_recorded_reflection_cap():
    capped = _inputs()
    capped.config = TraceConfig(max_reflections=0)
    recorded = record_outputs(capped.evaluate())
    assert not recorded.is_lit
    with tempfile.TemporaryDirectory() as td:
        fp = os.path.join(td, "capped.h5")
        save_fixture(fp, {"S2": {"cap": CaseData(params={"max_reflections": 0}, inputs=capped, outputs=recorded)}})
        loaded, _ = load_fixture(fp)
        report = replay_fixture(fp)
        overridden = replay_fixture(fp, TraceConfig())
    assert loaded["S2"]["cap"].inputs.config == TraceConfig(max_reflections=0)
    assert report["S2/cap"] == []
    assert overridden["S2/cap"] != []
