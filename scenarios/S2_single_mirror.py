"""One vertical mirror at x=200 whose reflective side faces the player (-x)."""

from __future__ import annotations

from ricochet_core.surfaces import mirror
from scenarios.common import make_inputs, run_inputs


def build_scene():
    return [mirror("m1", (200.0, 100.0), (200.0, 500.0))]


def build_sweep_params():
    return [
        {
            "case_id": "s2_bounce",
            "player": [100.0, 300.0],
            "cursor": [100.0, 500.0],
            "planned": ["m1"],
            "expect_aligned": True,
            "expect_lit": True,
            "expect_waypoints": [[100.0, 300.0], [200.0, 400.0], [100.0, 500.0]],
        },
        {
            "case_id": "s2_cursor_behind",
            "player": [100.0, 300.0],
            "cursor": [300.0, 300.0],
            "planned": ["m1"],
            "expect_bypassed": {"m1": "cursor_wrong_side"},
            "expect_lit": False,
        },
    ]


def build_sweep_plan():
    return [100.0, 300.0], ["m1"]


def run_case(params):
    inputs = make_inputs(params, build_scene())
    return inputs, run_inputs(inputs, params)
