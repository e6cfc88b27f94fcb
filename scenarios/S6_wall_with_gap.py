"""Mirror on the right, a wall with a gap between it and the player."""

from __future__ import annotations

from ricochet_core.surfaces import mirror, wall
from scenarios.common import make_inputs, run_inputs


def build_scene():
    return [
        mirror("m1", (900.0, 100.0), (900.0, 620.0)),
        wall("w_top", (600.0, 40.0), (600.0, 320.0)),
        wall("w_bottom", (600.0, 400.0), (600.0, 680.0)),
    ]


def build_sweep_params():
    return [
        {"case_id": "s6_through_gap", "player": [200.0, 360.0], "cursor": [300.0, 380.0], "planned": ["m1"], "expect_aligned": True, "expect_lit": True},
        {
            "case_id": "s6_shadowed",
            "player": [200.0, 360.0],
            "cursor": [300.0, 600.0],
            "planned": ["m1"],
            "expect_aligned": False,
            "expect_status": "blocked",
            "expect_lit": False,
        },
    ]


def build_sweep_plan():
    return [200.0, 360.0], ["m1"]


def run_case(params):
    inputs = make_inputs(params, build_scene())
    return inputs, run_inputs(inputs, params)
