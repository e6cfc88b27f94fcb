"""Mirror at x=300 with a wall in the player's line of fire."""

from __future__ import annotations

from ricochet_core.surfaces import mirror, wall
from scenarios.common import make_inputs, run_inputs


def build_scene():
    return [
        mirror("m1", (300.0, 100.0), (300.0, 500.0)),
        wall("w1", (200.0, 250.0), (200.0, 450.0)),
    ]


def build_sweep_params():
    return [
        {
            "case_id": "s3_blocked",
            "player": [100.0, 300.0],
            "cursor": [100.0, 500.0],
            "planned": ["m1"],
            "expect_aligned": False,
            "expect_segment": 0,
            "expect_status": "blocked",
            "expect_lit": False,
        },
        {
            "case_id": "s3_clear",
            "player": [100.0, 300.0],
            "cursor": [100.0, 50.0],
            "planned": ["m1"],
            "expect_aligned": True,
            "expect_lit": True,
        },
    ]


def build_sweep_plan():
    return [100.0, 300.0], ["m1"]


def run_case(params):
    inputs = make_inputs(params, build_scene())
    return inputs, run_inputs(inputs, params)
