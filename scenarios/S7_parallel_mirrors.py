"""Two facing mirrors; the plan bounces right then left."""

from __future__ import annotations

from ricochet_core.surfaces import mirror
from scenarios.common import make_inputs, run_inputs


def build_scene():
    return [
        mirror("left", (200.0, 620.0), (200.0, 100.0)),
        mirror("right", (1000.0, 100.0), (1000.0, 620.0)),
    ]


def build_sweep_params():
    return [
        {"case_id": "s7_two_bounce", "player": [600.0, 360.0], "cursor": [700.0, 300.0], "planned": ["right", "left"], "expect_aligned": True, "expect_lit": True},
        {
            "case_id": "s7_bounce_cap",
            "player": [600.0, 360.0],
            "cursor": [700.0, 300.0],
            "planned": ["right", "left"],
            "max_reflections": 1,
            "expect_bypassed": {"left": "exceeds_max_reflections"},
            "expect_lit": False,
        },
    ]


def build_sweep_plan():
    return [600.0, 360.0], ["right", "left"]


def run_case(params):
    inputs = make_inputs(params, build_scene())
    return inputs, run_inputs(inputs, params)
