"""Short mirror: the planned reflection point lands on its line but off the segment."""

from __future__ import annotations

from ricochet_core.surfaces import mirror
from scenarios.common import make_inputs, run_inputs


def build_scene():
    return [mirror("m1", (300.0, 100.0), (300.0, 200.0))]


def build_sweep_params():
    return [
        {
            "case_id": "s4_off_segment",
            "player": [100.0, 300.0],
            "cursor": [100.0, 500.0],
            "planned": ["m1"],
            "expect_aligned": False,
            "expect_segment": 0,
            "expect_status": "max_distance",
            "expect_lit": False,
        },
        {
            "case_id": "s4_on_segment",
            "player": [100.0, 300.0],
            "cursor": [100.0, 20.0],
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
