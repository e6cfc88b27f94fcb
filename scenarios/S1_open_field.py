from __future__ import annotations

from scenarios.common import make_inputs, run_inputs


def build_scene():
    return []


def build_sweep_params():
    return [
        {"case_id": "s1_direct", "player": [100.0, 100.0], "cursor": [500.0, 100.0], "planned": [], "expect_aligned": True, "expect_lit": True},
        {"case_id": "s1_diagonal", "player": [640.0, 360.0], "cursor": [1200.0, 700.0], "planned": [], "expect_aligned": True, "expect_lit": True},
    ]


def build_sweep_plan():
    return [640.0, 360.0], []


def run_case(params):
    inputs = make_inputs(params, build_scene())
    return inputs, run_inputs(inputs, params)
