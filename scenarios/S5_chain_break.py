"""Two mirrors facing the player; the first image lands behind the second mirror."""

from __future__ import annotations

from ricochet_core.surfaces import mirror
from scenarios.common import make_inputs, run_inputs


def build_scene():
    return [
        mirror("m1", (300.0, 100.0), (300.0, 500.0)),
        mirror("m2", (400.0, 100.0), (400.0, 500.0)),
    ]


def build_sweep_params():
    return [
        {
            "case_id": "s5_chain_break",
            "player": [100.0, 300.0],
            "cursor": [150.0, 550.0],
            "planned": ["m1", "m2"],
            "expect_bypassed": {"m2": "chain_break"},
            "expect_active": ["m1"],
            "expect_bypass_at_surface": 1,
            "expect_aligned": True,
            "expect_lit": False,
        },
    ]


def build_sweep_plan():
    return [100.0, 300.0], ["m1", "m2"]


def run_case(params):
    inputs = make_inputs(params, build_scene())
    return inputs, run_inputs(inputs, params)
