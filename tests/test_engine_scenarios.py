from importlib import import_module

import pytest

from ricochet_core.bypass import evaluate_bypass
from ricochet_core.engine import evaluate_plan
from ricochet_core.geometry import Point
from ricochet_core.image_chain import build_image_chain
from ricochet_core.reflection_cache import ReflectionCache
from ricochet_core.surfaces import Surface, mirror
from scenarios.common import SCREEN
from scenarios.runner import SCENARIO_MODULES, check_expectations


def _cases():
    for sid, mod_name in SCENARIO_MODULES.items():
        mod = import_module(mod_name)
        for p in mod.build_sweep_params():
            yield pytest.param(sid, mod, p, id=f"{sid}-{p['case_id']}")


@pytest.mark.parametrize("sid,mod,params", list(_cases()))
def test_scenario_case_meets_expectations(sid, mod, params):
    _, ev = mod.run_case(params)
    assert check_expectations(sid, params, ev) == []


def test_unknown_surface_ids_are_rejected():
    m = mirror("m1", (200.0, 100.0), (200.0, 500.0))
    with pytest.raises(ValueError):
        evaluate_plan(Point(100.0, 300.0), Point(100.0, 500.0), [m], [m, m], SCREEN)


def test_derived_flags_for_bounce():
    m = mirror("m1", (200.0, 100.0), (200.0, 500.0))
    ev = evaluate_plan(Point(100.0, 300.0), Point(100.0, 500.0), [m], [m], SCREEN)
    assert ev.is_cursor_reachable
    assert ev.is_plan_valid
    assert ev.is_cursor_lit
    assert ev.lit_matches_validity


def test_derived_flags_for_cursor_behind_mirror():
    m = mirror("m1", (200.0, 100.0), (200.0, 500.0))
    ev = evaluate_plan(Point(100.0, 300.0), Point(300.0, 300.0), [m], [m], SCREEN)
    assert not ev.bypass.is_empty
    assert not ev.is_plan_valid
    assert not ev.is_cursor_lit
    assert ev.lit_matches_validity


def test_empty_cache_passed_in_is_shared_and_filled():
    m = mirror("m1", (200.0, 100.0), (200.0, 500.0))
    cache = ReflectionCache()
    bypass = evaluate_bypass(Point(100.0, 300.0), Point(100.0, 500.0), [m], cache=cache)
    after_bypass = len(cache)
    assert after_bypass > 0
    build_image_chain(Point(100.0, 300.0), Point(100.0, 500.0), bypass.active, cache)
    assert cache.hits > 0
    assert len(cache) >= after_bypass


def test_two_bounce_plan_on_tilted_mirrors_is_aligned():
    m1 = Surface("m1", Point(201.66, 403.05), Point(447.48, 231.87))
    m0 = Surface("m0", Point(1123.69, 305.31), Point(852.67, 498.07))
    ev = evaluate_plan(Point(318.42, 394.71), Point(909.38, 405.70), [m1, m0], [m1, m0], SCREEN)
    assert ev.bypass.is_empty
    assert ev.divergence.is_aligned
    assert ev.actual_path.reflection_ids() == ("m1", "m0")
    assert ev.is_plan_valid
    assert ev.lit_matches_validity
