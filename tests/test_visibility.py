import numpy as np

from ricochet_core.config import TraceConfig
from ricochet_core.geometry import Point, ScreenBounds
from ricochet_core.surfaces import mirror, wall
from visibility.clipping import contains_point, is_simple
from visibility.polygon_builder import build_visibility_polygon
from visibility.propagation import propagate_visibility

SCREEN = ScreenBounds(0.0, 0.0, 1280.0, 720.0)


def _single_mirror():
    return mirror("m1", (200.0, 100.0), (200.0, 500.0))


def test_open_field_polygon_is_whole_screen():
    vp = build_visibility_polygon(Point(100.0, 100.0), [], SCREEN)
    assert np.isclose(vp.area(), 1280.0 * 720.0)
    assert vp.contains(Point(1279.0, 719.0))
    assert is_simple(vp.vertices)


def test_wall_casts_shadow():
    w = wall("w", (600.0, 200.0), (600.0, 500.0))
    vp = build_visibility_polygon(Point(200.0, 360.0), [w], SCREEN)
    assert vp.contains(Point(400.0, 360.0))
    assert vp.contains(Point(900.0, 20.0))
    assert not vp.contains(Point(900.0, 360.0))
    assert vp.area() < 1280.0 * 720.0
    assert is_simple(vp.vertices)


def test_single_mirror_lights_reflected_side():
    m = _single_mirror()
    result = propagate_visibility(Point(100.0, 300.0), [m], [m], SCREEN)
    assert result.is_valid
    assert result.final_origin == Point(300.0, 300.0)
    assert result.final_region.contains(Point(100.0, 500.0))
    assert not result.final_region.contains(Point(300.0, 300.0))
    assert len(result.valid_steps) == 2
    assert len(result.planned_steps) == 1
    for poly in result.final_region.polygons:
        assert is_simple(poly)


def test_planned_step_is_inside_valid_step():
    m = _single_mirror()
    result = propagate_visibility(Point(100.0, 300.0), [m], [m], SCREEN)
    planned, valid = result.planned_steps[0], result.valid_steps[0]
    assert 0.0 < planned.area() <= valid.area() + 1e-6
    assert planned.contains(Point(190.0, 300.0))
    assert not planned.contains(Point(100.0, 600.0))


def test_origin_behind_mirror_invalidates_region():
    m = mirror("m1", (200.0, 500.0), (200.0, 100.0))
    result = propagate_visibility(Point(100.0, 300.0), [m], [m], SCREEN)
    assert not result.is_valid
    assert result.bypass_at_surface == 0
    assert result.final_region.is_empty
    assert not result.valid_steps[-1].is_valid


def test_reflection_cap_invalidates_region():
    m = _single_mirror()
    result = propagate_visibility(Point(100.0, 300.0), [m], [m], SCREEN, TraceConfig(max_reflections=0))
    assert result.bypass_at_surface == 0
    assert result.final_region.is_empty


def test_fully_shadowed_mirror_exhausts_light():
    m = _single_mirror()
    w = wall("w", (150.0, 0.0), (150.0, 720.0))
    result = propagate_visibility(Point(100.0, 300.0), [m], [m, w], SCREEN)
    assert not result.is_valid
    assert result.exhausted_at_surface == 0
    assert result.final_region.is_empty


def test_empty_plan_is_plain_visibility():
    result = propagate_visibility(Point(100.0, 100.0), [], [], SCREEN)
    assert result.is_valid
    assert np.isclose(result.final_region.area(), 1280.0 * 720.0)


def test_chain_break_stops_light_at_second_mirror():
    m1 = mirror("m1", (300.0, 100.0), (300.0, 500.0))
    m2 = mirror("m2", (400.0, 100.0), (400.0, 500.0))
    result = propagate_visibility(Point(100.0, 300.0), [m1, m2], [m1, m2], SCREEN)
    assert not result.is_valid
    assert result.bypass_at_surface == 1
    assert result.exhausted_at_surface is None
    assert len(result.valid_steps) == 2
    assert result.valid_steps[-1].origin == Point(500.0, 300.0)


def test_region_keeps_one_polygon_per_live_sector():
    m = _single_mirror()
    w = wall("w", (150.0, 290.0), (150.0, 310.0))
    result = propagate_visibility(Point(100.0, 300.0), [m], [m, w], SCREEN)
    assert result.is_valid
    assert len(result.valid_steps[-1].sectors) == 2
    assert len(result.final_region.polygons) == 2
    assert not result.final_region.contains(Point(120.0, 300.0))
    for lit in (Point(100.0, 100.0), Point(100.0, 500.0)):
        assert sum(contains_point(p, lit) for p in result.final_region.polygons) == 1
