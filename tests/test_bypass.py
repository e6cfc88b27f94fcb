from ricochet_core.bypass import BypassReason, evaluate_bypass
from ricochet_core.config import TraceConfig
from ricochet_core.geometry import Point
from ricochet_core.surfaces import mirror, wall

PLAYER = Point(100.0, 300.0)


def _reasons(result):
    return [(b.surface.surface_id, b.reason, b.original_index) for b in result.bypassed]


def test_nothing_bypassed_for_valid_single_mirror():
    m = mirror("m1", (200.0, 100.0), (200.0, 500.0))
    result = evaluate_bypass(PLAYER, Point(100.0, 500.0), [m])
    assert result.is_empty
    assert result.active == (m,)
    assert result.active_indices == (0,)


def test_wall_in_plan_is_non_reflective():
    w = wall("w", (200.0, 100.0), (200.0, 500.0))
    result = evaluate_bypass(PLAYER, Point(100.0, 500.0), [w])
    assert _reasons(result) == [("w", BypassReason.NON_REFLECTIVE, 0)]


def test_player_behind_first_surface():
    m = mirror("m1", (200.0, 500.0), (200.0, 100.0))
    result = evaluate_bypass(PLAYER, Point(300.0, 300.0), [m])
    assert _reasons(result) == [("m1", BypassReason.PLAYER_WRONG_SIDE, 0)]
    assert result.active == ()


def test_cursor_behind_last_surface():
    m = mirror("m1", (200.0, 100.0), (200.0, 500.0))
    result = evaluate_bypass(PLAYER, Point(300.0, 300.0), [m])
    assert _reasons(result) == [("m1", BypassReason.CURSOR_WRONG_SIDE, 0)]


def test_image_behind_second_surface_is_chain_break():
    m1 = mirror("m1", (300.0, 100.0), (300.0, 500.0))
    m2 = mirror("m2", (400.0, 100.0), (400.0, 500.0))
    result = evaluate_bypass(PLAYER, Point(150.0, 550.0), [m1, m2])
    assert _reasons(result) == [("m2", BypassReason.CHAIN_BREAK, 1)]
    assert [s.surface_id for s in result.active] == ["m1"]


def test_cursor_check_repeats_until_consistent():
    m1 = mirror("m1", (300.0, 100.0), (300.0, 500.0))
    m2 = mirror("m2", (600.0, 100.0), (600.0, 500.0))
    result = evaluate_bypass(PLAYER, Point(700.0, 300.0), [m1, m2])
    assert _reasons(result) == [
        ("m1", BypassReason.CURSOR_WRONG_SIDE, 0),
        ("m2", BypassReason.CURSOR_WRONG_SIDE, 1),
    ]
    assert result.active == ()


def test_plan_longer_than_bounce_cap():
    right = mirror("right", (1000.0, 100.0), (1000.0, 620.0))
    left = mirror("left", (200.0, 620.0), (200.0, 100.0))
    result = evaluate_bypass(Point(600.0, 360.0), Point(700.0, 300.0), [right, left], TraceConfig(max_reflections=1))
    assert _reasons(result) == [("left", BypassReason.EXCEEDS_MAX_REFLECTIONS, 1)]
    assert result.bypassed_ids() == ["left"]


def test_bypassed_surfaces_keep_plan_order():
    w = wall("w", (50.0, 0.0), (50.0, 10.0))
    m1 = mirror("m1", (300.0, 100.0), (300.0, 500.0))
    m2 = mirror("m2", (400.0, 100.0), (400.0, 500.0))
    result = evaluate_bypass(PLAYER, Point(150.0, 550.0), [m2, w, m1])
    assert _reasons(result) == [
        ("w", BypassReason.NON_REFLECTIVE, 1),
        ("m1", BypassReason.CHAIN_BREAK, 2),
    ]
    assert result.active_indices == (0,)
