import numpy as np

from ricochet_core.geometry import Point, ScreenBounds, Segment
from visibility.clipping import clip_to_screen, contains_point, crop_by_window, is_simple, polygon_area
from visibility.outline import OutlineVertex, VertexSource, assemble_outline, dedup_vertices
from visibility.sectors import RaySector

O = Point(0.0, 0.0)
SQUARE = [Point(0.0, 0.0), Point(10.0, 0.0), Point(10.0, 10.0), Point(0.0, 10.0)]


def _v(x, y, source=VertexSource.SURFACE):
    p = Point(x, y)
    return OutlineVertex(p, p, source)


def test_full_sector_outline_is_counter_clockwise_from_plus_x():
    shuffled = [_v(0.0, -1.0), _v(-1.0, 0.0), _v(1.0, 0.0), _v(0.0, 1.0)]
    outline = assemble_outline(O, shuffled, RaySector.full(O))
    assert [v.point for v in outline] == [Point(1.0, 0.0), Point(0.0, 1.0), Point(-1.0, 0.0), Point(0.0, -1.0)]


def test_same_direction_orders_nearer_hit_first():
    far = OutlineVertex(Point(4.0, 4.0), Point(1.0, 1.0), VertexSource.SCREEN)
    near = OutlineVertex(Point(2.0, 2.0), Point(1.0, 1.0), VertexSource.SURFACE)
    outline = assemble_outline(O, [far, _v(1.0, 0.0), near], RaySector.full(O))
    assert [v.point for v in outline] == [Point(1.0, 0.0), Point(2.0, 2.0), Point(4.0, 4.0)]


def test_finite_sector_without_start_line_closes_through_origin():
    sec = RaySector(O, left=Point(0.0, 5.0), right=Point(5.0, 0.0))
    outline = assemble_outline(O, [_v(0.0, 5.0), _v(5.0, 0.0), _v(4.0, 4.0)], sec)
    assert outline[0].source is VertexSource.ORIGIN
    assert [v.point for v in outline] == [O, Point(5.0, 0.0), Point(4.0, 4.0), Point(0.0, 5.0)]


def test_finite_sector_with_start_line_closes_through_it():
    line = Segment(Point(1.0, 0.0), Point(0.0, 1.0))
    sec = RaySector(O, left=Point(0.0, 1.0), right=Point(1.0, 0.0), start_line=line)
    outline = assemble_outline(O, [_v(5.0, 0.0), _v(0.0, 5.0)], sec)
    assert [v.point for v in outline] == [Point(5.0, 0.0), Point(0.0, 5.0), Point(0.0, 1.0), Point(1.0, 0.0)]


def test_dedup_prefers_endpoint_coordinates_and_wraps():
    vs = [
        _v(1.0, 1.0),
        _v(1.0 + 1e-9, 1.0, VertexSource.ENDPOINT),
        _v(3.0, 3.0),
        _v(1.0, 1.0 - 1e-9),
    ]
    out = dedup_vertices(vs)
    assert [v.point for v in out] == [Point(1.0 + 1e-9, 1.0), Point(3.0, 3.0)]
    assert out[0].source is VertexSource.ENDPOINT


def test_crop_by_window_keeps_triangle_part():
    cropped = crop_by_window(SQUARE, Point(5.0, -10.0), Segment(Point(0.0, 10.0), Point(10.0, 10.0)))
    assert np.isclose(abs(polygon_area(cropped)), 75.0)
    assert contains_point(cropped, Point(5.0, 5.0))
    assert not contains_point(cropped, Point(1.0, 1.0))


def test_clip_to_screen_bounds_a_large_polygon():
    big = [Point(-50.0, -50.0), Point(50.0, -50.0), Point(50.0, 50.0), Point(-50.0, 50.0)]
    clipped = clip_to_screen(big, ScreenBounds(0.0, 0.0, 20.0, 10.0))
    assert np.isclose(polygon_area(clipped), 200.0)


def test_polygon_area_sign_and_containment():
    assert polygon_area(SQUARE) == 100.0
    assert polygon_area(SQUARE[::-1]) == -100.0
    assert contains_point(SQUARE, Point(5.0, 5.0))
    assert not contains_point(SQUARE, Point(15.0, 5.0))
    assert not contains_point(SQUARE[:2], Point(5.0, 0.0))


def test_is_simple_detects_bow_tie_and_repeats():
    assert is_simple(SQUARE)
    assert not is_simple([Point(0.0, 0.0), Point(10.0, 10.0), Point(10.0, 0.0), Point(0.0, 10.0)])
    assert not is_simple(SQUARE + [Point(0.0, 0.0)])
