from ricochet_core.geometry import Point, Segment
from ricochet_core.reflection_cache import ReflectionCache
from ricochet_core.surfaces import Surface, mirror
from visibility.sectors import RaySector

O = Point(0.0, 0.0)


def test_from_segment_orders_boundaries_counter_clockwise():
    sec = RaySector.from_segment(O, Segment(Point(10.0, 5.0), Point(10.0, -5.0)))
    assert sec.right == Point(10.0, -5.0)
    assert sec.left == Point(10.0, 5.0)
    assert sec.contains(Point(1.0, 0.0))
    assert sec.contains(Point(10.0, 5.0))
    assert not sec.contains_strictly(Point(10.0, 5.0))
    assert not sec.contains(Point(0.0, 1.0))


def test_origin_on_segment_line_has_no_sector():
    assert RaySector.from_segment(O, Segment(Point(1.0, 0.0), Point(2.0, 0.0))) is None


def test_full_sector_contains_everything():
    full = RaySector.full(O)
    assert full.is_full
    assert full.contains(Point(-5.0, -5.0))


def test_reflex_sector_containment():
    sec = RaySector(O, left=Point(1.0, -1.0), right=Point(1.0, 1.0))
    assert sec.contains(Point(-1.0, 0.0))
    assert not sec.contains(Point(1.0, 0.0))


def test_intersection_of_overlapping_sectors():
    a = RaySector(O, left=Point(0.0, 1.0), right=Point(1.0, 0.0))
    b = RaySector(O, left=Point(-1.0, 1.0), right=Point(1.0, 1.0))
    c = a.intersect(b)
    assert c.right == Point(1.0, 1.0)
    assert c.left == Point(0.0, 1.0)
    assert RaySector(O, left=Point(1.0, 1.0), right=Point(1.0, 0.0)).intersect(RaySector(O, left=Point(-1.0, -1.0), right=Point(-1.0, 0.0))) is None


def test_reflecting_twice_restores_sector():
    cache = ReflectionCache()
    s = Surface("m", Point(30.25, -40.0), Point(31.5, 70.125))
    sec = RaySector(Point(3.0, 4.5), left=Point(20.0, 30.0), right=Point(25.0, -10.0))
    back = sec.reflect(s, cache).reflect(s, cache)
    assert (back.origin, back.left, back.right) == (sec.origin, sec.left, sec.right)


def test_reflection_swaps_boundaries_and_sets_start_line():
    m = mirror("m", (10.0, -5.0), (10.0, 5.0))
    sec = RaySector.from_segment(O, m.segment)
    ref = sec.reflect(m)
    assert ref.origin == Point(20.0, 0.0)
    assert ref.left == sec.right and ref.right == sec.left
    assert ref.start_line == m.segment
    assert ref.contains(Point(0.0, 0.0))
    assert ref.start_parameter(Point(0.0, 0.0)) == 0.5
