import numpy as np
import pytest

from ricochet_core.geometry import Point
from ricochet_core.reflection_cache import ReflectionCache
from ricochet_core.surfaces import Surface, mirror, surfaces_by_id, wall


def test_normal_points_to_reflective_side():
    m = mirror("m", (200.0, 100.0), (200.0, 500.0))
    assert m.normal == Point(-400.0, 0.0)
    assert m.is_on_reflective_side(Point(100.0, 300.0))
    assert not m.is_on_reflective_side(Point(300.0, 300.0))
    assert not m.is_on_reflective_side(Point(200.0, 300.0))


def test_can_reflect_from_front_only():
    m = mirror("m", (200.0, 100.0), (200.0, 500.0))
    assert m.can_reflect_from(Point(1.0, 0.3))
    assert not m.can_reflect_from(Point(-1.0, 0.3))
    assert m.reflect_direction(Point(1.0, 0.5)) == Point(-1.0, 0.5)


def test_walls_never_reflect():
    w = wall("w", (0.0, 0.0), (10.0, 0.0))
    assert not w.reflective
    assert not w.is_on_reflective_side(Point(5.0, 5.0))
    assert not w.can_reflect_from(Point(0.0, -1.0))


def test_duplicate_surface_ids_rejected():
    with pytest.raises(ValueError):
        surfaces_by_id([mirror("a", (0, 0), (1, 0)), wall("a", (0, 1), (1, 1))])


def test_cache_reflection_is_exactly_reversible():
    rng = np.random.default_rng(3)
    cache = ReflectionCache()
    for i in range(40):
        a, b, p = (Point(*map(float, rng.uniform(-1000, 1000, 2))) for _ in range(3))
        s = Surface(f"s{i}", a, b)
        assert cache.reflect(cache.reflect(p, s), s) == p


def test_cache_stats_and_clear():
    cache = ReflectionCache()
    m = mirror("m", (0.0, 0.0), (0.0, 10.0))
    p = Point(3.0, 4.0)
    image = cache.reflect(p, m)
    assert image == Point(-3.0, 4.0)
    assert cache.reflect(p, m) is image
    assert (p, m) in cache
    assert cache.stats() == {"hits": 1, "misses": 1, "size": 2}
    cache.clear()
    assert len(cache) == 0
