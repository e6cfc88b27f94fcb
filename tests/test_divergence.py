from ricochet_core.divergence import find_divergence
from ricochet_core.geometry import Point

A, B, C, D = Point(0.0, 0.0), Point(1.0, 0.0), Point(2.0, 0.0), Point(3.0, 0.0)


def test_identical_lists_are_aligned():
    info = find_divergence([A, B, C], [A, B, C])
    assert info.is_aligned
    assert info.segment_index == -1
    assert info.point is None


def test_first_difference_after_shared_start():
    info = find_divergence([A, B, C], [A, D])
    assert not info.is_aligned
    assert info.waypoint_index == 1
    assert info.segment_index == 0
    assert info.point == A


def test_later_difference():
    info = find_divergence([A, B, C, D], [A, B, D])
    assert (info.segment_index, info.waypoint_index, info.point) == (1, 2, B)


def test_prefix_reports_end_of_shorter_list():
    info = find_divergence([A, B, C], [A, B])
    assert not info.is_aligned
    assert (info.segment_index, info.waypoint_index, info.point) == (1, 2, B)


def test_tiny_difference_is_still_divergence():
    info = find_divergence([A, B], [A, Point(1.0 + 1e-12, 0.0)])
    assert not info.is_aligned
