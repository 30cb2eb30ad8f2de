from __future__ import annotations

import pytest

from pytrainmap._geo import angular_difference, distance_meters, initial_bearing_degrees


def test_distance_one_degree_of_longitude_at_equator() -> None:
    assert distance_meters((0.0, 0.0), (0.0, 1.0)) == pytest.approx(111_194.93, rel=1e-4)


def test_distance_is_zero_for_same_point_and_symmetric() -> None:
    a = (56.9496, 24.1052)
    b = (56.9677, 24.1383)
    assert distance_meters(a, a) == 0.0
    assert distance_meters(a, b) == pytest.approx(distance_meters(b, a))
    assert distance_meters(a, b) > 0


@pytest.mark.parametrize(
    ("target", "expected"),
    [
        ((0.0, 1.0), 90.0),
        ((1.0, 0.0), 0.0),
        ((0.0, -1.0), 270.0),
        ((-1.0, 0.0), 180.0),
    ],
)
def test_initial_bearing_cardinal_directions(target: tuple[float, float], expected: float) -> None:
    assert initial_bearing_degrees((0.0, 0.0), target) == pytest.approx(expected)


def test_initial_bearing_stays_in_range() -> None:
    bearing = initial_bearing_degrees((56.95, 24.10), (56.94, 24.09))
    assert 0.0 <= bearing < 360.0


@pytest.mark.parametrize(
    ("a", "b", "expected"),
    [
        (10.0, 350.0, 20.0),
        (0.0, 180.0, 180.0),
        (90.0, 90.0, 0.0),
        (-30.0, 30.0, 60.0),
        (720.0, 0.0, 0.0),
    ],
)
def test_angular_difference_folds_into_half_circle(a: float, b: float, expected: float) -> None:
    assert angular_difference(a, b) == pytest.approx(expected)
