import math

import numpy as np
import pytest

from boids.angles import (
    distance, bearing, normalize_angle, opposite_angle,
    steering_nudge, degrees_to_radians, circular_mean
)


def shortest_difference(a, b):
    """Signed shortest turn from a to b, in (-180, 180]."""
    d = (b - a) % 360.0
    if d > 180.0:
        d -= 360.0
    return d


SAMPLE_ANGLES = [-1085.25, -725.5, -360.0, -179.0, -30.0, 0.0, 45.25, 179.0, 180.0, 359.5, 1000.0]


def test_distance_and_bearing():
    assert distance((0.0, 0.0), (3.0, 4.0)) == pytest.approx(5.0)
    assert bearing((0.0, 0.0), (0.0, 10.0)) == pytest.approx(90.0)
    assert bearing((0.0, 200.0), (20.0, 200.0)) == pytest.approx(0.0)
    assert bearing((20.0, 200.0), (0.0, 200.0)) == pytest.approx(180.0)
    assert bearing((0.0, 0.0), (-1.0, -1.0)) == pytest.approx(-135.0)


def test_distance_accepts_arrays():
    a = np.array([1.0, 1.0], dtype=np.float32)
    b = np.array([4.0, 5.0], dtype=np.float32)
    assert distance(a, b) == pytest.approx(5.0)


@pytest.mark.parametrize("theta", SAMPLE_ANGLES + [-1e-15, 1e9, -1e9])
def test_normalize_angle_range(theta):
    result = normalize_angle(theta)
    assert 0.0 <= result < 360.0


@pytest.mark.parametrize("theta", SAMPLE_ANGLES)
@pytest.mark.parametrize("k", [-3, -1, 1, 2])
def test_normalize_angle_is_periodic(theta, k):
    a = normalize_angle(theta)
    b = normalize_angle(theta + 360.0 * k)
    assert abs(shortest_difference(a, b)) == pytest.approx(0.0, abs=1e-9)


def test_normalize_angle_values():
    assert normalize_angle(-30.0) == pytest.approx(330.0)
    assert normalize_angle(720.0) == 0.0
    assert normalize_angle(365.0) == pytest.approx(5.0)


@pytest.mark.parametrize("theta", SAMPLE_ANGLES)
def test_opposite_angle_round_trip(theta):
    once = opposite_angle(theta)
    assert 0.0 <= once < 360.0
    assert abs(shortest_difference(once, normalize_angle(theta))) == pytest.approx(180.0)
    assert opposite_angle(once) == pytest.approx(normalize_angle(theta), abs=1e-9)


def test_steering_nudge_examples():
    assert steering_nudge(0.0, 90.0, 10.0) == pytest.approx(10.0)
    # Shorter way round is clockwise
    assert steering_nudge(0.0, 270.0, 10.0) == pytest.approx(350.0)
    # Target within reach is hit exactly, across the wrap
    assert steering_nudge(350.0, 10.0, 30.0) == pytest.approx(10.0)
    assert steering_nudge(10.0, 350.0, 5.0) == pytest.approx(5.0)
    assert steering_nudge(0.0, 5.0, 90.0) == pytest.approx(5.0)
    # Directly behind turns positive
    assert steering_nudge(0.0, 180.0, 1.5) == pytest.approx(1.5)


def test_steering_nudge_zero_delta_only_normalizes():
    assert steering_nudge(-30.0, 100.0, 0.0) == pytest.approx(330.0)


@pytest.mark.parametrize("start", [-400.0, 0.0, 10.0, 179.0, 181.0, 359.0, 725.0])
@pytest.mark.parametrize("target", [-90.0, 0.0, 5.0, 90.0, 200.0, 358.0])
@pytest.mark.parametrize("max_delta", [0.5, 15.0, 120.0])
def test_steering_nudge_is_bounded_and_turns_short_way(start, target, max_delta):
    result = steering_nudge(start, target, max_delta)
    wanted = shortest_difference(normalize_angle(start), normalize_angle(target))
    turned = shortest_difference(normalize_angle(start), result)

    assert 0.0 <= result < 360.0
    assert abs(turned) <= max_delta + 1e-9

    if abs(wanted) <= max_delta:
        assert abs(shortest_difference(result, normalize_angle(target))) == pytest.approx(0.0, abs=1e-9)
    elif abs(wanted) < 180.0:
        assert math.copysign(1.0, turned) == math.copysign(1.0, wanted)


def test_degrees_to_radians():
    assert degrees_to_radians(180.0) == pytest.approx(math.pi)
    assert degrees_to_radians(-90.0) == pytest.approx(-math.pi / 2)


def test_circular_mean_handles_wraparound():
    angles = np.array([179.0, -179.0, 0.0])
    # Only the first two count
    assert normalize_angle(circular_mean(angles, 2)) == pytest.approx(180.0, abs=1e-6)


def test_circular_mean_matches_arithmetic_for_tight_groups():
    angles = np.array([10.0, 20.0, 30.0])
    assert circular_mean(angles, 3) == pytest.approx(20.0)


def test_helpers_compile_and_return_python_floats():
    # Integer and float32 arguments both go through the compiled helpers
    point = np.array([3.0, 4.0], dtype=np.float32)
    results = [
        distance((0.0, 0.0), point),
        bearing((0.0, 0.0), point),
        normalize_angle(370),
        normalize_angle(np.float32(-10.0)),
        opposite_angle(90),
        steering_nudge(0, 90, 10),
        degrees_to_radians(90.0),
        circular_mean(np.array([0.0, 90.0]), 2),
    ]

    for value in results:
        assert isinstance(value, float)
    assert results[0] == pytest.approx(5.0)
    assert results[1] == pytest.approx(math.degrees(math.atan2(4.0, 3.0)), rel=1e-6)
    assert results[2] == pytest.approx(10.0)
    assert results[3] == pytest.approx(350.0)
    assert results[4] == pytest.approx(270.0)
    assert results[5] == pytest.approx(10.0)
    assert results[6] == pytest.approx(math.pi / 2)
    assert results[7] == pytest.approx(45.0)
