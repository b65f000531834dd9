"""Angle helpers shared by the flock kernels.

All angles are in degrees at the call boundary. Functions are Numba-compiled
so the flock kernels can call them without leaving nopython mode; they are
equally callable from plain Python.
"""

import math
import numpy as np
from numba import njit


@njit(cache=True)
def distance(a, b) -> float:
    """Euclidean distance between points a and b."""
    dx = float(b[0]) - float(a[0])
    dy = float(b[1]) - float(a[1])
    return math.sqrt(dx * dx + dy * dy)


@njit(cache=True)
def bearing(a, b) -> float:
    """Angle in degrees from point a to point b, in (-180, 180]."""
    dx = float(b[0]) - float(a[0])
    dy = float(b[1]) - float(a[1])
    return math.degrees(math.atan2(dy, dx))


@njit(cache=True)
def normalize_angle(theta: float) -> float:
    """Map any angle into [0, 360)."""
    t = np.fmod(float(theta), 360.0)
    if t < 0.0:
        t += 360.0
    # -1e-15 + 360 rounds to 360
    if t >= 360.0:
        t -= 360.0
    return t


@njit(cache=True)
def opposite_angle(theta: float) -> float:
    """The reciprocal heading, in [0, 360)."""
    return normalize_angle(normalize_angle(theta) + 180.0)


@njit(cache=True)
def steering_nudge(from_angle: float, to_angle: float, max_delta: float) -> float:
    """
    Turn from_angle toward to_angle by at most max_delta degrees.

    The turn always takes the shorter way round and never overshoots, so a
    target within max_delta is reached exactly. A target directly behind
    (difference of 180) is approached in the positive direction.

    Returns:
        The new angle in [0, 360)
    """
    n_from = normalize_angle(from_angle)
    n_to = normalize_angle(to_angle)

    difference = n_to - n_from
    if difference > 180.0:
        difference -= 360.0
    elif difference < -180.0:
        difference += 360.0

    magnitude = abs(difference)
    adjustment = magnitude if magnitude < max_delta else float(max_delta)

    if difference > 0.0:
        return normalize_angle(n_from + adjustment)
    return normalize_angle(n_from - adjustment)


@njit(cache=True)
def degrees_to_radians(degrees: float) -> float:
    return degrees * (math.pi / 180.0)


@njit(cache=True)
def circular_mean(angles: np.ndarray, count: int) -> float:
    """Mean direction of the first `count` angles, averaged as unit vectors."""
    sx = 0.0
    sy = 0.0
    for k in range(count):
        rad = degrees_to_radians(angles[k])
        sx += math.cos(rad)
        sy += math.sin(rad)
    return math.degrees(math.atan2(sy, sx))
