"""Flock state and the per-tick steering update, with Numba JIT phase kernels."""

import math
import numpy as np
from numba import njit

from config import boids as config
from .agent import Agent
from .angles import (
    bearing, distance, opposite_angle, steering_nudge,
    degrees_to_radians, circular_mean
)


SEPARATION_MODES = ("arithmetic", "circular")


class EmptyFlockError(ValueError):
    """Raised when an aggregate is requested from a flock with no agents."""


# ============================================================================
# NUMBA JIT-COMPILED PHASE KERNELS
# ============================================================================
#
# Each phase runs over the whole population before the next one starts.
# Phases 1-3 only rewrite headings and phase 4 only rewrites positions, so
# updating in place inside a phase never leaks into another agent's inputs.

@njit(cache=True)
def separation_phase(
    positions: np.ndarray,
    headings: np.ndarray,
    identities: np.ndarray,
    radius: float,
    max_delta: float,
    circular: bool
):
    """Turn each agent away from the mean bearing of neighbours inside radius."""
    n = positions.shape[0]
    neighbour_angles = np.empty(n, dtype=np.float64)

    for i in range(n):
        count = 0
        total = 0.0

        for j in range(n):
            if identities[i] == identities[j]:
                continue

            if distance(positions[i], positions[j]) < radius:
                angle = bearing(positions[i], positions[j])
                neighbour_angles[count] = angle
                total += angle
                count += 1

        if count == 0:
            continue

        if circular:
            average = circular_mean(neighbour_angles, count)
        else:
            average = total / count

        headings[i] = steering_nudge(headings[i], opposite_angle(average), max_delta)


@njit(cache=True)
def centroid_of(positions: np.ndarray):
    """Mean (x, y) of all positions."""
    n = positions.shape[0]
    sx = 0.0
    sy = 0.0
    for i in range(n):
        sx += positions[i, 0]
        sy += positions[i, 1]
    return sx / n, sy / n


@njit(cache=True)
def mean_heading(headings: np.ndarray) -> float:
    """Arithmetic mean of the raw heading values."""
    total = 0.0
    for i in range(headings.shape[0]):
        total += headings[i]
    return total / headings.shape[0]


@njit(cache=True)
def cohesion_phase(positions: np.ndarray, headings: np.ndarray, max_delta: float):
    """Turn each agent toward the centroid of the whole flock."""
    cx, cy = centroid_of(positions)
    center = (cx, cy)

    for i in range(positions.shape[0]):
        # No bearing to a point you are standing on
        if positions[i, 0] == cx and positions[i, 1] == cy:
            continue
        headings[i] = steering_nudge(headings[i], bearing(positions[i], center), max_delta)


@njit(cache=True)
def alignment_phase(headings: np.ndarray, max_delta: float):
    """Turn each agent toward the average heading of the flock."""
    average = mean_heading(headings)
    for i in range(headings.shape[0]):
        headings[i] = steering_nudge(headings[i], average, max_delta)


@njit(cache=True)
def movement_phase(positions: np.ndarray, headings: np.ndarray, step: float):
    """Move each agent `step` units along its heading."""
    for i in range(positions.shape[0]):
        rad = degrees_to_radians(headings[i])
        positions[i, 0] += math.cos(rad) * step
        positions[i, 1] += math.sin(rad) * step


@njit(cache=True)
def step_flock(
    positions: np.ndarray,
    headings: np.ndarray,
    identities: np.ndarray,
    dt: float,
    separation_force: float,
    cohesion_force: float,
    alignment_force: float,
    movement_speed: float,
    separation_radius: float,
    circular: bool
):
    """One full tick: separation, cohesion, alignment, then movement."""
    separation_phase(
        positions, headings, identities,
        separation_radius, separation_force * dt, circular
    )
    cohesion_phase(positions, headings, cohesion_force * dt)
    alignment_phase(headings, alignment_force * dt)
    movement_phase(positions, headings, movement_speed * dt)


# ============================================================================
# FLOCK CLASS
# ============================================================================

def _steering(value, key: str) -> float:
    return float(config.STEERING[key] if value is None else value)


class Flock:
    """
    Fixed-size flock steered by separation, cohesion and alignment.

    Agents live in parallel arrays (float32 positions and headings, integer
    identities) in insertion order. The population never changes size.
    Steering constants default to config.STEERING and can be overridden per
    flock.
    """

    def __init__(self, num_agents: int = None,
                 separation_force: float = None,
                 cohesion_force: float = None,
                 alignment_force: float = None,
                 movement_speed: float = None,
                 separation_radius: float = None,
                 separation_mean: str = None,
                 first_identity: int = 0):
        if num_agents is None:
            num_agents = config.FLOCK["count"]
        if num_agents < 0:
            raise ValueError(f"num_agents must be >= 0, got {num_agents}")

        self.separation_force = _steering(separation_force, "separation_force")
        self.cohesion_force = _steering(cohesion_force, "cohesion_force")
        self.alignment_force = _steering(alignment_force, "alignment_force")
        self.movement_speed = _steering(movement_speed, "movement_speed")
        self.separation_radius = _steering(separation_radius, "separation_radius")

        if separation_mean is None:
            separation_mean = config.STEERING["separation_mean"]
        if separation_mean not in SEPARATION_MODES:
            raise ValueError(
                f"separation_mean must be one of {SEPARATION_MODES}, got {separation_mean!r}"
            )
        self.separation_mean = separation_mean

        self.first_identity = int(first_identity)
        self.num_agents = int(num_agents)
        self._identities = np.arange(
            self.first_identity, self.first_identity + self.num_agents, dtype=np.int64
        )
        self._positions = np.zeros((self.num_agents, 2), dtype=np.float32)
        self._headings = np.zeros(self.num_agents, dtype=np.float32)
        self.reset()

        self._warmup_numba()

    @classmethod
    def from_state(cls, positions, headings, **kwargs) -> "Flock":
        """
        Build a flock from explicit positions and headings.

        Args:
            positions: (n, 2) array-like of world coordinates
            headings: (n,) array-like of headings in degrees
            **kwargs: Any Flock constructor keyword except num_agents

        Returns:
            A flock whose agents appear in the order given
        """
        positions = np.array(positions, dtype=np.float32)
        headings = np.array(headings, dtype=np.float32)

        if positions.ndim != 2 or positions.shape[1] != 2:
            raise ValueError(f"positions must have shape (n, 2), got {positions.shape}")
        if headings.shape != (positions.shape[0],):
            raise ValueError(
                f"headings must have shape ({positions.shape[0]},), got {headings.shape}"
            )

        flock = cls(positions.shape[0], **kwargs)
        flock._positions[:] = positions
        flock._headings[:] = headings
        return flock

    def _warmup_numba(self):
        """Pre-compile the kernels so the first frame does not stall."""
        pos = np.array([[0.0, 0.0], [1.0, 0.0]], dtype=np.float32)
        rot = np.zeros(2, dtype=np.float32)
        ids = np.arange(2, dtype=np.int64)
        step_flock(pos, rot, ids, 0.016, 1.0, 1.0, 1.0, 1.0, 2.0, False)
        step_flock(pos, rot, ids, 0.016, 1.0, 1.0, 1.0, 1.0, 2.0, True)

    def _require_agents(self, what: str):
        if self.num_agents == 0:
            raise EmptyFlockError(f"cannot compute {what} of a flock with no agents")

    def reset(self):
        """Put every agent back on the starting row with the initial heading."""
        spacing_x = config.FLOCK["spacing_x"]
        self._positions[:, 0] = spacing_x * np.arange(self.num_agents, dtype=np.float32)
        self._positions[:, 1] = config.FLOCK["row_y"]
        self._headings[:] = config.FLOCK["initial_heading"]

    def update(self, dt: float):
        """Advance every agent by dt seconds of simulated time."""
        dt = float(dt)
        if not math.isfinite(dt) or dt < 0.0:
            raise ValueError(f"delta_time must be finite and non-negative, got {dt}")
        self._require_agents("an update")

        step_flock(
            self._positions,
            self._headings,
            self._identities,
            dt,
            self.separation_force,
            self.cohesion_force,
            self.alignment_force,
            self.movement_speed,
            self.separation_radius,
            self.separation_mean == "circular"
        )

    def centroid(self) -> np.ndarray:
        """Mean position of all agents."""
        self._require_agents("the centroid")
        return np.array(centroid_of(self._positions))

    def average_heading(self) -> float:
        """Arithmetic mean of the raw headings (the alignment target)."""
        self._require_agents("the average heading")
        return float(mean_heading(self._headings))

    @property
    def positions(self) -> np.ndarray:
        """Read-only (n, 2) view of agent positions."""
        view = self._positions.view()
        view.setflags(write=False)
        return view

    @property
    def headings(self) -> np.ndarray:
        """Read-only (n,) view of agent headings."""
        view = self._headings.view()
        view.setflags(write=False)
        return view

    def state(self) -> tuple:
        """Copies of (positions, headings)."""
        return self._positions.copy(), self._headings.copy()

    def agent(self, index: int) -> Agent:
        return Agent(
            identity=int(self._identities[index]),
            position=self._positions[index],
            heading=float(self._headings[index])
        )

    def agents(self):
        """Yield agent snapshots in insertion order."""
        for i in range(self.num_agents):
            yield self.agent(i)

    def __iter__(self):
        return self.agents()

    def __len__(self) -> int:
        return self.num_agents
