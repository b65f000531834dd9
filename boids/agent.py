"""A single flock member as seen from outside the flock."""

import math
import numpy as np
from dataclasses import dataclass, field

from .angles import normalize_angle, degrees_to_radians


@dataclass(frozen=True, eq=False)
class Agent:
    """
    Snapshot of one agent (bird-oid object) in a Flock.

    The flock stores its members as arrays and hands out these snapshots for
    presentation, so holding on to one never changes the simulation.

    Attributes:
        identity: Unique integer assigned by the owning flock at construction
        position: 2D position vector (world units)
        heading: Direction of travel in degrees, not necessarily normalized.
            Headings are stored as float32, so a turn ending just below 360
            can read back as exactly 360.0; use normalized_heading for [0, 360)
    """
    identity: int
    position: np.ndarray = field(default_factory=lambda: np.zeros(2, dtype=np.float32))
    heading: float = 0.0

    def __post_init__(self):
        position = np.array(self.position, dtype=np.float32)
        position.setflags(write=False)
        object.__setattr__(self, "position", position)

    def __eq__(self, other):
        if not isinstance(other, Agent):
            return NotImplemented
        return self.identity == other.identity

    def __hash__(self):
        return hash(self.identity)

    @property
    def normalized_heading(self) -> float:
        return normalize_angle(self.heading)

    def direction(self) -> np.ndarray:
        """Unit vector along the heading."""
        rad = degrees_to_radians(self.heading)
        return np.array([math.cos(rad), math.sin(rad)])
