"""2D flocking: angle helpers, agent snapshots and the flock update."""

from .agent import Agent
from .flock import Flock, EmptyFlockError, SEPARATION_MODES
from . import angles

__all__ = ["Agent", "Flock", "EmptyFlockError", "SEPARATION_MODES", "angles"]
