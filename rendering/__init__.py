"""Rendering components for the 2D boids viewer."""

from .flock_renderer import FlockRenderer
from .text import TextRenderer

__all__ = ["FlockRenderer", "TextRenderer"]
