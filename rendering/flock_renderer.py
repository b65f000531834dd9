"""Draws flock agents as heading-aligned rectangles."""

import math
import numpy as np
from numba import njit
from OpenGL.GL import *

from config import boids as config


@njit(cache=True)
def build_quads_numba(
    positions: np.ndarray,
    headings: np.ndarray,
    vertices: np.ndarray,
    length: float,
    width: float,
    num_agents: int
):
    """Write 4 vertices per agent: a length x width rectangle along its heading."""
    half_w = width * 0.5

    for i in range(num_agents):
        rad = headings[i] * (math.pi / 180.0)
        fx = math.cos(rad)
        fy = math.sin(rad)
        # Perpendicular
        px = -fy
        py = fx

        x = positions[i, 0]
        y = positions[i, 1]

        base = i * 4
        vertices[base, 0] = x + px * half_w
        vertices[base, 1] = y + py * half_w
        vertices[base + 1, 0] = x + fx * length + px * half_w
        vertices[base + 1, 1] = y + fy * length + py * half_w
        vertices[base + 2, 0] = x + fx * length - px * half_w
        vertices[base + 2, 1] = y + fy * length - py * half_w
        vertices[base + 3, 0] = x - px * half_w
        vertices[base + 3, 1] = y - py * half_w


class FlockRenderer:
    """Immediate client-array renderer for a Flock (or recorded frame)."""

    def __init__(self, length: float = None, width: float = None):
        self.length = float(config.AGENT_SHAPE["length"] if length is None else length)
        self.width = float(config.AGENT_SHAPE["width"] if width is None else width)
        self.color = config.COLORS["agent"]
        self.centroid_color = config.COLORS["centroid"]
        self.centroid_size = config.AGENT_SHAPE["centroid_size"]
        self._vertices = np.zeros((0, 2), dtype=np.float32)

    def _ensure_capacity(self, num_agents: int):
        if self._vertices.shape[0] < num_agents * 4:
            self._vertices = np.zeros((num_agents * 4, 2), dtype=np.float32)

    def draw_arrays(self, positions: np.ndarray, headings: np.ndarray):
        """Draw agents from raw position/heading arrays."""
        num_agents = len(positions)
        if num_agents == 0:
            return

        self._ensure_capacity(num_agents)
        build_quads_numba(
            positions, headings, self._vertices,
            self.length, self.width, num_agents
        )
        total_verts = num_agents * 4

        glColor3f(*self.color)
        glEnableClientState(GL_VERTEX_ARRAY)
        glVertexPointer(2, GL_FLOAT, 0, self._vertices[:total_verts])
        glDrawArrays(GL_QUADS, 0, total_verts)
        glDisableClientState(GL_VERTEX_ARRAY)

    def draw_marker(self, point):
        """Small cross at a world point."""
        x, y = float(point[0]), float(point[1])
        s = self.centroid_size

        glBegin(GL_LINES)
        glColor3f(*self.centroid_color)
        glVertex2f(x - s, y); glVertex2f(x + s, y)
        glVertex2f(x, y - s); glVertex2f(x, y + s)
        glEnd()

    def draw(self, flock):
        """Draw every agent of a flock and its centroid."""
        if len(flock) == 0:
            return
        self.draw_arrays(flock.positions, flock.headings)
        self.draw_marker(flock.centroid())
