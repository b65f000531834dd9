"""2D view that follows a point in world space."""

import numpy as np
from config import boids as config


class Camera:
    """
    Follow camera for the flat world.

    The view keeps the original window convention: y grows downward, so the
    top edge has the smaller y value.
    """

    def __init__(self, size=None, zoom: float = None):
        self.base_size = np.array(config.VIEW["size"] if size is None else size, dtype=np.float64)
        self.zoom_level = float(config.VIEW["zoom"] if zoom is None else zoom)
        self.target = np.zeros(2)

    def follow(self, point):
        """Centre the view on a world point."""
        self.target = np.array(point, dtype=np.float64)

    def zoom(self, factor: float):
        """Scale the visible area by factor (>1 shows more of the world)."""
        self.zoom_level = max(
            config.VIEW["min_zoom"],
            min(config.VIEW["max_zoom"], self.zoom_level * factor)
        )

    def view_size(self) -> np.ndarray:
        return self.base_size * self.zoom_level

    def bounds(self) -> tuple:
        """
        Visible world rectangle.

        Returns:
            (left, right, top, bottom) in world units, top < bottom
        """
        half = self.view_size() / 2
        left, top = self.target - half
        right, bottom = self.target + half
        return float(left), float(right), float(top), float(bottom)
