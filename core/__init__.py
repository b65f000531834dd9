"""Core viewer components.

Application and InputHandler pull in pygame and OpenGL, so they are imported
from their modules directly rather than re-exported here.
"""

from .camera import Camera

__all__ = ["Camera"]
