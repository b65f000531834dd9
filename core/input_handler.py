"""Input handling for keyboard and mouse events."""

import pygame
from pygame.locals import *
from config import boids as config

from .camera import Camera


class InputHandler:
    """Handles window, keyboard and mouse events for the flock viewer."""

    def __init__(self, camera: Camera, updates_per_tick: int):
        self.camera = camera
        self.updates_per_tick = updates_per_tick
        self.paused = False
        self.reset_requested = False

    def handle_event(self, event: pygame.event.Event) -> bool:
        """
        Handle a single pygame event.
        Returns False if the application should quit, True otherwise.
        """
        if event.type == QUIT:
            return False
        elif event.type == KEYDOWN:
            if event.key == K_ESCAPE:
                return False
            elif event.key == K_SPACE:
                self.paused = not self.paused
            elif event.key == K_r:
                self.reset_requested = True
            elif event.key in (K_PLUS, K_EQUALS, K_KP_PLUS):
                self.updates_per_tick = min(
                    config.SIMULATION["max_updates_per_tick"], self.updates_per_tick + 1
                )
            elif event.key in (K_MINUS, K_KP_MINUS):
                self.updates_per_tick = max(1, self.updates_per_tick - 1)
        elif event.type == MOUSEWHEEL:
            step = config.VIEW["zoom_step"]
            self.camera.zoom(1 / step if event.y > 0 else step)

        return True
