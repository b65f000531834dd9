"""Main application class that ties everything together."""

import pygame
from pygame.locals import *
from OpenGL.GL import *

from config import boids as config
from .camera import Camera
from .input_handler import InputHandler
from rendering import FlockRenderer, TextRenderer
from boids import Flock


class Application:
    """Main application managing the frame loop and rendering."""

    def __init__(self, num_agents: int = None, updates_per_tick: int = None):
        pygame.init()
        pygame.display.set_mode(
            (config.WINDOW["width"], config.WINDOW["height"]),
            DOUBLEBUF | OPENGL
        )
        pygame.display.set_caption(config.WINDOW["title"])

        if updates_per_tick is None:
            updates_per_tick = config.SIMULATION["updates_per_tick"]

        # Core components
        self.camera = Camera()
        self.input_handler = InputHandler(self.camera, updates_per_tick)

        # Rendering components
        self.flock_renderer = FlockRenderer()
        self.text_renderer = TextRenderer()

        # Simulation
        self.flock = Flock(num_agents)

        # State
        self.clock = pygame.time.Clock()
        self.running = True
        self.fps = 0

        glClearColor(*config.COLORS["background"])
        print(f"[Boids] {self.flock.num_agents} agents, "
              f"{updates_per_tick} updates per frame")

    def _apply_view(self):
        """Load an orthographic projection for the camera's visible rectangle."""
        left, right, top, bottom = self.camera.bounds()
        glMatrixMode(GL_PROJECTION)
        glLoadIdentity()
        # Bottom/top swapped so world y grows down the screen
        glOrtho(left, right, bottom, top, -1, 1)
        glMatrixMode(GL_MODELVIEW)
        glLoadIdentity()

    def _handle_events(self):
        """Process all pending pygame events."""
        for event in pygame.event.get():
            if not self.input_handler.handle_event(event):
                self.running = False

        if self.input_handler.reset_requested:
            self.flock.reset()
            self.input_handler.reset_requested = False

    def _update(self, dt: float):
        """Advance the simulation."""
        dt = min(dt, config.SIMULATION["max_frame_time"])

        if not self.input_handler.paused:
            for _ in range(self.input_handler.updates_per_tick):
                self.flock.update(dt)

        self.camera.follow(self.flock.centroid())

    def _render(self):
        """Render the scene."""
        glClear(GL_COLOR_BUFFER_BIT)
        self._apply_view()

        self.flock_renderer.draw(self.flock)

        # Draw HUD
        screen_size = (config.WINDOW["width"], config.WINDOW["height"])
        cx, cy = self.flock.centroid()
        state = "paused" if self.input_handler.paused else f"x{self.input_handler.updates_per_tick}"
        self.text_renderer.draw_lines([
            f"Agents: {self.flock.num_agents}  |  FPS: {self.fps:.0f}  |  Updates: {state}",
            f"Centre: ({cx:.1f}, {cy:.1f})  Heading: {self.flock.average_heading():.1f}°  "
            f"Zoom: {self.camera.zoom_level:.2f}",
        ], 10, 10, screen_size)

        pygame.display.flip()

    def run(self):
        """Main application loop."""
        while self.running:
            dt = self.clock.tick(config.WINDOW["fps_limit"]) / 1000.0
            self.fps = self.clock.get_fps()

            self._handle_events()
            self._update(dt)
            self._render()

        pygame.quit()
