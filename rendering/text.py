"""HUD text drawn over the world view."""

import pygame
from OpenGL.GL import *

from config import boids as config


class TextRenderer:
    """Renders lines of HUD text with pygame fonts into the OpenGL framebuffer."""

    def __init__(self, font_name: str = "monospace", font_size: int = 18,
                 line_spacing: int = 25):
        pygame.font.init()
        self.font = pygame.font.SysFont(font_name, font_size)
        self.line_spacing = line_spacing
        self.color = config.COLORS["text"]

    def draw_lines(self, lines, x: int, y: int, screen_size: tuple, color=None):
        """
        Draw several lines of text, top-down from (x, y).

        Args:
            lines: Strings to render, one per line
            x: X position from left edge
            y: Y position of the first line from top edge
            screen_size: (width, height) of the screen
            color: RGB 0-255, defaults to config.COLORS["text"]
        """
        width, height = screen_size
        color = color or self.color

        # Screen-space projection; the world projection is restored afterwards
        glMatrixMode(GL_PROJECTION)
        glPushMatrix()
        glLoadIdentity()
        glOrtho(0, width, 0, height, -1, 1)
        glMatrixMode(GL_MODELVIEW)
        glPushMatrix()
        glLoadIdentity()

        glEnable(GL_BLEND)
        glBlendFunc(GL_SRC_ALPHA, GL_ONE_MINUS_SRC_ALPHA)
        for row, text in enumerate(lines):
            surface = self.font.render(text, True, color)
            data = pygame.image.tostring(surface, "RGBA", True)
            w, h = surface.get_size()
            glRasterPos2f(x, height - (y + row * self.line_spacing) - h)
            glDrawPixels(w, h, GL_RGBA, GL_UNSIGNED_BYTE, data)
        glDisable(GL_BLEND)

        glPopMatrix()
        glMatrixMode(GL_PROJECTION)
        glPopMatrix()
        glMatrixMode(GL_MODELVIEW)
