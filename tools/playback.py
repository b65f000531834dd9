"""
Flock Recording Playback
========================

Plays back frames written by tools.record at any speed.

Usage:
    python -m tools.playback <session_name>                # Playback with defaults
    python -m tools.playback <session_name> --fps 30       # Frames shown per second
    python -m tools.playback <session_name> --speed 2.0    # 2x playback speed
    python -m tools.playback <session_name> --loop         # Loop playback

Controls during playback:
    SPACE       - Pause/Resume
    LEFT/RIGHT  - Step frame
    UP/DOWN     - Adjust playback speed
    R           - Restart from beginning
    L           - Toggle loop mode
    Scroll      - Zoom in/out
    ESC         - Quit
"""

import argparse
import numpy as np

import pygame
from pygame.locals import *
from OpenGL.GL import *

from config import boids as config
from core.camera import Camera
from rendering import FlockRenderer, TextRenderer
from tools.record import (
    get_recordings_root, load_metadata, get_completed_frames, load_frame
)


class PlaybackApp:
    """Playback application for recorded flock sessions."""

    def __init__(self, session_name: str, fps: int = None, loop: bool = False,
                 initial_speed: float = 1.0):
        self.session_name = session_name
        self.rec_dir = get_recordings_root() / session_name
        self.metadata = load_metadata(self.rec_dir)
        self.frame_count = get_completed_frames(self.rec_dir)
        if self.frame_count == 0:
            raise FileNotFoundError(f"Recording '{session_name}' has no frames")

        self.target_fps = fps or self.metadata["fps"]
        self.loop = loop
        self.speed = initial_speed
        self.current_frame = 0
        self.playing = True
        self.running = True

        # Sequential reads reuse the previous frame for delta decoding
        self._cached_idx = -1
        self._cached_frame = None

        self.width = config.WINDOW["width"]
        self.height = config.WINDOW["height"]
        pygame.init()
        pygame.display.set_mode((self.width, self.height), DOUBLEBUF | OPENGL)
        pygame.display.set_caption(f"{config.WINDOW['title']} - {session_name}")

        self.camera = Camera()
        self.flock_renderer = FlockRenderer()
        self.text_renderer = TextRenderer()
        self.clock = pygame.time.Clock()

        glClearColor(*config.COLORS["background"])

    def _handle_events(self):
        for event in pygame.event.get():
            if event.type == QUIT:
                self.running = False
            elif event.type == KEYDOWN:
                if event.key == K_ESCAPE:
                    self.running = False
                elif event.key == K_SPACE:
                    self.playing = not self.playing
                elif event.key == K_LEFT:
                    self.current_frame = max(0, self.current_frame - 1)
                elif event.key == K_RIGHT:
                    self.current_frame = min(self.frame_count - 1, self.current_frame + 1)
                elif event.key == K_UP:
                    self.speed = min(8.0, self.speed * 1.5)
                elif event.key == K_DOWN:
                    self.speed = max(0.1, self.speed / 1.5)
                elif event.key == K_r:
                    self.current_frame = 0
                elif event.key == K_l:
                    self.loop = not self.loop
            elif event.type == MOUSEWHEEL:
                step = config.VIEW["zoom_step"]
                self.camera.zoom(1 / step if event.y > 0 else step)

    def _get_frame_data(self, idx: int) -> tuple:
        if idx == self._cached_idx:
            return self._cached_frame

        prev_positions = None
        if idx == self._cached_idx + 1 and self._cached_frame is not None:
            prev_positions = self._cached_frame[0]

        self._cached_frame = load_frame(self.rec_dir, idx, prev_positions)
        self._cached_idx = idx
        return self._cached_frame

    def _render(self):
        glClear(GL_COLOR_BUFFER_BIT)

        positions, headings = self._get_frame_data(self.current_frame)
        centroid = positions.astype(np.float64).mean(axis=0)
        self.camera.follow(centroid)

        left, right, top, bottom = self.camera.bounds()
        glMatrixMode(GL_PROJECTION)
        glLoadIdentity()
        glOrtho(left, right, bottom, top, -1, 1)
        glMatrixMode(GL_MODELVIEW)
        glLoadIdentity()

        self.flock_renderer.draw_arrays(positions, headings)
        self.flock_renderer.draw_marker(centroid)

        status = "playing" if self.playing else "paused"
        loop_status = " | loop" if self.loop else ""
        self.text_renderer.draw_lines([
            f"{status} Frame {self.current_frame+1}/{self.frame_count} | "
            f"Speed: {self.speed:.1f}x | FPS: {self.clock.get_fps():.0f}{loop_status}",
        ], 10, 10, (self.width, self.height))

        pygame.display.flip()

    def run(self):
        print(f"\n[Playback] {self.session_name}: {self.frame_count} frames, "
              f"{self.metadata['num_agents']} agents at {self.target_fps} FPS")
        print("[Playback] Controls: SPACE=pause, ←→=frame, ↑↓=speed, R=restart, L=loop, ESC=quit\n")

        frame_accumulator = 0.0

        while self.running:
            dt = self.clock.tick(config.WINDOW["fps_limit"]) / 1000.0
            self._handle_events()

            if self.playing:
                frame_accumulator += dt * self.target_fps * self.speed

                while frame_accumulator >= 1.0:
                    frame_accumulator -= 1.0
                    self.current_frame += 1

                    if self.current_frame >= self.frame_count:
                        if self.loop:
                            self.current_frame = 0
                            frame_accumulator = 0.0
                        else:
                            self.current_frame = self.frame_count - 1
                            self.playing = False
                            break

            self._render()

        pygame.quit()


def main():
    parser = argparse.ArgumentParser(
        description="2D boids recording playback",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m tools.playback session_name                # Recorded frame rate
  python -m tools.playback session_name --fps 30       # 30 frames per second
  python -m tools.playback session_name --speed 2.0    # 2x playback speed
        """
    )
    parser.add_argument("session", nargs="?", help="Recording session name")
    parser.add_argument("--fps", type=int, help="Playback FPS (default: recorded fps)")
    parser.add_argument("--loop", action="store_true", help="Loop playback")
    parser.add_argument("--speed", type=float, default=1.0,
                        help="Initial playback speed multiplier (default: 1.0, range: 0.1-8.0)")
    args = parser.parse_args()

    if not args.session:
        print("[Playback] Error: Session name required")
        print("[Playback] Usage: python -m tools.playback <session_name> [options]")
        return

    if not (get_recordings_root() / args.session / "metadata.json").exists():
        print(f"[Playback] No recording found: {args.session}")
        print("[Playback] Run: python -m tools.record --list")
        return

    speed = args.speed
    if speed < 0.1 or speed > 8.0:
        print(f"[Playback] Warning: Speed {speed} out of range, clamping to 0.1-8.0")
        speed = max(0.1, min(8.0, speed))

    app = PlaybackApp(args.session, fps=args.fps, loop=args.loop, initial_speed=speed)
    app.run()


if __name__ == "__main__":
    main()
