"""Scenes: a window, per-frame input, update and render, and the scene manager."""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from functools import cached_property
from typing import ClassVar

CONTROL_ESCAPE = "escape"
CONTROL_FIRE = "mouse_left"
CONTROL_FASTER = "w"
CONTROL_SLOWER = "s"
CONTROL_ROLL_LEFT = "a"
CONTROL_ROLL_RIGHT = "d"


class SceneError(Exception):
    """A scene could not be set up or switched to."""


class Scene(ABC):
    """One screen of the game with its own window, input handling and drawing.

    The window is opened the first time ``window`` is read.
    """

    def __init__(self, title, width, height):
        if width <= 0 or height <= 0:
            raise SceneError(f"invalid window size {width}x{height}")
        self.title = str(title)
        self.s_width = int(width)
        self.s_height = int(height)
        self.delta_time = 0.0
        self.last_frame = 0.0
        self.last_x = self.s_width / 2.0
        self.last_y = self.s_height / 2.0
        self.first_mouse = True
        self.should_close = False
        self._started = time.perf_counter()

    def _elapsed(self) -> float:
        """Seconds since the scene was created."""
        return time.perf_counter() - self._started

    @cached_property
    def window(self):
        """The scene's OpenGL 3.3 core window, opened on first use."""
        try:
            import pyglet
            from pyglet import gl

            config = gl.Config(
                major_version=3,
                minor_version=3,
                forward_compatible=True,
                double_buffer=True,
                depth_size=24,
            )
            window = pyglet.window.Window(
                self.s_width, self.s_height, self.title, config=config, vsync=False
            )
        except Exception as exc:
            raise SceneError(f"Failed to create window: {exc}") from exc
        window.set_exclusive_mouse(True)
        gl.glEnable(gl.GL_DEPTH_TEST)
        return window

    def _close_window(self):
        window = self.__dict__.pop("window", None)
        if window is not None:
            window.close()

    @abstractmethod
    def render(self):
        """Draw one frame."""

    @abstractmethod
    def update(self):
        """Advance the scene by one tick."""

    @abstractmethod
    def close(self):
        """Finish with the scene."""

    @abstractmethod
    def handle_input(self, window):
        """React to the controls currently held down (a collection of control names)."""

    @abstractmethod
    def handle_mouse(self, x_pos, y_pos):
        """React to the pointer at a position measured from the top-left corner."""

    def on_resize(self, width, height):
        """Keep the viewport matched to the framebuffer."""
        from pyglet import gl

        gl.glViewport(0, 0, int(width), int(height))


class SceneManager:
    """Knows which scene is current."""

    _instance: ClassVar[SceneManager | None] = None

    def __init__(self):
        self.current_scene: Scene | None = None
        self.previous_scene: Scene | None = None
        self.width = 1920
        self.height = 1080

    @classmethod
    def get(cls) -> SceneManager:
        """The shared manager."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def set_scene(self, scene):
        if self.current_scene is not None and self.current_scene is not scene:
            self.previous_scene = self.current_scene
        self.current_scene = scene

    def to_previous_scene(self):
        if self.previous_scene is None:
            raise SceneError("no previous scene")
        self.current_scene = self.previous_scene