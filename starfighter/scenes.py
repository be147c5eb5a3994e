"""The game scene and the main-menu scene."""

from __future__ import annotations

import math
from functools import cached_property
from pathlib import Path

import numpy as np

from starfighter.actors import EnemyManager, PlayerActor
from starfighter.camera import Camera, Quat, perspective
from starfighter.resources import Model, ResourceManager
from starfighter.scene import (
    CONTROL_ESCAPE,
    CONTROL_FASTER,
    CONTROL_FIRE,
    CONTROL_ROLL_LEFT,
    CONTROL_ROLL_RIGHT,
    CONTROL_SLOWER,
    Scene,
)
from starfighter.shader import Shader

GAME_TITLE = "Space Shooter - Game"
MENU_TITLE = "Space Shooter - Main Menu"

VERTEX_SHADER_PATH = "Shaders/Vertex/vertex.glsl"
FRAGMENT_SHADER_PATH = "Shaders/Fragment/fragment.glsl"
SKY_FRAGMENT_SHADER_PATH = "Shaders/Fragment/sky_fragment.glsl"

SKY_SPHERE_PATH = "Assets/Geometry/SkySphere/SkySphere.obj"
GROUND_PATH = "Assets/Geometry/Ground/ground.obj"
ENEMY_SHIP_PATH = "Assets/Geometry/EnemyShip/enemy_ship.obj"
PLAYER_SHIP_PATH = "Assets/Geometry/Ship/ship.obj"
PROJECTILE_PATH = "Assets/Geometry/Projectile/Projectile.obj"

_FIELD_OF_VIEW = math.radians(90.0)
_NEAR_PLANE = 0.1
_FAR_PLANE = 100000.0


def _asset(path):
    """Resolve an asset path against the working directory."""
    return Path(path).resolve().as_posix()


class _WorldScene(Scene):
    """A scene that draws the sky sphere and the ground from some camera."""

    def __init__(self, title, width, height):
        super().__init__(title, width, height)
        self.resources = ResourceManager.get()
        self.sky_sphere = Model(_asset(SKY_SPHERE_PATH), resources=self.resources)
        self.ground = Model(_asset(GROUND_PATH), resources=self.resources)

    @cached_property
    def default_shader(self) -> Shader:
        return Shader(VERTEX_SHADER_PATH, FRAGMENT_SHADER_PATH)

    @cached_property
    def sky_shader(self) -> Shader:
        return Shader(VERTEX_SHADER_PATH, SKY_FRAGMENT_SHADER_PATH)

    def _render_world(self, view, eye):
        """Clear the frame and draw sky and ground; leaves the default shader in use."""
        from pyglet import gl

        gl.glClearColor(1.0, 1.0, 1.0, 1.0)
        gl.glClear(gl.GL_COLOR_BUFFER_BIT | gl.GL_DEPTH_BUFFER_BIT)

        projection = perspective(_FIELD_OF_VIEW, self.s_width / self.s_height, _NEAR_PLANE, _FAR_PLANE)
        model = np.identity(4)

        sky = self.sky_shader
        sky.use()
        gl.glDepthMask(gl.GL_FALSE)
        sky.set_mat4("model", model)
        sky.set_mat4("projection", projection)
        sky.set_mat4("view", view)
        self.sky_sphere.draw(sky)
        gl.glDepthMask(gl.GL_TRUE)

        shader = self.default_shader
        shader.use()
        shader.set_mat4("model", model)
        shader.set_mat4("projection", projection)
        shader.set_mat4("view", view)
        shader.set_vec3("view_pos", eye)
        self.ground.draw(shader)
        return shader

    def _shut_down(self):
        self.should_close = True
        self._close_window()


class GameScene(_WorldScene):
    """The player flying around the world and shooting enemies."""

    def __init__(self, width, height):
        super().__init__(GAME_TITLE, width, height)
        self.enemy_ship = Model(_asset(ENEMY_SHIP_PATH), resources=self.resources)
        player_model = Model(_asset(PLAYER_SHIP_PATH), resources=self.resources)
        projectile_model = Model(_asset(PROJECTILE_PATH), resources=self.resources)
        self.enemies = EnemyManager.get()
        self.player_actor = PlayerActor(
            (0.0, 0.0, 0.0),
            Quat(0.0, 0.0, 0.0, 1.0),
            player_model,
            projectile_model,
            self.enemies,
        )
        self.enemies.initialise_enemies(self.enemy_ship)

    def render(self):
        camera = self.player_actor.camera
        shader = self._render_world(camera.view_matrix(), camera.position)
        self.enemies.draw_enemies(shader)
        self.player_actor.draw(shader)
        self.player_actor.render_projectiles(shader)

    def update(self):
        current_frame = self._elapsed()
        self.delta_time = current_frame - self.last_frame
        self.last_frame = current_frame
        self.delta_time += 1.0

        self.enemies.update_enemies(1.0, self.player_actor.camera.position)
        self.player_actor.update_projectiles(1.0)

    def close(self):
        self._shut_down()

    def handle_input(self, window):
        held = set(window)
        player = self.player_actor
        if CONTROL_ESCAPE in held:
            self.should_close = True
        if CONTROL_FIRE in held:
            player.weapon_fire()
        if CONTROL_FASTER in held:
            player.increment_ship_speed()
        if CONTROL_SLOWER in held:
            player.lower_ship_speed()
        if CONTROL_ROLL_LEFT in held:
            player.camera.roll(-player.roll_speed)
        if CONTROL_ROLL_RIGHT in held:
            player.camera.roll(player.roll_speed)
        player.move(self.ground, self.delta_time)

    def handle_mouse(self, x_pos, y_pos):
        x_pos = float(x_pos)
        y_pos = float(y_pos)
        if self.first_mouse:
            self.last_x = x_pos
            self.last_y = y_pos
            self.first_mouse = False

        x_offset = x_pos - self.last_x
        y_offset = self.last_y - y_pos  # screen y grows downwards
        self.last_x = x_pos
        self.last_y = y_pos

        player = self.player_actor
        player.camera.yaw(x_offset * player.turn_speed)
        player.camera.pitch(-y_offset * player.turn_speed)


class MenuScene(_WorldScene):
    """A still view over the world behind the main menu."""

    def __init__(self, width, height):
        super().__init__(MENU_TITLE, width, height)
        self.camera = Camera()
        self.camera.rotate(140.0, (0.0, 1.0, 0.0))
        self.camera.move_up(-1600.0)

    def render(self):
        self._render_world(self.camera.view_matrix(), self.camera.position)

    def update(self):
        return None

    def close(self):
        self._shut_down()

    def handle_input(self, window):
        return None

    def handle_mouse(self, x_pos, y_pos):
        return None