"""Player, enemies, projectiles and the manager that ties them together."""

from __future__ import annotations

import math
import random
from typing import ClassVar

import numpy as np

from starfighter.actor import Actor, BehaviourState
from starfighter.camera import Camera, Quat, translate
from starfighter.collision import check_spheres, check_terrain, check_world_sphere
from starfighter.resources import Model

WORLD_RADIUS = 3000.0
PLAYER_MODEL_PATH = "Assets/Geometry/Ship/ship.obj"
PROJECTILE_MODEL_PATH = "Assets/Geometry/Projectile/Projectile.obj"

_WORLD_UP = (0.0, 1.0, 0.0)
_WEAPON_READY = 120
_CHASE_DISTANCE = 1000.0


def _random_direction(rng) -> np.ndarray:
    """A unit vector in a uniformly random direction."""
    while True:
        vector = np.array([rng.gauss(0.0, 1.0) for _ in range(3)])
        length = float(np.linalg.norm(vector))
        if length > 0.0:
            return vector / length


def _model_matrix(position, orientation) -> np.ndarray:
    return translate(np.identity(4), position) @ orientation.to_matrix()


class EnemyManager:
    """Owns the enemies and the player's projectiles in flight."""

    _instance: ClassVar[EnemyManager | None] = None

    def __init__(self, seed=None):
        self.rng = random.Random(seed)
        self.initial_range = (2400.0, 2800.0)
        self.world_range = (200.0, 2800.0)
        self.enemy_actors: list[EnemyActor] = []
        self.current_projectiles: list[PlayerProjectile] = []
        self.enemy_count = 50

    @classmethod
    def get(cls) -> EnemyManager:
        """The shared manager."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def initialise_enemies(self, enemy_model):
        for _ in range(self.enemy_count):
            radius = self.rng.uniform(*self.initial_range)
            self.enemy_actors.append(EnemyActor(enemy_model, radius, self))

    def random_world_float(self) -> float:
        """A random distance from the world centre for roaming targets."""
        return self.rng.uniform(*self.world_range)

    def update_enemies(self, delta_time, player_pos):
        player_pos = np.asarray(player_pos, dtype=float)
        for enemy in self.enemy_actors:
            if enemy.is_dead:
                continue
            if np.linalg.norm(player_pos - enemy.position) < _CHASE_DISTANCE:
                enemy.target_position = player_pos.copy()
            for projectile in self.current_projectiles:
                if not projectile.has_hit and check_spheres(
                    enemy.position,
                    enemy.collision_radius,
                    projectile.position,
                    projectile.projectile_radius,
                ):
                    enemy.is_dead = True
                    projectile.has_hit = True
            enemy.update(delta_time)

    def draw_enemies(self, shader):
        for enemy in self.enemy_actors:
            enemy.draw(shader)


class EnemyActor(Actor):
    """An enemy ship that roams between random points and chases the player."""

    def __init__(self, model, random_radius, manager=None):
        super().__init__("Enemy", orientation=Quat(0.0, 0.0, 0.0, 1.0))
        self.manager = manager if manager is not None else EnemyManager.get()
        self.model = model
        self.ship_speed = 0.25
        self.collision_radius = 50.0
        self.is_dead = False
        self.target_position = np.zeros(3)
        self.position = _random_direction(self.manager.rng) * random_radius

    def update(self, delta_time):
        self.orientation = Quat.look_at(self.velocity, _WORLD_UP)
        self.velocity = self.velocity + self.steering_force() * self.ship_speed
        self.velocity = np.clip(self.velocity, -self.ship_speed, self.ship_speed)
        self.position = self.position + self.velocity
        if check_spheres(self.position, self.collision_radius, self.target_position, 0.0):
            self.new_roaming_target()

    def steering_force(self) -> np.ndarray:
        desired_velocity = self.target_position - self.position
        return (desired_velocity - self.velocity) / 5.0

    def new_roaming_target(self):
        direction = _random_direction(self.manager.rng)
        self.target_position = direction * self.manager.random_world_float()

    def draw(self, shader):
        if self.is_dead:
            return
        shader.set_mat4("model", _model_matrix(self.position, self.orientation))
        self.model.draw(shader)


class PlayerProjectile(Actor):
    """A shot travelling in a straight line."""

    def __init__(self, forward, position, orientation):
        super().__init__("Player Projectile", position=position, orientation=orientation)
        self.has_hit = False
        self.projectile_speed = 3.4
        self.projectile_radius = 50.0
        self.forward = np.array(forward, dtype=float).reshape(3)

    def move(self, movement):
        self.position = self.position + self.forward * movement


class PlayerActor(Actor):
    """The player's ship, flown through its camera."""

    def __init__(self, position, orientation, player_model=None, projectile_model=None, manager=None):
        super().__init__("Player Actor", position=position, orientation=orientation)
        self.manager = manager if manager is not None else EnemyManager.get()
        self.player_lives = 3
        self.player_max_speed = 1.2
        self.player_max_turn = 2.0
        self.roll_speed = 10.0
        self.ship_speed = 0.0
        self.turn_speed = 0.0
        self.player_radius = 10.0
        self.weapon_delay = _WEAPON_READY
        self.gun_one = True
        self.camera = Camera()
        self.player_model = player_model if player_model is not None else Model(PLAYER_MODEL_PATH)
        self.projectile_model = (
            projectile_model if projectile_model is not None else Model(PROJECTILE_MODEL_PATH)
        )

    def weapon_fire(self):
        """Fire from the current gun if the weapon is ready; guns alternate."""
        if self.weapon_delay == _WEAPON_READY:
            self.weapon_delay = _WEAPON_READY - 1
            camera = self.camera
            origin = camera.position - camera.up * 1.6
            if self.gun_one:
                origin = origin - camera.left
            else:
                origin = origin + camera.left
            origin = origin + camera.forward * 10.0
            self.manager.current_projectiles.append(
                PlayerProjectile(camera.forward, origin, camera.orientation.conjugate())
            )
        self.gun_one = not self.gun_one

    def update_projectiles(self, delta_time):
        if self.weapon_delay < _WEAPON_READY:
            self.weapon_delay -= 1
        if self.weapon_delay == 0:
            self.weapon_delay = _WEAPON_READY
        for projectile in self.manager.current_projectiles:
            projectile.move(projectile.projectile_speed)
            if check_world_sphere(projectile.position, projectile.projectile_radius, WORLD_RADIUS):
                projectile.has_hit = True

    def render_projectiles(self, shader):
        for projectile in self.manager.current_projectiles:
            if projectile.has_hit:
                continue
            shader.set_mat4("model", _model_matrix(projectile.position, projectile.orientation))
            self.projectile_model.draw(shader)

    def increment_ship_speed(self):
        self.ship_speed = min(self.ship_speed + 0.005, self.player_max_speed)
        self.turn_speed = max(self.turn_speed - 0.05, 1.0)

    def lower_ship_speed(self):
        self.ship_speed = max(self.ship_speed - 0.005, 0.0)
        self.turn_speed = min(self.turn_speed + 0.05, self.player_max_turn)

    def move(self, ground, delta_time):
        contact = check_terrain(self.ship_speed, ground, self.camera.position, self.player_radius)
        self.ship_speed = contact.velocity
        if contact.hit:
            self.camera.move_world_up(self.ship_speed)
            self.camera.pitch(-150.0)
        if check_world_sphere(self.camera.position, self.player_radius, WORLD_RADIUS):
            self.ship_speed = -self.ship_speed
        self.camera.move_forward(self.ship_speed)

    def draw(self, shader):
        matrix = _model_matrix(self.camera.position, self.camera.orientation.conjugate())
        shader.set_mat4("model", matrix)
        self.player_model.draw(shader)


class RandomWayPointBehaviour(BehaviourState):
    """Picks a random point on the world sphere as its target on entry."""

    def enter(self):
        self.current_target = _random_direction(random) * WORLD_RADIUS

    def execute(self, actor, target_pos, delta_time):
        return None

    def exit(self):
        return None