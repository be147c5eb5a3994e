import math

import numpy as np
import pytest

from starfighter.actor import BehaviourStateMachine
from starfighter.actors import (
    EnemyActor,
    EnemyManager,
    PlayerActor,
    PlayerProjectile,
    RandomWayPointBehaviour,
)
from starfighter.camera import Quat
from starfighter.mesh import Mesh, Vertex


class FakeModel:
    def __init__(self):
        self.draws = 0

    def draw(self, shader):
        self.draws += 1


class FakeShader:
    def __init__(self):
        self.matrices = []

    def set_mat4(self, name, mat):
        self.matrices.append((name, np.asarray(mat)))


def _terrain(*points):
    return type("Terrain", (), {"meshes": [Mesh([Vertex(position=p) for p in points], [], [])]})()


@pytest.fixture
def manager():
    return EnemyManager(seed=7)


@pytest.fixture
def player(manager):
    return PlayerActor((0, 0, 0), Quat(0, 0, 0, 1), FakeModel(), FakeModel(), manager)


def test_projectile_defaults_and_move():
    projectile = PlayerProjectile((0, 0, -1), (1, 2, 3), Quat())
    assert projectile.projectile_speed == pytest.approx(3.4)
    assert projectile.projectile_radius == pytest.approx(50.0)
    assert projectile.has_hit is False
    projectile.move(4.0)
    assert np.allclose(projectile.position, (1, 2, -1))


def test_enemy_spawns_on_sphere_of_given_radius(manager):
    enemy = EnemyActor(FakeModel(), 100.0, manager)
    assert np.linalg.norm(enemy.position) == pytest.approx(100.0)
    assert enemy.ship_speed == pytest.approx(0.25)
    assert enemy.collision_radius == pytest.approx(50.0)


def test_initialise_enemies_within_initial_range(manager):
    manager.initialise_enemies(FakeModel())
    assert len(manager.enemy_actors) == 50
    for enemy in manager.enemy_actors:
        assert 2400.0 <= np.linalg.norm(enemy.position) <= 2800.0


def test_random_world_float_range(manager):
    values = [manager.random_world_float() for _ in range(200)]
    assert all(200.0 <= v <= 2800.0 for v in values)


def test_seeded_managers_repeat():
    a, b = EnemyManager(seed=3), EnemyManager(seed=3)
    assert [a.random_world_float() for _ in range(5)] == [b.random_world_float() for _ in range(5)]


def test_get_returns_shared_manager():
    shared = EnemyManager.get()
    assert EnemyManager.get() is shared
    assert shared.enemy_count == 50
    assert 200.0 <= shared.random_world_float() <= 2800.0


def test_steering_force(manager):
    enemy = EnemyActor(FakeModel(), 100.0, manager)
    enemy.position = np.zeros(3)
    enemy.target_position = np.array((5.0, 10.0, 0.0))
    assert np.allclose(enemy.steering_force(), (1.0, 2.0, 0.0))


def test_enemy_update_clamps_velocity(manager):
    enemy = EnemyActor(FakeModel(), 100.0, manager)
    enemy.target_position = np.array((2000.0, -2000.0, 2000.0))
    before = enemy.position.copy()
    enemy.update(1.0)
    assert np.all(np.abs(enemy.velocity) <= enemy.ship_speed + 1e-12)
    assert np.allclose(enemy.position, before + enemy.velocity)


def test_enemy_reaching_target_picks_new_one(manager):
    enemy = EnemyActor(FakeModel(), 100.0, manager)
    enemy.target_position = enemy.position.copy()
    enemy.update(1.0)
    assert 200.0 <= np.linalg.norm(enemy.target_position) <= 2800.0


def test_enemy_draw_only_when_alive(manager):
    model, shader = FakeModel(), FakeShader()
    enemy = EnemyActor(model, 100.0, manager)
    enemy.draw(shader)
    assert model.draws == 1
    name, matrix = shader.matrices[0]
    assert name == "model"
    assert np.allclose(matrix[:3, 3], enemy.position)
    enemy.is_dead = True
    enemy.draw(shader)
    assert model.draws == 1


def test_update_enemies_projectile_kills(manager):
    enemy = EnemyActor(FakeModel(), 100.0, manager)
    manager.enemy_actors.append(enemy)
    projectile = PlayerProjectile((0, 0, 1), enemy.position, Quat())
    manager.current_projectiles.append(projectile)
    manager.update_enemies(1.0, (5000.0, 0.0, 0.0))
    assert enemy.is_dead
    assert projectile.has_hit


def test_update_enemies_chases_near_player(manager):
    enemy = EnemyActor(FakeModel(), 2500.0, manager)
    manager.enemy_actors.append(enemy)
    player_pos = enemy.position + np.array((500.0, 0.0, 0.0))
    manager.update_enemies(1.0, player_pos)
    assert np.allclose(enemy.target_position, player_pos)


def test_draw_enemies_draws_living(manager):
    model = FakeModel()
    manager.enemy_actors = [EnemyActor(model, 100.0, manager) for _ in range(3)]
    manager.enemy_actors[1].is_dead = True
    manager.draw_enemies(FakeShader())
    assert model.draws == 2


def test_weapon_fire_and_cooldown(player, manager):
    player.weapon_fire()
    assert len(manager.current_projectiles) == 1
    assert player.weapon_delay == 119
    assert player.gun_one is False
    shot = manager.current_projectiles[0]
    assert np.allclose(shot.forward, player.camera.forward)
    assert shot.position[1] == pytest.approx(-1.6)
    player.weapon_fire()
    assert len(manager.current_projectiles) == 1
    assert player.gun_one is True


def test_guns_alternate_sides(player, manager):
    player.weapon_fire()
    player.weapon_delay = 120
    player.weapon_fire()
    first, second = manager.current_projectiles
    assert first.position[0] == pytest.approx(-second.position[0])


def test_weapon_delay_cycles(player, manager):
    player.weapon_fire()
    for _ in range(118):
        player.update_projectiles(1.0)
    assert player.weapon_delay == 1
    player.update_projectiles(1.0)
    assert player.weapon_delay == 120


def test_update_projectiles_moves_and_marks_out_of_world(player, manager):
    inside = PlayerProjectile((0, 0, -1), (0, 0, 0), Quat())
    outside = PlayerProjectile((1, 0, 0), (4000, 0, 0), Quat())
    manager.current_projectiles.extend([inside, outside])
    player.update_projectiles(1.0)
    assert np.allclose(inside.position, (0, 0, -3.4))
    assert inside.has_hit is False
    assert outside.has_hit is True


def test_render_projectiles_skips_hits(player, manager):
    live = PlayerProjectile((0, 0, -1), (0, 0, 0), Quat())
    dead = PlayerProjectile((0, 0, -1), (0, 0, 0), Quat())
    dead.has_hit = True
    manager.current_projectiles.extend([live, dead])
    player.render_projectiles(FakeShader())
    assert player.projectile_model.draws == 1


def test_ship_speed_limits(player):
    for _ in range(1000):
        player.increment_ship_speed()
    assert player.ship_speed == pytest.approx(player.player_max_speed)
    assert player.turn_speed == pytest.approx(1.0)
    for _ in range(1000):
        player.lower_ship_speed()
    assert player.ship_speed == pytest.approx(0.0)
    assert player.turn_speed == pytest.approx(player.player_max_turn)


def test_move_forward_over_low_terrain(player):
    player.ship_speed = 1.0
    player.move(_terrain((0, -1000, 0)), 1.0)
    assert np.allclose(player.camera.position, (0, 0, -1))
    assert player.ship_speed == pytest.approx(1.0)


def test_move_into_steep_terrain_reverses(player):
    player.ship_speed = 1.0
    before = player.camera.orientation
    player.move(_terrain((0, 5, 0)), 1.0)
    assert player.ship_speed == pytest.approx(-1.0)
    assert player.camera.orientation != before


def test_move_outside_world_reverses(player):
    player.camera.move_world_up(4000.0)
    player.ship_speed = 1.0
    player.move(_terrain((0, -10000, 0)), 1.0)
    assert player.ship_speed == pytest.approx(-1.0)


def test_player_draw(player):
    shader = FakeShader()
    player.camera.move_world_up(7.0)
    player.draw(shader)
    assert player.player_model.draws == 1
    assert np.allclose(shader.matrices[0][1][:3, 3], player.camera.position)


def test_random_waypoint_behaviour():
    behaviour = RandomWayPointBehaviour()
    other = RandomWayPointBehaviour()
    machine = BehaviourStateMachine(other)
    machine.change_state(behaviour)
    assert machine.current_state is behaviour
    assert machine.previous_state is other
    assert math.isclose(float(np.linalg.norm(behaviour.current_target)), 3000.0)
    assert behaviour.execute(None, behaviour.current_target, 1.0) is None