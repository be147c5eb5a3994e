"""Sphere and terrain collision tests."""

from __future__ import annotations

from typing import NamedTuple

import numpy as np

_SEARCH_DISTANCE = 1000.0
_STEEP_INCLINE = 0.6


class TerrainContact(NamedTuple):
    hit: bool
    velocity: float


def check_terrain(velocity, terrain, entity_position, entity_radius) -> TerrainContact:
    """Test a sphere against the nearest vertex of the terrain's first mesh.

    The velocity comes back negated when the terrain rises steeply into the sphere.
    """
    if not terrain.meshes or not terrain.meshes[0].vertices:
        raise ValueError("terrain has no vertices")
    vertices = terrain.meshes[0].vertices
    position = np.asarray(entity_position, dtype=float)
    heights = np.array([v.position for v in vertices])
    distances = np.linalg.norm(heights - position, axis=1)
    nearest = int(np.argmin(distances)) if distances.min() < _SEARCH_DISTANCE else 0
    ground = float(heights[nearest][1])
    bottom = float(position[1]) - entity_radius

    if ground - bottom > _STEEP_INCLINE:
        velocity = -velocity
    return TerrainContact(ground > bottom, velocity)


def check_spheres(sphere_1_pos, sphere_1_rad, sphere_2_pos, sphere_2_rad) -> bool:
    """True when the two spheres overlap."""
    distance = np.linalg.norm(np.asarray(sphere_1_pos, dtype=float) - np.asarray(sphere_2_pos, dtype=float))
    return bool(distance < sphere_1_rad + sphere_2_rad)


def check_world_sphere(entity_pos, entity_rad, world_sphere_rad) -> bool:
    """True when the entity lies wholly outside the world sphere around the origin."""
    return bool(np.linalg.norm(np.asarray(entity_pos, dtype=float)) > entity_rad + world_sphere_rad)