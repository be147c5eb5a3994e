"""Quaternion maths, matrix helpers and a free-flying camera."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

_WORLD_UP = np.array((0.0, 1.0, 0.0))


def _vec3(value) -> np.ndarray:
    return np.asarray(value, dtype=float).reshape(3)


@dataclass(frozen=True)
class Quat:
    """A rotation quaternion stored as (w, x, y, z)."""

    w: float = 1.0
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @classmethod
    def from_angle_axis(cls, angle, axis) -> Quat:
        """Rotation of ``angle`` radians about ``axis`` (the axis is used as given)."""
        half = angle * 0.5
        s = math.sin(half)
        ax, ay, az = _vec3(axis)
        return cls(math.cos(half), float(ax) * s, float(ay) * s, float(az) * s)

    @classmethod
    def look_at(cls, direction, up) -> Quat:
        """Orientation whose -Z axis points along ``direction``."""
        back = -_vec3(direction)
        right = np.cross(_vec3(up), back)
        right = right / math.sqrt(max(1e-5, float(right @ right)))
        true_up = np.cross(back, right)
        return cls._from_basis(right, true_up, back)

    @classmethod
    def _from_basis(cls, c0, c1, c2) -> Quat:
        # m[column][row], as in a column-major rotation matrix
        m = (c0, c1, c2)
        four_w = m[0][0] + m[1][1] + m[2][2]
        four_x = m[0][0] - m[1][1] - m[2][2]
        four_y = m[1][1] - m[0][0] - m[2][2]
        four_z = m[2][2] - m[0][0] - m[1][1]
        biggest_index, biggest = 0, four_w
        for index, candidate in ((1, four_x), (2, four_y), (3, four_z)):
            if candidate > biggest:
                biggest_index, biggest = index, candidate
        big = math.sqrt(biggest + 1.0) * 0.5
        mult = 0.25 / big
        if biggest_index == 0:
            return cls(big, (m[1][2] - m[2][1]) * mult, (m[2][0] - m[0][2]) * mult, (m[0][1] - m[1][0]) * mult)
        if biggest_index == 1:
            return cls((m[1][2] - m[2][1]) * mult, big, (m[0][1] + m[1][0]) * mult, (m[2][0] + m[0][2]) * mult)
        if biggest_index == 2:
            return cls((m[2][0] - m[0][2]) * mult, (m[0][1] + m[1][0]) * mult, big, (m[1][2] + m[2][1]) * mult)
        return cls((m[0][1] - m[1][0]) * mult, (m[2][0] + m[0][2]) * mult, (m[1][2] + m[2][1]) * mult, big)

    def __mul__(self, other):
        if not isinstance(other, Quat):
            return NotImplemented
        w1, x1, y1, z1 = self.w, self.x, self.y, self.z
        w2, x2, y2, z2 = other.w, other.x, other.y, other.z
        return Quat(
            w1 * w2 - x1 * x2 - y1 * y2 - z1 * z2,
            w1 * x2 + x1 * w2 + y1 * z2 - z1 * y2,
            w1 * y2 + y1 * w2 + z1 * x2 - x1 * z2,
            w1 * z2 + z1 * w2 + x1 * y2 - y1 * x2,
        )

    def conjugate(self) -> Quat:
        return Quat(self.w, -self.x, -self.y, -self.z)

    def normalized(self) -> Quat:
        """Unit-length copy; a zero quaternion becomes the identity."""
        length = math.sqrt(self.w**2 + self.x**2 + self.y**2 + self.z**2)
        if length <= 0.0:
            return Quat()
        return Quat(self.w / length, self.x / length, self.y / length, self.z / length)

    def rotate(self, vector) -> np.ndarray:
        """Rotate a 3-vector by this (unit) quaternion."""
        v = _vec3(vector)
        u = np.array((self.x, self.y, self.z))
        t = 2.0 * np.cross(u, v)
        return v + self.w * t + np.cross(u, t)

    def to_matrix(self) -> np.ndarray:
        """4x4 rotation matrix (row-major, acting on column vectors)."""
        w, x, y, z = self.w, self.x, self.y, self.z
        return np.array(
            (
                (1 - 2 * (y * y + z * z), 2 * (x * y - w * z), 2 * (x * z + w * y), 0.0),
                (2 * (x * y + w * z), 1 - 2 * (x * x + z * z), 2 * (y * z - w * x), 0.0),
                (2 * (x * z - w * y), 2 * (y * z + w * x), 1 - 2 * (x * x + y * y), 0.0),
                (0.0, 0.0, 0.0, 1.0),
            )
        )


def translate(matrix, offset) -> np.ndarray:
    """Return ``matrix`` followed by a translation by ``offset``."""
    translation = np.identity(4)
    translation[:3, 3] = _vec3(offset)
    return np.asarray(matrix, dtype=float) @ translation


def perspective(fovy, aspect, near, far) -> np.ndarray:
    """Right-handed perspective projection with clip depth in [-1, 1]."""
    tan_half = math.tan(fovy / 2.0)
    result = np.zeros((4, 4))
    result[0, 0] = 1.0 / (aspect * tan_half)
    result[1, 1] = 1.0 / tan_half
    result[2, 2] = -(far + near) / (far - near)
    result[2, 3] = -(2.0 * far * near) / (far - near)
    result[3, 2] = -1.0
    return result


class Camera:
    """A camera with a position and a quaternion orientation."""

    def __init__(self):
        self._position = np.zeros(3)
        self._orientation = Quat(0.0, 0.0, 0.0, 0.0).normalized()

    # The per-axis helpers hand radians to rotate(), which converts once more;
    # the game's turn and roll rates are tuned around that.
    def pitch(self, degrees):
        self.rotate(math.radians(degrees), (1.0, 0.0, 0.0))

    def yaw(self, degrees):
        self.rotate(math.radians(degrees), (0.0, 1.0, 0.0))

    def roll(self, degrees):
        self.rotate(math.radians(degrees), (0.0, 0.0, 1.0))

    def rotate(self, angle_degrees, axis):
        self.rotate_by(Quat.from_angle_axis(math.radians(angle_degrees), axis))

    def rotate_by(self, rotation):
        self._orientation = rotation * self._orientation

    @property
    def position(self) -> np.ndarray:
        return self._position.copy()

    @property
    def orientation(self) -> Quat:
        return self._orientation

    @property
    def forward(self) -> np.ndarray:
        return self._orientation.conjugate().rotate((0.0, 0.0, -1.0))

    @property
    def left(self) -> np.ndarray:
        return self._orientation.conjugate().rotate((-1.0, 0.0, 0.0))

    @property
    def up(self) -> np.ndarray:
        return self._orientation.conjugate().rotate((0.0, 1.0, 0.0))

    def move_forward(self, movement):
        self._position = self._position + self.forward * movement

    def move_left(self, movement):
        self._position = self._position + self.left * movement

    def move_up(self, movement):
        self._position = self._position + self.up * movement

    def move_world_up(self, movement):
        self._position = self._position + _WORLD_UP * movement

    def view_matrix(self) -> np.ndarray:
        return translate(self._orientation.to_matrix(), -self._position)