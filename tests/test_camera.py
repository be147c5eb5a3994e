import math

import numpy as np
import pytest

from starfighter.camera import Camera, Quat, perspective, translate


def test_new_camera_at_origin_with_identity_orientation():
    cam = Camera()
    assert np.allclose(cam.position, 0.0)
    assert cam.orientation == Quat(1.0, 0.0, 0.0, 0.0)


def test_default_axes():
    cam = Camera()
    assert np.allclose(cam.forward, (0.0, 0.0, -1.0))
    assert np.allclose(cam.left, (-1.0, 0.0, 0.0))
    assert np.allclose(cam.up, (0.0, 1.0, 0.0))


def test_axes_stay_orthonormal_after_rotations():
    cam = Camera()
    cam.pitch(30)
    cam.yaw(-45)
    cam.roll(12)
    f, left, u = cam.forward, cam.left, cam.up
    for axis in (f, left, u):
        assert np.linalg.norm(axis) == pytest.approx(1.0)
    assert f @ u == pytest.approx(0.0, abs=1e-9)
    assert f @ left == pytest.approx(0.0, abs=1e-9)
    assert np.allclose(np.cross(f, u), -left)


def test_rotate_matches_rotate_by():
    a, b = Camera(), Camera()
    a.rotate(40, (0.0, 1.0, 0.0))
    b.rotate_by(Quat.from_angle_axis(math.radians(40), (0.0, 1.0, 0.0)))
    qa, qb = a.orientation, b.orientation
    assert np.allclose((qa.w, qa.x, qa.y, qa.z), (qb.w, qb.x, qb.y, qb.z))


def test_pitch_hands_radians_to_rotate():
    a, b = Camera(), Camera()
    a.pitch(90)
    b.rotate(math.radians(90), (1.0, 0.0, 0.0))
    qa, qb = a.orientation, b.orientation
    assert np.allclose((qa.w, qa.x, qa.y, qa.z), (qb.w, qb.x, qb.y, qb.z))


def test_move_forward_follows_forward_axis():
    cam = Camera()
    cam.yaw(25)
    forward = cam.forward
    cam.move_forward(7.0)
    assert np.allclose(cam.position, forward * 7.0)


def test_move_left_and_up_follow_axes():
    cam = Camera()
    cam.roll(20)
    left, up = cam.left, cam.up
    cam.move_left(2.0)
    cam.move_up(3.0)
    assert np.allclose(cam.position, left * 2.0 + up * 3.0)


def test_move_world_up_ignores_orientation():
    cam = Camera()
    cam.roll(50)
    cam.pitch(10)
    cam.move_world_up(3.0)
    assert np.allclose(cam.position, (0.0, 3.0, 0.0))


def test_identity_camera_view_is_identity():
    assert np.allclose(Camera().view_matrix(), np.identity(4))


def test_view_matrix_maps_camera_position_to_origin():
    cam = Camera()
    cam.yaw(33)
    cam.move_forward(10.0)
    cam.move_left(-4.0)
    view = cam.view_matrix()
    assert np.allclose(view @ np.append(cam.position, 1.0), (0.0, 0.0, 0.0, 1.0))


def test_view_matrix_sends_forward_to_negative_z():
    cam = Camera()
    cam.pitch(15)
    cam.yaw(70)
    assert np.allclose(cam.view_matrix()[:3, :3] @ cam.forward, (0.0, 0.0, -1.0))


def test_quat_times_conjugate_is_identity():
    q = Quat.from_angle_axis(1.1, np.array((1.0, 2.0, 2.0)) / 3.0)
    product = q * q.conjugate()
    assert np.allclose((product.w, product.x, product.y, product.z), (1.0, 0.0, 0.0, 0.0))


def test_quat_matrix_is_rotation_and_agrees_with_rotate():
    q = Quat.from_angle_axis(0.7, np.array((0.0, 0.6, 0.8)))
    m = q.to_matrix()[:3, :3]
    assert np.allclose(m.T @ m, np.identity(3))
    assert np.linalg.det(m) == pytest.approx(1.0)
    v = np.array((0.3, -1.2, 2.5))
    assert np.allclose(m @ v, q.rotate(v))


def test_zero_quat_normalizes_to_identity():
    assert Quat(0.0, 0.0, 0.0, 0.0).normalized() == Quat()


def test_quarter_turn_about_z():
    q = Quat.from_angle_axis(math.pi / 2, (0.0, 0.0, 1.0))
    assert np.allclose(q.rotate((1.0, 0.0, 0.0)), (0.0, 1.0, 0.0))


def test_quat_multiplied_by_number_is_rejected():
    with pytest.raises(TypeError):
        Quat() * 3


def test_look_at_points_negative_z_along_direction():
    direction = np.array((1.0, 2.0, -2.0)) / 3.0
    q = Quat.look_at(direction, (0.0, 1.0, 0.0))
    assert np.allclose(q.rotate((0.0, 0.0, -1.0)), direction)
    assert q.rotate((0.0, 1.0, 0.0)) @ direction == pytest.approx(0.0, abs=1e-9)


def test_translate_moves_origin():
    m = translate(np.identity(4), (1.0, 2.0, 3.0))
    assert np.allclose(m @ np.array((0.0, 0.0, 0.0, 1.0)), (1.0, 2.0, 3.0, 1.0))


def test_translate_composes():
    a, b = np.array((1.0, -2.0, 0.5)), np.array((4.0, 0.0, -3.0))
    assert np.allclose(translate(translate(np.identity(4), a), b), translate(np.identity(4), a + b))


def test_perspective_maps_near_and_far_planes():
    near, far = 0.1, 100000.0
    proj = perspective(math.radians(90.0), 1920 / 1080, near, far)
    assert proj[3, 2] == -1.0
    clip_near = proj @ np.array((0.0, 0.0, -near, 1.0))
    clip_far = proj @ np.array((0.0, 0.0, -far, 1.0))
    assert clip_near[2] / clip_near[3] == pytest.approx(-1.0)
    assert clip_far[2] / clip_far[3] == pytest.approx(1.0)