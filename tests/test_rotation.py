"""
Tests for rigcam.rotation.
"""

import numpy as np
import pytest

from rigcam.rotation import (
    angle_axis_to_rotation_matrix,
    compose_rotation,
    remove_local_rotation,
    rotation_matrix_to_angle_axis,
)


class TestAngleAxisToRotationMatrix:
    def test_zero_is_identity(self):
        R = angle_axis_to_rotation_matrix(np.zeros(3))
        np.testing.assert_array_equal(R, np.eye(3))

    def test_quarter_turn_about_z(self):
        R = angle_axis_to_rotation_matrix(np.array([0.0, 0.0, np.pi / 2]))
        expected = np.array([
            [0, -1, 0],
            [1, 0, 0],
            [0, 0, 1],
        ], dtype=np.float64)
        np.testing.assert_allclose(R, expected, atol=1e-15)

    def test_proper_rotation(self):
        R = angle_axis_to_rotation_matrix(np.array([0.7, -1.1, 0.4]))
        np.testing.assert_allclose(R @ R.T, np.eye(3), atol=1e-14)
        assert np.linalg.det(R) == pytest.approx(1.0)

    def test_tiny_angle_uses_first_order(self):
        """Near zero the axis is undefined; the result must stay finite."""
        w = np.array([1e-10, -2e-10, 5e-11])
        R = angle_axis_to_rotation_matrix(w)
        skew = np.array([
            [0, -w[2], w[1]],
            [w[2], 0, -w[0]],
            [-w[1], w[0], 0],
        ])
        np.testing.assert_allclose(R, np.eye(3) + skew, atol=1e-18)

    def test_full_turn_wraps(self):
        """angle + 2*pi gives the same rotation."""
        axis = np.array([1.0, 2.0, -0.5])
        axis /= np.linalg.norm(axis)
        R1 = angle_axis_to_rotation_matrix(axis * 0.8)
        R2 = angle_axis_to_rotation_matrix(axis * (0.8 + 2 * np.pi))
        np.testing.assert_allclose(R1, R2, atol=1e-14)


class TestRotationMatrixToAngleAxis:
    def test_roundtrip(self):
        w = np.array([0.3, -0.2, 0.9])
        recovered = rotation_matrix_to_angle_axis(angle_axis_to_rotation_matrix(w))
        np.testing.assert_allclose(recovered, w, atol=1e-12)

    def test_identity(self):
        np.testing.assert_allclose(rotation_matrix_to_angle_axis(np.eye(3)), 0.0, atol=1e-15)

    def test_near_pi(self):
        axis = np.array([0.0, 1.0, 1.0]) / np.sqrt(2.0)
        R = angle_axis_to_rotation_matrix(axis * (np.pi - 1e-3))
        recovered = rotation_matrix_to_angle_axis(R)
        np.testing.assert_allclose(
            angle_axis_to_rotation_matrix(recovered), R, atol=1e-9
        )

    def test_wrong_shape(self):
        with pytest.raises(ValueError):
            rotation_matrix_to_angle_axis(np.eye(4))


class TestComposeRotation:
    def test_local_then_pose(self):
        local = angle_axis_to_rotation_matrix(np.array([0.0, 0.0, 0.5]))
        pose_aa = np.array([0.2, 0.1, -0.3])
        expected = local @ angle_axis_to_rotation_matrix(pose_aa)
        np.testing.assert_allclose(compose_rotation(local, pose_aa), expected, atol=1e-15)

    def test_identity_local(self):
        pose_aa = np.array([0.2, 0.1, -0.3])
        np.testing.assert_allclose(
            compose_rotation(np.eye(3), pose_aa),
            angle_axis_to_rotation_matrix(pose_aa),
            atol=1e-15,
        )

    def test_remove_local_rotation_inverts_compose(self):
        local = angle_axis_to_rotation_matrix(np.array([0.4, 0.0, 0.1]))
        pose_aa = np.array([-0.5, 0.3, 0.2])
        effective = compose_rotation(local, pose_aa)
        np.testing.assert_allclose(
            remove_local_rotation(local, effective),
            angle_axis_to_rotation_matrix(pose_aa),
            atol=1e-14,
        )
