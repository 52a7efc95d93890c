"""
Tests for rigcam.pose.SharedPose.
"""

import numpy as np
import pytest

from rigcam.pose import SharedPose
from rigcam.rotation import angle_axis_to_rotation_matrix


class TestSharedPose:
    def test_default_is_origin_identity(self):
        pose = SharedPose()
        np.testing.assert_array_equal(pose.parameters, np.zeros(6))
        np.testing.assert_array_equal(pose.rotation_matrix(), np.eye(3))

    def test_constructor_values(self):
        pose = SharedPose(position=[1.0, 2.0, 3.0], orientation=[0.1, 0.2, 0.3])
        np.testing.assert_array_equal(pose.parameters, [1.0, 2.0, 3.0, 0.1, 0.2, 0.3])

    def test_from_vector(self):
        pose = SharedPose.from_vector(np.arange(6, dtype=np.float64))
        np.testing.assert_array_equal(pose.position, [0.0, 1.0, 2.0])
        np.testing.assert_array_equal(pose.orientation, [3.0, 4.0, 5.0])

    def test_from_vector_wrong_size(self):
        with pytest.raises(ValueError):
            SharedPose.from_vector(np.zeros(7))

    def test_parameters_view_is_read_only(self):
        pose = SharedPose()
        with pytest.raises(ValueError):
            pose.parameters[0] = 1.0

    def test_mutable_parameters_edit_in_place(self):
        pose = SharedPose()
        buffer = pose.mutable_parameters
        buffer[0:3] = [4.0, 5.0, 6.0]
        buffer[3:6] = [0.0, 0.0, np.pi / 2]

        np.testing.assert_array_equal(pose.position, [4.0, 5.0, 6.0])
        np.testing.assert_allclose(
            pose.rotation_matrix(),
            angle_axis_to_rotation_matrix(np.array([0.0, 0.0, np.pi / 2])),
        )

    def test_accessors_return_copies(self):
        pose = SharedPose(position=[1.0, 1.0, 1.0])
        position = pose.position
        position[0] = 99.0
        assert pose.position[0] == 1.0

    def test_copy_is_independent(self):
        pose = SharedPose(position=[1.0, 2.0, 3.0])
        clone = pose.copy()
        clone.position = [0.0, 0.0, 0.0]
        np.testing.assert_array_equal(pose.position, [1.0, 2.0, 3.0])
