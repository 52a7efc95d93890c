"""
Tests for rigcam.types layout and dataclasses.
"""

import numpy as np
import pytest

from rigcam.types import (
    INTRINSICS_SIZE,
    POSE_SIZE,
    CameraIntrinsics,
    IntrinsicsIndex,
    PoseIndex,
    intrinsics_from_vector,
    intrinsics_to_vector,
    pose_to_vector,
)


class TestParameterLayout:
    def test_intrinsics_slots(self):
        assert INTRINSICS_SIZE == 7
        assert IntrinsicsIndex.FOCAL_LENGTH == 0
        assert IntrinsicsIndex.ASPECT_RATIO == 1
        assert IntrinsicsIndex.SKEW == 2
        assert IntrinsicsIndex.PRINCIPAL_POINT_X == 3
        assert IntrinsicsIndex.PRINCIPAL_POINT_Y == 4
        assert IntrinsicsIndex.RADIAL_DISTORTION_1 == 5
        assert IntrinsicsIndex.RADIAL_DISTORTION_2 == 6

    def test_pose_slots(self):
        assert POSE_SIZE == 6
        assert PoseIndex.POSITION == 0
        assert PoseIndex.ORIENTATION == 3


class TestCameraIntrinsics:
    def test_defaults(self):
        intrinsics = CameraIntrinsics()
        assert intrinsics.focal_length == 1.0
        assert intrinsics.aspect_ratio == 1.0
        assert intrinsics.skew == 0.0
        assert intrinsics.principal_point == (0.0, 0.0)
        assert intrinsics.radial_distortion == (0.0, 0.0)

    def test_focal_length_y(self):
        intrinsics = CameraIntrinsics(focal_length=500.0, aspect_ratio=1.2)
        assert intrinsics.focal_length_y == pytest.approx(600.0)

    def test_frozen(self):
        intrinsics = CameraIntrinsics()
        with pytest.raises(AttributeError):
            intrinsics.focal_length = 2.0


class TestVectorPacking:
    def test_intrinsics_to_vector_order(self, sample_intrinsics):
        vector = intrinsics_to_vector(sample_intrinsics)
        np.testing.assert_array_equal(
            vector, [800.0, 0.95, 1.5, 640.0, 360.0, -0.08, 0.01]
        )

    def test_intrinsics_from_vector(self, sample_intrinsics):
        vector = intrinsics_to_vector(sample_intrinsics)
        assert intrinsics_from_vector(vector) == sample_intrinsics

    def test_intrinsics_from_vector_wrong_size(self):
        with pytest.raises(ValueError):
            intrinsics_from_vector(np.zeros(6))

    def test_pose_to_vector(self):
        vector = pose_to_vector(np.array([1.0, 2.0, 3.0]), np.array([0.1, 0.2, 0.3]))
        np.testing.assert_array_equal(vector, [1.0, 2.0, 3.0, 0.1, 0.2, 0.3])
