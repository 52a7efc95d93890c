"""
Pytest configuration and shared fixtures.
"""

import tempfile
from pathlib import Path

import numpy as np
import pytest


@pytest.fixture
def temp_dir():
    """Provide a temporary directory that's cleaned up after test."""
    with tempfile.TemporaryDirectory() as td:
        yield Path(td)


@pytest.fixture
def sample_calibration_matrix():
    """Calibration matrix with skew and non-unit aspect ratio."""
    return np.array([
        [800.0, 1.5, 640.0],
        [0.0, 760.0, 360.0],
        [0.0, 0.0, 1.0],
    ], dtype=np.float64)


@pytest.fixture
def sample_rotation():
    """Rotation of ~0.6 rad about a tilted axis."""
    from rigcam.rotation import angle_axis_to_rotation_matrix
    return angle_axis_to_rotation_matrix(np.array([0.3, -0.4, 0.35]))


@pytest.fixture
def sample_position():
    """Camera center away from the origin."""
    return np.array([1.0, -2.0, 0.5], dtype=np.float64)


@pytest.fixture
def sample_intrinsics():
    """Sample CameraIntrinsics with mild barrel distortion."""
    from rigcam.types import CameraIntrinsics
    return CameraIntrinsics(
        focal_length=800.0,
        aspect_ratio=0.95,
        skew=1.5,
        principal_point=(640.0, 360.0),
        radial_distortion=(-0.08, 0.01),
    )


@pytest.fixture
def sample_camera(sample_intrinsics, sample_rotation, sample_position):
    """Camera with distortion, a local rotation offset and a non-trivial pose."""
    from rigcam.camera import Camera
    from rigcam.rotation import angle_axis_to_rotation_matrix

    camera = Camera()
    camera.set_intrinsics(sample_intrinsics)
    camera.set_image_size(1280, 720)
    camera.local_rotation = angle_axis_to_rotation_matrix(np.array([0.0, 0.1, -0.05]))
    camera.set_orientation_from_rotation_matrix(sample_rotation)
    camera.position = sample_position
    return camera


@pytest.fixture
def points_in_front(sample_camera):
    """World points with positive depth in front of sample_camera."""
    rng = np.random.default_rng(7)
    camera_points = np.column_stack([
        rng.uniform(-1.0, 1.0, 20),
        rng.uniform(-0.6, 0.6, 20),
        rng.uniform(2.0, 10.0, 20),
    ])
    rotation = sample_camera.orientation_as_rotation_matrix()
    return camera_points @ rotation + sample_camera.position
