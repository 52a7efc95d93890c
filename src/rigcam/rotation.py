"""
Angle-axis rotations and the two-stage rig rotation.

The exponential map is a Numba kernel because projection calls it once per
observation. The log map is only needed when setting orientations, so it
goes through cv2.Rodrigues.
"""

from __future__ import annotations

import math

import numpy as np
from numba import jit

# Below this squared angle the Rodrigues formula loses precision and the
# first-order expansion R = I + [w]x is exact to machine precision.
_SMALL_ANGLE_SQUARED = np.finfo(np.float64).eps


# ============================================================================
# Numba Kernels
# ============================================================================


@jit(nopython=True, cache=True)
def angle_axis_to_rotation_matrix(angle_axis: np.ndarray) -> np.ndarray:
    """
    Rotation matrix for an angle-axis vector (axis * angle).

    Any angle is accepted; angle + 2*pi*n gives the same matrix.
    """
    rotation = np.empty((3, 3), dtype=np.float64)
    theta2 = (
        angle_axis[0] * angle_axis[0]
        + angle_axis[1] * angle_axis[1]
        + angle_axis[2] * angle_axis[2]
    )

    if theta2 > _SMALL_ANGLE_SQUARED:
        theta = math.sqrt(theta2)
        wx = angle_axis[0] / theta
        wy = angle_axis[1] / theta
        wz = angle_axis[2] / theta
        c = math.cos(theta)
        s = math.sin(theta)
        one_c = 1.0 - c

        rotation[0, 0] = c + wx * wx * one_c
        rotation[1, 0] = wz * s + wx * wy * one_c
        rotation[2, 0] = -wy * s + wx * wz * one_c
        rotation[0, 1] = wx * wy * one_c - wz * s
        rotation[1, 1] = c + wy * wy * one_c
        rotation[2, 1] = wx * s + wy * wz * one_c
        rotation[0, 2] = wy * s + wx * wz * one_c
        rotation[1, 2] = -wx * s + wy * wz * one_c
        rotation[2, 2] = c + wz * wz * one_c
    else:
        rotation[0, 0] = 1.0
        rotation[1, 0] = angle_axis[2]
        rotation[2, 0] = -angle_axis[1]
        rotation[0, 1] = -angle_axis[2]
        rotation[1, 1] = 1.0
        rotation[2, 1] = angle_axis[0]
        rotation[0, 2] = angle_axis[1]
        rotation[1, 2] = -angle_axis[0]
        rotation[2, 2] = 1.0

    return rotation


@jit(nopython=True, cache=True)
def compose_rotation(local_rotation: np.ndarray, pose_angle_axis: np.ndarray) -> np.ndarray:
    """
    Effective world-to-camera rotation: local_rotation @ R(pose_angle_axis).
    """
    pose_rotation = angle_axis_to_rotation_matrix(pose_angle_axis)
    rotation = np.zeros((3, 3), dtype=np.float64)
    for i in range(3):
        for j in range(3):
            for k in range(3):
                rotation[i, j] += local_rotation[i, k] * pose_rotation[k, j]
    return rotation


# ============================================================================
# Log Map
# ============================================================================


def rotation_matrix_to_angle_axis(rotation: np.ndarray) -> np.ndarray:
    """
    Angle-axis vector (axis * angle, angle in [0, pi]) for a rotation matrix.
    """
    import cv2

    rotation = np.asarray(rotation, dtype=np.float64)
    if rotation.shape != (3, 3):
        raise ValueError(f"Rotation must be 3x3, got {rotation.shape}")

    return cv2.Rodrigues(rotation)[0][:, 0]


def remove_local_rotation(
    local_rotation: np.ndarray,
    world_to_camera_rotation: np.ndarray,
) -> np.ndarray:
    """
    World-to-pose rotation for a camera whose effective rotation is given.

    Inverse of compose_rotation: local_rotation.T @ world_to_camera_rotation.
    """
    return np.asarray(local_rotation).T @ np.asarray(world_to_camera_rotation)
