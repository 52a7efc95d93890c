"""
Point projection on raw parameter buffers.

These kernels read the 6-element pose buffer and the 7-element intrinsics
buffer directly, the same way a bundle adjustment residual does, so Camera
and any external optimizer share one implementation. They never raise on
degenerate parameters: division by zero follows IEEE semantics.
"""

from __future__ import annotations

import numpy as np
from numba import jit

from .distortion import distortion_factor
from .rotation import compose_rotation
from .types import IntrinsicsIndex, PoseIndex

# Plain ints so Numba freezes them as compile-time constants
_POSITION = int(PoseIndex.POSITION)
_ORIENTATION = int(PoseIndex.ORIENTATION)
_FOCAL_LENGTH = int(IntrinsicsIndex.FOCAL_LENGTH)
_ASPECT_RATIO = int(IntrinsicsIndex.ASPECT_RATIO)
_SKEW = int(IntrinsicsIndex.SKEW)
_PRINCIPAL_POINT_X = int(IntrinsicsIndex.PRINCIPAL_POINT_X)
_PRINCIPAL_POINT_Y = int(IntrinsicsIndex.PRINCIPAL_POINT_Y)
_RADIAL_DISTORTION_1 = int(IntrinsicsIndex.RADIAL_DISTORTION_1)
_RADIAL_DISTORTION_2 = int(IntrinsicsIndex.RADIAL_DISTORTION_2)


# ============================================================================
# Numba Kernels
# ============================================================================


@jit(nopython=True, cache=True, error_model="numpy")
def _project_with_rotation(
    rotation: np.ndarray,
    pose: np.ndarray,
    intrinsics: np.ndarray,
    point: np.ndarray,
    pixel: np.ndarray,
) -> float:
    """
    Project one homogeneous point, writing the pixel in place.

    Returns the depth, +inf for a point at infinity (w == 0).
    """
    w = point[3]
    adjusted = np.empty(3, dtype=np.float64)
    if w == 0.0:
        # Direction only, the camera center does not translate it
        for i in range(3):
            adjusted[i] = point[i]
    else:
        for i in range(3):
            adjusted[i] = point[i] / w - pose[_POSITION + i]

    camera_point = np.zeros(3, dtype=np.float64)
    for i in range(3):
        for j in range(3):
            camera_point[i] += rotation[i, j] * adjusted[j]

    if w == 0.0:
        depth = np.inf
    else:
        depth = camera_point[2]

    x = camera_point[0] / camera_point[2]
    y = camera_point[1] / camera_point[2]

    scale = distortion_factor(
        x * x + y * y,
        intrinsics[_RADIAL_DISTORTION_1],
        intrinsics[_RADIAL_DISTORTION_2],
    )
    x *= scale
    y *= scale

    focal_length = intrinsics[_FOCAL_LENGTH]
    pixel[0] = focal_length * x + intrinsics[_SKEW] * y + intrinsics[_PRINCIPAL_POINT_X]
    pixel[1] = (
        focal_length * intrinsics[_ASPECT_RATIO] * y + intrinsics[_PRINCIPAL_POINT_Y]
    )
    return depth


@jit(nopython=True, cache=True, error_model="numpy")
def project_point_to_image(
    pose: np.ndarray,
    intrinsics: np.ndarray,
    point: np.ndarray,
    local_rotation: np.ndarray,
) -> tuple[np.ndarray, float]:
    """
    Project a homogeneous 3D point into the image.

    Args:
        pose: (6,) pose buffer [position, world-to-pose angle-axis]
        intrinsics: (7,) intrinsics buffer
        point: (4,) homogeneous world point
        local_rotation: 3x3 pose-to-camera rotation

    Returns:
        (pixel, depth); depth is negative behind the camera
    """
    rotation = compose_rotation(
        local_rotation, pose[_ORIENTATION : _ORIENTATION + 3]
    )
    pixel = np.empty(2, dtype=np.float64)
    depth = _project_with_rotation(rotation, pose, intrinsics, point, pixel)
    return pixel, depth


@jit(nopython=True, cache=True, error_model="numpy")
def project_points_to_image(
    pose: np.ndarray,
    intrinsics: np.ndarray,
    points: np.ndarray,
    local_rotation: np.ndarray,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Batch form of project_point_to_image for (n, 4) points.

    Returns:
        ((n, 2) pixels, (n,) depths)
    """
    rotation = compose_rotation(
        local_rotation, pose[_ORIENTATION : _ORIENTATION + 3]
    )
    n = points.shape[0]
    pixels = np.empty((n, 2), dtype=np.float64)
    depths = np.empty(n, dtype=np.float64)
    for i in range(n):
        depths[i] = _project_with_rotation(
            rotation, pose, intrinsics, points[i], pixels[i]
        )
    return pixels, depths


# ============================================================================
# Back-Projection Helpers
# ============================================================================


def pixels_to_normalized(pixels: np.ndarray, intrinsics: np.ndarray) -> np.ndarray:
    """
    Undo the calibration matrix for (n, 2) pixels.

    Returns (n, 2) distorted normalized coordinates.
    """
    pixels = np.asarray(pixels, dtype=np.float64)
    focal_length = intrinsics[IntrinsicsIndex.FOCAL_LENGTH]
    focal_length_y = focal_length * intrinsics[IntrinsicsIndex.ASPECT_RATIO]

    normalized = np.empty_like(pixels)
    with np.errstate(divide="ignore", invalid="ignore"):
        normalized[..., 1] = (
            pixels[..., 1] - intrinsics[IntrinsicsIndex.PRINCIPAL_POINT_Y]
        ) / focal_length_y
        normalized[..., 0] = (
            pixels[..., 0]
            - intrinsics[IntrinsicsIndex.PRINCIPAL_POINT_X]
            - normalized[..., 1] * intrinsics[IntrinsicsIndex.SKEW]
        ) / focal_length
    return normalized
