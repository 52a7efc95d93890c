"""
Core data structures and parameter layout for rigcam.

The flat parameter buffers are what a bundle adjuster sees, so their slot
order is fixed. The dataclasses here are typed snapshots of those buffers;
the buffers themselves live on Camera and SharedPose.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

import numpy as np


# ============================================================================
# Parameter Layout
# ============================================================================


class IntrinsicsIndex(IntEnum):
    """Slot of each intrinsic parameter in the 7-element buffer."""

    FOCAL_LENGTH = 0
    ASPECT_RATIO = 1
    SKEW = 2
    PRINCIPAL_POINT_X = 3
    PRINCIPAL_POINT_Y = 4
    RADIAL_DISTORTION_1 = 5
    RADIAL_DISTORTION_2 = 6


class PoseIndex(IntEnum):
    """Start slot of each 3-vector in the 6-element pose buffer."""

    POSITION = 0
    ORIENTATION = 3


INTRINSICS_SIZE = 7
POSE_SIZE = 6


# ============================================================================
# Typed Snapshots
# ============================================================================


@dataclass(frozen=True, slots=True)
class CameraIntrinsics:
    """
    Intrinsic parameters of a pinhole camera with two-term radial distortion.
    """

    focal_length: float = 1.0
    aspect_ratio: float = 1.0
    skew: float = 0.0
    principal_point: tuple[float, float] = (0.0, 0.0)  # (px, py)
    radial_distortion: tuple[float, float] = (0.0, 0.0)  # (k1, k2)

    @property
    def focal_length_y(self) -> float:
        """Focal length along the image y axis."""
        return self.focal_length * self.aspect_ratio


# ============================================================================
# Pure functions for packing buffers
# ============================================================================


def intrinsics_to_vector(intrinsics: CameraIntrinsics) -> np.ndarray:
    """
    Convert intrinsics to the 7-element buffer layout.
    [f, aspect_ratio, skew, px, py, k1, k2]
    """
    vector = np.empty(INTRINSICS_SIZE, dtype=np.float64)
    vector[IntrinsicsIndex.FOCAL_LENGTH] = intrinsics.focal_length
    vector[IntrinsicsIndex.ASPECT_RATIO] = intrinsics.aspect_ratio
    vector[IntrinsicsIndex.SKEW] = intrinsics.skew
    vector[IntrinsicsIndex.PRINCIPAL_POINT_X] = intrinsics.principal_point[0]
    vector[IntrinsicsIndex.PRINCIPAL_POINT_Y] = intrinsics.principal_point[1]
    vector[IntrinsicsIndex.RADIAL_DISTORTION_1] = intrinsics.radial_distortion[0]
    vector[IntrinsicsIndex.RADIAL_DISTORTION_2] = intrinsics.radial_distortion[1]
    return vector


def intrinsics_from_vector(vector: np.ndarray) -> CameraIntrinsics:
    """
    Create intrinsics from a 7-element buffer.
    """
    vector = np.asarray(vector, dtype=np.float64)
    if vector.shape != (INTRINSICS_SIZE,):
        raise ValueError(
            f"Intrinsics vector must have shape ({INTRINSICS_SIZE},), got {vector.shape}"
        )

    return CameraIntrinsics(
        focal_length=float(vector[IntrinsicsIndex.FOCAL_LENGTH]),
        aspect_ratio=float(vector[IntrinsicsIndex.ASPECT_RATIO]),
        skew=float(vector[IntrinsicsIndex.SKEW]),
        principal_point=(
            float(vector[IntrinsicsIndex.PRINCIPAL_POINT_X]),
            float(vector[IntrinsicsIndex.PRINCIPAL_POINT_Y]),
        ),
        radial_distortion=(
            float(vector[IntrinsicsIndex.RADIAL_DISTORTION_1]),
            float(vector[IntrinsicsIndex.RADIAL_DISTORTION_2]),
        ),
    )


def pose_to_vector(position: np.ndarray, angle_axis: np.ndarray) -> np.ndarray:
    """
    Pack a position and a world-to-pose angle-axis into the 6-element layout.
    [cx, cy, cz, rx, ry, rz]
    """
    vector = np.empty(POSE_SIZE, dtype=np.float64)
    vector[PoseIndex.POSITION : PoseIndex.POSITION + 3] = position
    vector[PoseIndex.ORIENTATION : PoseIndex.ORIENTATION + 3] = angle_axis
    return vector
