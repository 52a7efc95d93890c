"""
Projection matrix decomposition and composition.

P = K [R | -R C], with K upper triangular:

    K = [[f, s,     px],
         [0, f * a, py],
         [0, 0,     1 ]]

Decomposition fixes the sign ambiguity of the RQ factorization so that K has
a positive diagonal and R is a proper rotation (det +1).
"""

from __future__ import annotations

import numpy as np
from scipy.linalg import rq


# ============================================================================
# Calibration Matrix
# ============================================================================


def intrinsics_to_calibration_matrix(
    focal_length: float,
    skew: float,
    aspect_ratio: float,
    principal_point_x: float,
    principal_point_y: float,
) -> np.ndarray:
    """
    Build the 3x3 calibration matrix K from the five linear intrinsics.
    """
    return np.array([
        [focal_length, skew, principal_point_x],
        [0.0, focal_length * aspect_ratio, principal_point_y],
        [0.0, 0.0, 1.0],
    ], dtype=np.float64)


def calibration_matrix_to_intrinsics(
    calibration_matrix: np.ndarray,
) -> tuple[float, float, float, float, float]:
    """
    Extract (focal_length, skew, aspect_ratio, px, py) from K.

    K is normalized by K[2, 2] first. A zero focal length gives a non-finite
    aspect ratio; callers check the focal terms before using the result.
    """
    k = np.asarray(calibration_matrix, dtype=np.float64)
    with np.errstate(divide="ignore", invalid="ignore"):
        k = k / k[2, 2]
        focal_length = k[0, 0]
        aspect_ratio = k[1, 1] / k[0, 0]

    return (
        float(focal_length),
        float(k[0, 1]),
        float(aspect_ratio),
        float(k[0, 2]),
        float(k[1, 2]),
    )


# ============================================================================
# Projection Matrix
# ============================================================================


def compose_projection_matrix(
    calibration_matrix: np.ndarray,
    rotation: np.ndarray,
    position: np.ndarray,
) -> np.ndarray:
    """
    Compute the 3x4 projection matrix K [R | -R C].

    Args:
        calibration_matrix: 3x3 calibration matrix K
        rotation: 3x3 world-to-camera rotation R
        position: (3,) camera center C in world coordinates

    Returns:
        3x4 projection matrix
    """
    rotation = np.asarray(rotation, dtype=np.float64)
    position = np.asarray(position, dtype=np.float64)

    extrinsic = np.empty((3, 4), dtype=np.float64)
    extrinsic[:, :3] = rotation
    extrinsic[:, 3] = -rotation @ position
    return np.asarray(calibration_matrix, dtype=np.float64) @ extrinsic


def decompose_projection_matrix(
    projection_matrix: np.ndarray,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Decompose a 3x4 projection matrix into K, R and the camera center C.

    The left 3x3 block is RQ-factorized. Column/row sign flips make K's
    diagonal positive, an overall sign flip of P makes det(R) = +1, and K is
    scaled so that K[2, 2] = 1. The center is the right null vector of P.

    Degenerate matrices do not raise: a singular calibration block shows up
    as zeros on K's diagonal and a center at infinity shows up as inf/NaN.

    Args:
        projection_matrix: 3x4 projection matrix

    Returns:
        (calibration_matrix, rotation, position)
    """
    pmatrix = np.asarray(projection_matrix, dtype=np.float64)
    if pmatrix.shape != (3, 4):
        raise ValueError(f"Projection matrix must be 3x4, got {pmatrix.shape}")

    calibration_matrix, rotation = rq(pmatrix[:, :3])

    # K @ R == (K @ D) @ (D @ R) for D = diag(+-1)
    signs = np.where(np.diag(calibration_matrix) < 0, -1.0, 1.0)
    calibration_matrix = calibration_matrix * signs[np.newaxis, :]
    rotation = rotation * signs[:, np.newaxis]

    # P is only defined up to scale, so -K @ -R describes the same camera
    if np.linalg.det(rotation) < 0:
        rotation = -rotation

    with np.errstate(divide="ignore", invalid="ignore"):
        calibration_matrix = calibration_matrix / calibration_matrix[2, 2]

        # Camera center: P @ [C, 1] = 0
        _, _, vh = np.linalg.svd(pmatrix, full_matrices=True)
        center_h = vh[-1]
        position = center_h[:3] / center_h[3]

    return calibration_matrix, rotation, position
