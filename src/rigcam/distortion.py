"""
Two-coefficient radial distortion of normalized image coordinates.

Distortion scales a point by d = 1 + k1*r^2 + k2*r^4 where r is its distance
from the optical axis. The scale is radial, so undistortion only has to
recover the undistorted radius r_u from the distorted radius r_d:

    r_u * (1 + k1*r_u^2 + k2*r_u^4) = r_d

There is no closed form, so it is solved with Newton's method starting at
r_u = r_d. A point whose radius does not converge within the iteration cap,
or only has a negative solution, raises UndistortionError instead of
returning the last iterate.
"""

from __future__ import annotations

import logging
import math

import numpy as np
from numba import jit

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE = 1e-12
DEFAULT_MAX_ITERATIONS = 100


class UndistortionError(RuntimeError):
    """The radial undistortion did not converge for at least one point."""

    def __init__(self, message: str, unconverged: int = 1):
        super().__init__(message)
        self.unconverged = unconverged


# ============================================================================
# Numba Kernels
# ============================================================================


@jit(nopython=True, cache=True)
def distortion_factor(r2: float, k1: float, k2: float) -> float:
    """Scale applied to a normalized point at squared radius r2."""
    return 1.0 + k1 * r2 + k2 * r2 * r2


@jit(nopython=True, cache=True, error_model="numpy")
def _undistort_radius(
    distorted_radius: float,
    k1: float,
    k2: float,
    tolerance: float,
    max_iterations: int,
) -> tuple[float, bool]:
    """
    Newton iteration on r + k1*r^3 + k2*r^5 - r_d = 0.

    Returns (undistorted_radius, converged).
    """
    radius = distorted_radius
    for _ in range(max_iterations):
        r2 = radius * radius
        residual = radius * (1.0 + k1 * r2 + k2 * r2 * r2) - distorted_radius
        derivative = 1.0 + 3.0 * k1 * r2 + 5.0 * k2 * r2 * r2
        if derivative == 0.0:
            return radius, False

        step = residual / derivative
        radius -= step
        if not math.isfinite(radius):
            return radius, False
        if abs(step) <= tolerance * max(1.0, abs(radius)):
            return radius, radius >= 0.0

    return radius, False


@jit(nopython=True, cache=True, error_model="numpy")
def _undistort_points_kernel(
    points: np.ndarray,
    k1: float,
    k2: float,
    tolerance: float,
    max_iterations: int,
) -> tuple[np.ndarray, int]:
    """
    Undistort (n, 2) normalized points. Returns (points, unconverged_count).
    """
    undistorted = points.copy()
    unconverged = 0

    for i in range(points.shape[0]):
        x = points[i, 0]
        y = points[i, 1]
        if not (math.isfinite(x) and math.isfinite(y)):
            continue

        distorted_radius = math.sqrt(x * x + y * y)
        if distorted_radius == 0.0:
            continue

        radius, converged = _undistort_radius(
            distorted_radius, k1, k2, tolerance, max_iterations
        )
        if not converged:
            unconverged += 1
            continue

        scale = radius / distorted_radius
        undistorted[i, 0] = x * scale
        undistorted[i, 1] = y * scale

    return undistorted, unconverged


# ============================================================================
# Public API
# ============================================================================


def radial_distort_points(points: np.ndarray, k1: float, k2: float) -> np.ndarray:
    """
    Apply radial distortion to normalized points.

    Total: large radii give large values, nothing is clamped.

    Args:
        points: (2,) or (n, 2) normalized image coordinates
        k1: First radial distortion coefficient
        k2: Second radial distortion coefficient

    Returns:
        Distorted points with the same shape as the input
    """
    points = np.asarray(points, dtype=np.float64)
    r2 = np.sum(points**2, axis=-1, keepdims=True)
    return points * (1.0 + k1 * r2 + k2 * r2**2)


def radial_undistort_points(
    points: np.ndarray,
    k1: float,
    k2: float,
    tolerance: float = DEFAULT_TOLERANCE,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
) -> np.ndarray:
    """
    Invert radial distortion of normalized points.

    With k1 == k2 == 0 the input is returned unchanged without iterating.
    Non-finite points pass through untouched.

    Args:
        points: (2,) or (n, 2) distorted normalized image coordinates
        k1: First radial distortion coefficient
        k2: Second radial distortion coefficient
        tolerance: Newton step tolerance, relative to max(1, radius)
        max_iterations: Newton iteration cap per point

    Returns:
        Undistorted points with the same shape as the input

    Raises:
        UndistortionError: if any point fails to converge
    """
    points = np.asarray(points, dtype=np.float64)
    if k1 == 0.0 and k2 == 0.0:
        return points.copy()

    flat = np.ascontiguousarray(points.reshape(-1, 2))
    undistorted, unconverged = _undistort_points_kernel(
        flat, float(k1), float(k2), float(tolerance), int(max_iterations)
    )

    if unconverged > 0:
        logger.debug(
            f"Radial undistortion failed for {unconverged} of {flat.shape[0]} points "
            f"(k1={k1}, k2={k2})"
        )
        raise UndistortionError(
            f"Radial undistortion did not converge for {unconverged} point(s) "
            f"within {max_iterations} iterations",
            unconverged=unconverged,
        )

    return undistorted.reshape(points.shape)
