"""
Calibrated pinhole camera with two-term radial distortion.

A Camera owns its 7-element intrinsics buffer and a fixed pose-to-camera
rotation, and references a SharedPose that may be shared with the other
cameras of a rig. The effective world-to-camera rotation is

    R = local_rotation @ R(pose.orientation)

Projection and back-projection are mutual inverses along depth:

    pixel, depth = project_point(X)
    ray = pixel_to_unit_depth_ray(pixel)
    X == position + ray * depth

Setters do not validate. A zero focal length or an unset image size is
carried through as inf/NaN in derived values; callers check focal_length
and image_width/image_height before relying on them.
"""

from __future__ import annotations

import logging

import numpy as np

from .config import UndistortionConfig
from .distortion import radial_undistort_points
from .pose import SharedPose
from .projection import (
    pixels_to_normalized,
    project_point_to_image,
    project_points_to_image,
)
from .projection_matrix import (
    calibration_matrix_to_intrinsics,
    compose_projection_matrix,
    decompose_projection_matrix,
    intrinsics_to_calibration_matrix,
)
from .rotation import (
    angle_axis_to_rotation_matrix,
    compose_rotation,
    remove_local_rotation,
    rotation_matrix_to_angle_axis,
)
from .types import (
    CameraIntrinsics,
    IntrinsicsIndex,
    intrinsics_from_vector,
    intrinsics_to_vector,
)

logger = logging.getLogger(__name__)


def _as_homogeneous(points: np.ndarray) -> np.ndarray:
    """(..., 3) or (..., 4) points as float64 (..., 4) with w = 1 appended."""
    points = np.asarray(points, dtype=np.float64)
    if points.shape[-1] == 3:
        ones = np.ones(points.shape[:-1] + (1,), dtype=np.float64)
        return np.concatenate([points, ones], axis=-1)
    if points.shape[-1] != 4:
        raise ValueError(f"Points must have 3 or 4 coordinates, got {points.shape}")
    return np.ascontiguousarray(points)


class Camera:
    """
    Pinhole camera: intrinsics + shared pose + fixed local rotation offset.

    A default camera has f = 1, a = 1, zero skew, principal point and
    distortion, identity local rotation, an unset (0, 0) image size and its
    own private pose at the origin with identity orientation.
    """

    def __init__(
        self,
        pose: SharedPose | None = None,
        undistortion: UndistortionConfig | None = None,
    ):
        self._intrinsics = intrinsics_to_vector(CameraIntrinsics())
        self._pose = pose if pose is not None else SharedPose()
        self._local_rotation = np.eye(3, dtype=np.float64)
        self._image_size = [0, 0]
        self.undistortion = undistortion if undistortion is not None else UndistortionConfig()

    # ------------------------------------------------------------------
    # Initialization from a projection matrix
    # ------------------------------------------------------------------

    def initialize_from_projection_matrix(
        self,
        image_width: int,
        image_height: int,
        projection_matrix: np.ndarray,
    ) -> bool:
        """
        Set pose and linear intrinsics by decomposing a 3x4 projection matrix.

        Radial distortion is left untouched since P cannot encode it. The
        shared pose receives the orientation with this camera's local
        rotation removed.

        Returns False, with the image size and pose already written, when the
        decomposed focal lengths are zero. Discard the camera in that case.

        Raises:
            ValueError: if the image size is not positive or P is not 3x4
        """
        if image_width <= 0 or image_height <= 0:
            raise ValueError(
                f"Image size must be positive, got ({image_width}, {image_height})"
            )

        self.set_image_size(image_width, image_height)

        calibration_matrix, rotation, position = decompose_projection_matrix(
            projection_matrix
        )
        logger.debug(
            f"Decomposed projection matrix: K={calibration_matrix.tolist()}, "
            f"C={position.tolist()}"
        )

        self.set_orientation_from_rotation_matrix(rotation)
        self.position = position

        if calibration_matrix[0, 0] == 0 or calibration_matrix[1, 1] == 0:
            logger.info("Cannot set focal lengths to zero!")
            return False
        if not np.all(np.isfinite(calibration_matrix)):
            logger.info("Calibration matrix is not finite, P is degenerate")
            return False

        focal_length, skew, aspect_ratio, px, py = calibration_matrix_to_intrinsics(
            calibration_matrix
        )
        self.focal_length = focal_length
        self.skew = skew
        self.aspect_ratio = aspect_ratio
        self.set_principal_point(px, py)
        return True

    # ------------------------------------------------------------------
    # Matrices
    # ------------------------------------------------------------------

    def calibration_matrix(self) -> np.ndarray:
        """3x3 calibration matrix K built from the linear intrinsics."""
        return intrinsics_to_calibration_matrix(
            self.focal_length,
            self.skew,
            self.aspect_ratio,
            self.principal_point_x,
            self.principal_point_y,
        )

    def projection_matrix(self) -> np.ndarray:
        """3x4 projection matrix K [R | -R C]. Does not include distortion."""
        return compose_projection_matrix(
            self.calibration_matrix(),
            self.orientation_as_rotation_matrix(),
            self.position,
        )

    # ------------------------------------------------------------------
    # Projection
    # ------------------------------------------------------------------

    def project_point(self, point: np.ndarray) -> tuple[np.ndarray, float]:
        """
        Project a world point into the image, applying radial distortion.

        Args:
            point: (4,) homogeneous point, or (3,) with w = 1 implied

        Returns:
            (pixel, depth). Depth is negative behind the camera and +inf for
            a point at infinity, whose pixel then depends on direction only.
        """
        point = _as_homogeneous(point)
        if point.shape != (4,):
            raise ValueError(f"Expected a single point, got shape {point.shape}")

        pixel, depth = project_point_to_image(
            self._pose.mutable_parameters,
            self._intrinsics,
            point,
            self._local_rotation,
        )
        return pixel, float(depth)

    def project_points(self, points: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        """
        Project (n, 4) homogeneous or (n, 3) points.

        Returns:
            ((n, 2) pixels, (n,) depths)
        """
        points = _as_homogeneous(points).reshape(-1, 4)
        return project_points_to_image(
            self._pose.mutable_parameters,
            self._intrinsics,
            points,
            self._local_rotation,
        )

    def pixels_to_unit_depth_rays(self, pixels: np.ndarray) -> np.ndarray:
        """
        Back-project (n, 2) pixels to world-frame rays with camera depth 1.

        Raises:
            UndistortionError: if the distortion cannot be inverted for a pixel
        """
        pixels = np.asarray(pixels, dtype=np.float64).reshape(-1, 2)
        normalized = pixels_to_normalized(pixels, self._intrinsics)
        undistorted = radial_undistort_points(
            normalized,
            self.radial_distortion_1,
            self.radial_distortion_2,
            tolerance=self.undistortion.tolerance,
            max_iterations=self.undistortion.max_iterations,
        )

        camera_rays = np.column_stack([undistorted, np.ones(len(undistorted))])
        # R.T @ ray for each row
        return camera_rays @ self.orientation_as_rotation_matrix()

    def pixel_to_unit_depth_ray(self, pixel: np.ndarray) -> np.ndarray:
        """
        Back-project a pixel to a world-frame ray whose camera-frame z is 1.

        The ray starts at the camera position, so position + ray * depth
        recovers the point that project_point mapped to this pixel.

        Raises:
            UndistortionError: if the distortion cannot be inverted
        """
        return self.pixels_to_unit_depth_rays(pixel)[0]

    # ------------------------------------------------------------------
    # Raw parameter views
    # ------------------------------------------------------------------

    @property
    def intrinsics(self) -> np.ndarray:
        """Read-only view of the 7-element intrinsics buffer."""
        view = self._intrinsics.view()
        view.flags.writeable = False
        return view

    @property
    def mutable_intrinsics(self) -> np.ndarray:
        """The 7-element intrinsics buffer itself, for in-place edits."""
        return self._intrinsics

    @property
    def pose(self) -> SharedPose:
        """The (possibly shared) pose block."""
        return self._pose

    def set_shared_pose(self, pose: SharedPose) -> None:
        """Reference another pose block, e.g. to mount this camera on a rig."""
        if not isinstance(pose, SharedPose):
            raise TypeError(f"Expected SharedPose, got {type(pose).__name__}")
        self._pose = pose

    @property
    def local_rotation(self) -> np.ndarray:
        """Fixed pose-to-camera rotation (copy)."""
        return self._local_rotation.copy()

    @local_rotation.setter
    def local_rotation(self, rotation: np.ndarray) -> None:
        rotation = np.asarray(rotation, dtype=np.float64)
        if rotation.shape != (3, 3):
            raise ValueError(f"Local rotation must be 3x3, got {rotation.shape}")
        self._local_rotation = np.ascontiguousarray(rotation).copy()

    # ------------------------------------------------------------------
    # Extrinsics
    # ------------------------------------------------------------------

    @property
    def position(self) -> np.ndarray:
        """Camera center in world coordinates (the shared pose position)."""
        return self._pose.position

    @position.setter
    def position(self, position: np.ndarray) -> None:
        self._pose.position = position

    def set_orientation_from_rotation_matrix(self, rotation: np.ndarray) -> None:
        """Set the effective world-to-camera rotation from a 3x3 matrix."""
        self._pose.orientation = rotation_matrix_to_angle_axis(
            remove_local_rotation(self._local_rotation, rotation)
        )

    def set_orientation_from_angle_axis(self, angle_axis: np.ndarray) -> None:
        """Set the effective world-to-camera rotation from an angle-axis vector."""
        angle_axis = np.asarray(angle_axis, dtype=np.float64).reshape(3)
        self.set_orientation_from_rotation_matrix(
            angle_axis_to_rotation_matrix(angle_axis)
        )

    def orientation_as_rotation_matrix(self) -> np.ndarray:
        """Effective world-to-camera rotation matrix."""
        return compose_rotation(self._local_rotation, self._pose.orientation)

    def orientation_as_angle_axis(self) -> np.ndarray:
        """Effective world-to-camera rotation as angle-axis, angle in [0, pi]."""
        return rotation_matrix_to_angle_axis(self.orientation_as_rotation_matrix())

    # ------------------------------------------------------------------
    # Intrinsics
    # ------------------------------------------------------------------

    def get_intrinsics(self) -> CameraIntrinsics:
        """Typed snapshot of the intrinsics buffer."""
        return intrinsics_from_vector(self._intrinsics)

    def set_intrinsics(self, intrinsics: CameraIntrinsics) -> None:
        """Overwrite all seven intrinsics in place."""
        self._intrinsics[:] = intrinsics_to_vector(intrinsics)

    @property
    def focal_length(self) -> float:
        return float(self._intrinsics[IntrinsicsIndex.FOCAL_LENGTH])

    @focal_length.setter
    def focal_length(self, focal_length: float) -> None:
        self._intrinsics[IntrinsicsIndex.FOCAL_LENGTH] = focal_length

    @property
    def aspect_ratio(self) -> float:
        return float(self._intrinsics[IntrinsicsIndex.ASPECT_RATIO])

    @aspect_ratio.setter
    def aspect_ratio(self, aspect_ratio: float) -> None:
        self._intrinsics[IntrinsicsIndex.ASPECT_RATIO] = aspect_ratio

    @property
    def focal_length_y(self) -> float:
        return self.focal_length * self.aspect_ratio

    @property
    def skew(self) -> float:
        return float(self._intrinsics[IntrinsicsIndex.SKEW])

    @skew.setter
    def skew(self, skew: float) -> None:
        self._intrinsics[IntrinsicsIndex.SKEW] = skew

    def set_principal_point(self, principal_point_x: float, principal_point_y: float) -> None:
        self._intrinsics[IntrinsicsIndex.PRINCIPAL_POINT_X] = principal_point_x
        self._intrinsics[IntrinsicsIndex.PRINCIPAL_POINT_Y] = principal_point_y

    @property
    def principal_point_x(self) -> float:
        return float(self._intrinsics[IntrinsicsIndex.PRINCIPAL_POINT_X])

    @property
    def principal_point_y(self) -> float:
        return float(self._intrinsics[IntrinsicsIndex.PRINCIPAL_POINT_Y])

    def set_radial_distortion(self, radial_distortion_1: float, radial_distortion_2: float) -> None:
        self._intrinsics[IntrinsicsIndex.RADIAL_DISTORTION_1] = radial_distortion_1
        self._intrinsics[IntrinsicsIndex.RADIAL_DISTORTION_2] = radial_distortion_2

    @property
    def radial_distortion_1(self) -> float:
        return float(self._intrinsics[IntrinsicsIndex.RADIAL_DISTORTION_1])

    @property
    def radial_distortion_2(self) -> float:
        return float(self._intrinsics[IntrinsicsIndex.RADIAL_DISTORTION_2])

    # ------------------------------------------------------------------
    # Image size
    # ------------------------------------------------------------------

    def set_image_size(self, image_width: int, image_height: int) -> None:
        """Set the image size in pixels. (0, 0) means unset."""
        self._image_size = [int(image_width), int(image_height)]

    @property
    def image_width(self) -> int:
        return self._image_size[0]

    @property
    def image_height(self) -> int:
        return self._image_size[1]

    def __repr__(self) -> str:
        return (
            f"Camera(intrinsics={self._intrinsics.tolist()}, pose={self._pose!r}, "
            f"image_size=({self.image_width}, {self.image_height}))"
        )
