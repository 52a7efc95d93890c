# rigcam - Calibrated pinhole cameras for multi-camera rigs

__version__ = "0.1.0"

# Core types
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

# Rotations
from rigcam.rotation import (
    angle_axis_to_rotation_matrix,
    compose_rotation,
    rotation_matrix_to_angle_axis,
)

# Distortion
from rigcam.distortion import (
    UndistortionError,
    radial_distort_points,
    radial_undistort_points,
)

# Projection matrices
from rigcam.projection_matrix import (
    calibration_matrix_to_intrinsics,
    compose_projection_matrix,
    decompose_projection_matrix,
    intrinsics_to_calibration_matrix,
)

# Raw-buffer projection
from rigcam.projection import (
    project_point_to_image,
    project_points_to_image,
)

# Pose and camera
from rigcam.pose import SharedPose
from rigcam.camera import Camera

# Configuration
from rigcam.config import (
    RigcamConfig,
    UndistortionConfig,
    create_default_config,
    load_config,
    save_config,
)

__all__ = [
    # Core types
    "INTRINSICS_SIZE",
    "POSE_SIZE",
    "CameraIntrinsics",
    "IntrinsicsIndex",
    "PoseIndex",
    "intrinsics_from_vector",
    "intrinsics_to_vector",
    "pose_to_vector",
    # Rotations
    "angle_axis_to_rotation_matrix",
    "compose_rotation",
    "rotation_matrix_to_angle_axis",
    # Distortion
    "UndistortionError",
    "radial_distort_points",
    "radial_undistort_points",
    # Projection matrices
    "calibration_matrix_to_intrinsics",
    "compose_projection_matrix",
    "decompose_projection_matrix",
    "intrinsics_to_calibration_matrix",
    # Raw-buffer projection
    "project_point_to_image",
    "project_points_to_image",
    # Pose and camera
    "SharedPose",
    "Camera",
    # Configuration
    "RigcamConfig",
    "UndistortionConfig",
    "create_default_config",
    "load_config",
    "save_config",
]
