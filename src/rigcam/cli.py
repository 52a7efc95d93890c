#!/usr/bin/env python3
"""
rigcam CLI - pinhole camera utilities.

Usage:
    rigcam decompose FILE.toml [-v]  - Decompose a projection matrix
    rigcam --help                    - Show this help

The TOML file holds the matrix and image size, plus optional settings:

    projection_matrix = [[...4 values...], [...], [...]]
    image_size = [1280, 720]
    log_level = "INFO"

    [undistortion]
    tolerance = 1e-12
    max_iterations = 100
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import numpy as np
import rtoml

from .camera import Camera
from .config import config_from_dict

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO", verbose: bool = False) -> None:
    """Configure logging."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else getattr(logging, level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def decompose(path: Path, verbose: bool = False) -> int:
    """Initialize a camera from the projection matrix in a TOML file."""
    if not path.exists():
        print(f"File not found: {path}")
        return 1

    data = rtoml.load(path)
    config = config_from_dict(data)
    setup_logging(config.log_level, verbose)

    if "projection_matrix" not in data or "image_size" not in data:
        logger.error(f"{path} needs 'projection_matrix' and 'image_size'")
        return 1

    projection_matrix = np.array(data["projection_matrix"], dtype=np.float64)
    width, height = (int(v) for v in data["image_size"])

    camera = Camera(undistortion=config.undistortion)
    try:
        ok = camera.initialize_from_projection_matrix(width, height, projection_matrix)
    except ValueError as e:
        logger.error(str(e))
        return 1

    if not ok:
        logger.error("Projection matrix could not be decomposed")
        return 1

    intrinsics = camera.get_intrinsics()
    print(f"Image size:       {camera.image_width} x {camera.image_height}")
    print(f"Focal length:     {intrinsics.focal_length:.6f}")
    print(f"Aspect ratio:     {intrinsics.aspect_ratio:.6f}")
    print(f"Skew:             {intrinsics.skew:.6f}")
    print(
        f"Principal point:  ({intrinsics.principal_point[0]:.6f}, "
        f"{intrinsics.principal_point[1]:.6f})"
    )
    print(f"Position:         {np.array2string(camera.position, precision=6)}")
    print(
        f"Orientation (aa): {np.array2string(camera.orientation_as_angle_axis(), precision=6)}"
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)

    if not argv or argv[0] in ("-h", "--help"):
        print(__doc__)
        return 0

    command = argv[0]
    args = argv[1:]
    verbose = "-v" in args or "--verbose" in args
    positional = [a for a in args if not a.startswith("-")]

    if command == "decompose":
        if len(positional) != 1:
            print("Usage: rigcam decompose FILE.toml [-v]")
            return 1
        return decompose(Path(positional[0]), verbose=verbose)

    else:
        print(f"Unknown command: {command}")
        print("Run 'rigcam --help' for usage")
        return 1


if __name__ == "__main__":
    sys.exit(main())
