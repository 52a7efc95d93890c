"""
Configuration loading/saving.

Pure functions operating on dataclasses, stored as TOML.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import rtoml

from .distortion import DEFAULT_MAX_ITERATIONS, DEFAULT_TOLERANCE


# ============================================================================
# Config Types
# ============================================================================


@dataclass(frozen=True, slots=True)
class UndistortionConfig:
    """
    Settings of the Newton solver that inverts radial distortion.
    """

    tolerance: float = DEFAULT_TOLERANCE  # Step tolerance, relative to max(1, r)
    max_iterations: int = DEFAULT_MAX_ITERATIONS


@dataclass(frozen=True, slots=True)
class RigcamConfig:
    """
    Complete rigcam configuration.
    """

    undistortion: UndistortionConfig = field(default_factory=UndistortionConfig)
    log_level: str = "INFO"


# ============================================================================
# TOML
# ============================================================================


def create_default_config() -> RigcamConfig:
    """Configuration with every setting at its default."""
    return RigcamConfig()


def config_from_dict(data: dict) -> RigcamConfig:
    """
    Build a RigcamConfig from parsed TOML. Missing keys keep their defaults.
    """
    undistortion_data = data.get("undistortion", {})
    undistortion = UndistortionConfig(
        tolerance=float(undistortion_data.get("tolerance", DEFAULT_TOLERANCE)),
        max_iterations=int(
            undistortion_data.get("max_iterations", DEFAULT_MAX_ITERATIONS)
        ),
    )

    return RigcamConfig(
        undistortion=undistortion,
        log_level=str(data.get("log_level", "INFO")).upper(),
    )


def load_config(path: Path) -> RigcamConfig:
    """
    Load configuration from a TOML file.

    Args:
        path: Path to the TOML file

    Returns:
        RigcamConfig dataclass

    Raises:
        FileNotFoundError: if the file does not exist
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    return config_from_dict(rtoml.load(path))


def save_config(config: RigcamConfig, path: Path) -> None:
    """
    Save configuration to a TOML file.

    Args:
        config: RigcamConfig dataclass
        path: Path to save the TOML file
    """
    path = Path(path)
    data = {
        "log_level": config.log_level,
        "undistortion": {
            "tolerance": config.undistortion.tolerance,
            "max_iterations": config.undistortion.max_iterations,
        },
    }

    # Ensure parent directory exists
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        rtoml.dump(data, f)
