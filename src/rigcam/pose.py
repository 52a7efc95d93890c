"""
Pose block shared by the cameras of a rig.

One SharedPose describes the physical rig: where it is and how it is
oriented. Every camera mounted on the rig holds a reference to the same
object, so an edit made through any of them (or by an optimizer writing the
raw buffer) is seen by all of them. The pose lives as long as its longest
holder.

No locking is done here. Concurrent writers coordinate outside.
"""

from __future__ import annotations

import numpy as np

from .rotation import angle_axis_to_rotation_matrix
from .types import POSE_SIZE, PoseIndex

_POSITION = slice(PoseIndex.POSITION, PoseIndex.POSITION + 3)
_ORIENTATION = slice(PoseIndex.ORIENTATION, PoseIndex.ORIENTATION + 3)


class SharedPose:
    """
    Position and world-to-pose angle-axis orientation in a 6-element buffer.

    Layout: [cx, cy, cz, rx, ry, rz]. The angle-axis is not canonicalized,
    any angle + 2*pi*n is a valid value.
    """

    __slots__ = ("_parameters",)

    def __init__(
        self,
        position: np.ndarray | None = None,
        orientation: np.ndarray | None = None,
    ):
        self._parameters = np.zeros(POSE_SIZE, dtype=np.float64)
        if position is not None:
            self.position = position
        if orientation is not None:
            self.orientation = orientation

    @classmethod
    def from_vector(cls, vector: np.ndarray) -> SharedPose:
        """Create a pose from a 6-element [position, angle-axis] vector."""
        vector = np.asarray(vector, dtype=np.float64)
        if vector.shape != (POSE_SIZE,):
            raise ValueError(
                f"Pose vector must have shape ({POSE_SIZE},), got {vector.shape}"
            )
        pose = cls()
        pose._parameters[:] = vector
        return pose

    # ------------------------------------------------------------------
    # Raw parameter views
    # ------------------------------------------------------------------

    @property
    def parameters(self) -> np.ndarray:
        """Read-only view of the 6-element buffer."""
        view = self._parameters.view()
        view.flags.writeable = False
        return view

    @property
    def mutable_parameters(self) -> np.ndarray:
        """
        The 6-element buffer itself, for in-place edits by an optimizer.

        Writers must keep the layout: slots 0-2 position, 3-5 angle * axis.
        """
        return self._parameters

    # ------------------------------------------------------------------
    # Typed accessors
    # ------------------------------------------------------------------

    @property
    def position(self) -> np.ndarray:
        """Rig position in world coordinates (copy)."""
        return self._parameters[_POSITION].copy()

    @position.setter
    def position(self, position: np.ndarray) -> None:
        self._parameters[_POSITION] = np.asarray(position, dtype=np.float64).reshape(3)

    @property
    def orientation(self) -> np.ndarray:
        """World-to-pose angle-axis vector (copy)."""
        return self._parameters[_ORIENTATION].copy()

    @orientation.setter
    def orientation(self, angle_axis: np.ndarray) -> None:
        self._parameters[_ORIENTATION] = np.asarray(
            angle_axis, dtype=np.float64
        ).reshape(3)

    def rotation_matrix(self) -> np.ndarray:
        """World-to-pose rotation matrix."""
        return angle_axis_to_rotation_matrix(self._parameters[_ORIENTATION])

    def copy(self) -> SharedPose:
        """An independent pose with the same values."""
        return SharedPose.from_vector(self._parameters)

    def __repr__(self) -> str:
        return (
            f"SharedPose(position={self._parameters[_POSITION].tolist()}, "
            f"orientation={self._parameters[_ORIENTATION].tolist()})"
        )
