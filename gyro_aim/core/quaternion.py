"""Quaternion operations and utilities.

Rotations compose like matrices: ``multiply(q1, q2)`` applied to a vector
rotates by ``q2`` first, then by ``q1``.
"""

import numpy as np
from numpy.typing import NDArray

from .types import Quaternion, AimAngles

UNIT_X = np.array([1.0, 0.0, 0.0])
UNIT_Y = np.array([0.0, 1.0, 0.0])
UNIT_Z = np.array([0.0, 0.0, 1.0])

# Out of the controller's USB port when it is held flat.
FORWARDS = np.array([0.0, 0.0, -1.0])
DOWN = np.array([0.0, -1.0, 0.0])


class QuaternionOps:
    """Static methods for quaternion operations."""

    @staticmethod
    def from_axis_angle(axis: NDArray[np.float64], angle: float) -> Quaternion:
        """Build the rotation of ``angle`` radians about ``axis``.

        Args:
            axis: Rotation axis, normalized here.
            angle: Right-handed rotation angle in radians.

        Returns:
            Unit quaternion for the rotation.
        """
        axis = np.asarray(axis, dtype=np.float64)
        axis = axis / np.linalg.norm(axis)
        half = 0.5 * angle
        s = np.sin(half)
        return Quaternion(w=float(np.cos(half)), x=float(axis[0] * s),
                          y=float(axis[1] * s), z=float(axis[2] * s))

    @staticmethod
    def from_local_euler(angles: NDArray[np.float64]) -> Quaternion:
        """Compose per-axis rotations as X * Y * Z.

        The Z rotation is applied first and the X rotation last. This only
        approximates integrating a rotation vector, which is acceptable for
        the small angles accumulated between two gyro samples.

        Args:
            angles: Rotation angles [x, y, z] in radians.

        Returns:
            Composed rotation.
        """
        q = QuaternionOps.from_axis_angle(UNIT_X, angles[0])
        q = QuaternionOps.multiply(q, QuaternionOps.from_axis_angle(UNIT_Y, angles[1]))
        q = QuaternionOps.multiply(q, QuaternionOps.from_axis_angle(UNIT_Z, angles[2]))
        return q

    @staticmethod
    def multiply(q1: Quaternion, q2: Quaternion) -> Quaternion:
        """Multiply two quaternions (Hamilton product).

        Args:
            q1: First quaternion.
            q2: Second quaternion.

        Returns:
            Product quaternion q1 * q2.
        """
        w = q1.w * q2.w - q1.x * q2.x - q1.y * q2.y - q1.z * q2.z
        x = q1.w * q2.x + q1.x * q2.w + q1.y * q2.z - q1.z * q2.y
        y = q1.w * q2.y - q1.x * q2.z + q1.y * q2.w + q1.z * q2.x
        z = q1.w * q2.z + q1.x * q2.y - q1.y * q2.x + q1.z * q2.w
        return Quaternion(w=w, x=x, y=y, z=z)

    @staticmethod
    def conjugate(q: Quaternion) -> Quaternion:
        """Compute quaternion conjugate.

        Args:
            q: Input quaternion.

        Returns:
            Conjugate quaternion.
        """
        return Quaternion(w=q.w, x=-q.x, y=-q.y, z=-q.z)

    @staticmethod
    def inverse(q: Quaternion) -> Quaternion:
        """Compute quaternion inverse.

        Equal to the conjugate for unit quaternions, but also correct for
        a state that has drifted slightly off unit norm.
        """
        norm_sq = q.w**2 + q.x**2 + q.y**2 + q.z**2
        c = QuaternionOps.conjugate(q)
        return Quaternion(w=c.w / norm_sq, x=c.x / norm_sq,
                          y=c.y / norm_sq, z=c.z / norm_sq)

    @staticmethod
    def to_rotation_matrix(q: Quaternion) -> NDArray[np.float64]:
        """Convert quaternion to a 3x3 rotation matrix.

        The quaternion is normalized first.
        """
        n = q.normalized()
        w, x, y, z = n.w, n.x, n.y, n.z
        return np.array([
            [1 - 2 * (y * y + z * z), 2 * (x * y - w * z), 2 * (x * z + w * y)],
            [2 * (x * y + w * z), 1 - 2 * (x * x + z * z), 2 * (y * z - w * x)],
            [2 * (x * z - w * y), 2 * (y * z + w * x), 1 - 2 * (x * x + y * y)],
        ], dtype=np.float64)

    @staticmethod
    def rotate(q: Quaternion, v: NDArray[np.float64]) -> NDArray[np.float64]:
        """Rotate vector ``v`` by ``q``."""
        return QuaternionOps.to_rotation_matrix(q) @ np.asarray(v, dtype=np.float64)

    @staticmethod
    def angle_between(q1: Quaternion, q2: Quaternion) -> float:
        """Compute rotation angle between two quaternions.

        Args:
            q1: First quaternion.
            q2: Second quaternion.

        Returns:
            Angle in radians.
        """
        q1_conj = QuaternionOps.conjugate(q1)
        q_diff = QuaternionOps.multiply(q2, q1_conj)
        angle = 2.0 * np.arccos(np.clip(abs(q_diff.w), -1.0, 1.0))
        return float(angle)

    @staticmethod
    def aim_angles(forwards: NDArray[np.float64]) -> AimAngles:
        """Find yaw and pitch of a forwards vector.

        Args:
            forwards: Direction the controller points, (0, 0, -1) at rest.

        Returns:
            Yaw (CCW from above) and pitch (up positive) in radians.
        """
        yaw = np.arctan2(-forwards[0], -forwards[2])
        pitch = np.arcsin(np.clip(forwards[1], -1.0, 1.0))
        return AimAngles(yaw=float(yaw), pitch=float(pitch))
