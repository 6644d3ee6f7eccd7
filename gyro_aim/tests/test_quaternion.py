"""Tests for quaternion operations."""

import pytest
import numpy as np
from numpy.testing import assert_allclose

from gyro_aim.core.types import Quaternion, AimAngles
from gyro_aim.core.quaternion import QuaternionOps, UNIT_X, UNIT_Y, UNIT_Z, FORWARDS


class TestQuaternion:
    """Tests for Quaternion dataclass."""

    def test_identity(self):
        """Identity quaternion should have correct values."""
        q = Quaternion.identity()
        assert q.w == 1.0
        assert q.x == 0.0
        assert q.y == 0.0
        assert q.z == 0.0

    def test_array_conversion(self):
        """Quaternion should convert to and from [w, x, y, z] arrays."""
        q = Quaternion.from_array(np.array([0.7071, 0.0, 0.7071, 0.0]))
        arr = q.to_array()

        assert isinstance(arr, np.ndarray)
        assert abs(q.y - 0.7071) < 1e-4
        assert abs(arr[0] - 0.7071) < 1e-4

    def test_is_valid_with_tolerance(self):
        """Near-unit quaternion should be valid within tolerance."""
        q = Quaternion(w=0.995, x=0.0, y=0.0, z=0.0)
        assert q.is_valid(tolerance=0.01)
        assert not q.is_valid(tolerance=0.001)

    def test_is_valid_nan(self):
        """Non-finite quaternion should be invalid."""
        q = Quaternion(w=float("nan"), x=0.0, y=0.0, z=0.0)
        assert not q.is_valid()

    def test_normalized(self):
        """Normalized quaternion should have unit norm."""
        q = Quaternion(w=2.0, x=2.0, y=2.0, z=2.0)
        assert abs(q.normalized().norm - 1.0) < 1e-10

    def test_normalized_zero_quaternion(self):
        """Zero quaternion should normalize to identity."""
        q = Quaternion(w=0.0, x=0.0, y=0.0, z=0.0)
        assert q.normalized().w == 1.0


class TestQuaternionOps:
    """Tests for QuaternionOps static methods."""

    def test_axis_angle_yaw_turns_forwards_left(self):
        """90 degrees about Y should point forwards along -X."""
        q = QuaternionOps.from_axis_angle(UNIT_Y, np.pi / 2)
        assert_allclose(QuaternionOps.rotate(q, FORWARDS), [-1.0, 0.0, 0.0], atol=1e-12)

    def test_axis_angle_pitch_turns_forwards_up(self):
        """Positive rotation about X should raise the forwards vector."""
        q = QuaternionOps.from_axis_angle(UNIT_X, 0.3)
        v = QuaternionOps.rotate(q, FORWARDS)
        assert_allclose(v, [0.0, np.sin(0.3), -np.cos(0.3)], atol=1e-12)

    def test_axis_angle_normalizes_axis(self):
        """Axis length should not affect the rotation."""
        q1 = QuaternionOps.from_axis_angle(np.array([0.0, 5.0, 0.0]), 0.4)
        q2 = QuaternionOps.from_axis_angle(UNIT_Y, 0.4)
        assert_allclose(q1.to_array(), q2.to_array(), atol=1e-12)

    def test_from_local_euler_order(self):
        """Per-axis rotations should compose as X * Y * Z."""
        angles = np.array([0.1, -0.2, 0.3])
        expected = QuaternionOps.multiply(
            QuaternionOps.multiply(
                QuaternionOps.from_axis_angle(UNIT_X, 0.1),
                QuaternionOps.from_axis_angle(UNIT_Y, -0.2),
            ),
            QuaternionOps.from_axis_angle(UNIT_Z, 0.3),
        )
        result = QuaternionOps.from_local_euler(angles)
        assert_allclose(result.to_array(), expected.to_array(), atol=1e-12)

    def test_from_local_euler_zero(self):
        """Zero angles should give exactly the identity."""
        q = QuaternionOps.from_local_euler(np.zeros(3))
        assert q == Quaternion.identity()

    def test_multiply_identity(self, sample_quaternion):
        """Multiplying by identity should not change quaternion."""
        result = QuaternionOps.multiply(sample_quaternion, Quaternion.identity())
        assert_allclose(result.to_array(), sample_quaternion.to_array(), atol=1e-12)

    def test_multiply_applies_right_first(self):
        """(q1 * q2) v should equal q1 (q2 v)."""
        q1 = QuaternionOps.from_axis_angle(UNIT_Y, 0.7)
        q2 = QuaternionOps.from_axis_angle(UNIT_X, -0.4)
        v = np.array([0.2, -0.5, 0.8])

        combined = QuaternionOps.rotate(QuaternionOps.multiply(q1, q2), v)
        stepwise = QuaternionOps.rotate(q1, QuaternionOps.rotate(q2, v))
        assert_allclose(combined, stepwise, atol=1e-12)

    def test_inverse(self, sample_quaternion):
        """Quaternion times its inverse should be the identity."""
        result = QuaternionOps.multiply(sample_quaternion, QuaternionOps.inverse(sample_quaternion))
        assert_allclose(result.to_array(), [1.0, 0.0, 0.0, 0.0], atol=1e-12)

    def test_inverse_non_unit(self):
        """Inverse should also hold for a slightly drifted quaternion."""
        q = Quaternion(w=1.01, x=0.1, y=-0.2, z=0.05)
        result = QuaternionOps.multiply(QuaternionOps.inverse(q), q)
        assert_allclose(result.to_array(), [1.0, 0.0, 0.0, 0.0], atol=1e-12)

    def test_conjugate(self):
        """Conjugate should negate imaginary parts."""
        q = Quaternion(w=1.0, x=2.0, y=3.0, z=4.0)
        q_conj = QuaternionOps.conjugate(q)

        assert q_conj.w == q.w
        assert q_conj.x == -q.x
        assert q_conj.y == -q.y
        assert q_conj.z == -q.z

    def test_rotation_matrix_orthonormal(self):
        """Rotation matrix should be orthonormal even for non-unit input."""
        q = Quaternion(w=2.0, x=0.4, y=-1.0, z=0.3)
        R = QuaternionOps.to_rotation_matrix(q)

        assert_allclose(R @ R.T, np.eye(3), atol=1e-12)
        assert abs(np.linalg.det(R) - 1.0) < 1e-12

    def test_angle_between_90_deg(self):
        """Angle between quaternions should be computed correctly."""
        q2 = QuaternionOps.from_axis_angle(UNIT_Z, np.deg2rad(90))
        angle = QuaternionOps.angle_between(Quaternion.identity(), q2)
        assert abs(np.rad2deg(angle) - 90) < 1e-6


class TestAimAngles:
    """Tests for yaw/pitch extraction."""

    def test_forwards_is_zero(self):
        """Canonical forwards should have zero yaw and pitch."""
        aim = QuaternionOps.aim_angles(FORWARDS)
        assert aim.yaw == 0.0
        assert aim.pitch == 0.0

    def test_left_is_positive_yaw(self):
        """Pointing along -X is a 90 degree left turn."""
        aim = QuaternionOps.aim_angles(np.array([-1.0, 0.0, 0.0]))
        assert abs(aim.yaw_deg - 90.0) < 1e-9

    def test_up_is_positive_pitch(self):
        """Pointing up and forwards is positive pitch."""
        aim = QuaternionOps.aim_angles(np.array([0.0, np.sin(0.5), -np.cos(0.5)]))
        assert abs(aim.pitch - 0.5) < 1e-12
        assert abs(aim.yaw) < 1e-12

    def test_pitch_clipped(self):
        """Slightly over-long vectors should not produce NaN pitch."""
        aim = QuaternionOps.aim_angles(np.array([0.0, 1.0000001, 0.0]))
        assert abs(aim.pitch_deg - 90.0) < 1e-9

    def test_deg_conversion(self):
        """Degree properties should convert correctly."""
        aim = AimAngles(yaw=np.deg2rad(30), pitch=np.deg2rad(-45))
        assert abs(aim.yaw_deg - 30) < 1e-9
        assert abs(aim.pitch_deg + 45) < 1e-9
