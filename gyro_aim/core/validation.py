"""Input validation for sensor samples and rotation state."""

from typing import Optional
import numpy as np

from .types import GyroSample, AccelSample, ValidationResult, Quaternion
from .config import Config


class SampleValidator:
    """Validates gyro and accelerometer samples for plausibility.

    The tracker accepts whatever it is given; this is for callers that
    want to drop bad samples before they reach it.
    """

    def __init__(self, config: Config):
        """Initialize validator with configuration.

        Args:
            config: System configuration with validation thresholds.
        """
        self._config = config
        self._last_gyro_ns: Optional[int] = None
        self._last_accel_ns: Optional[int] = None

    def validate_gyro(self, sample: GyroSample) -> ValidationResult:
        """Validate a gyroscope sample.

        Args:
            sample: Gyro measurement to validate.

        Returns:
            ValidationResult with validation status and any errors/warnings.
        """
        result = ValidationResult(is_valid=True)
        self._check_finite((sample.gx, sample.gy, sample.gz), result)

        max_rate = np.deg2rad(self._config.validation.sample.max_rate_dps)
        for name, value in (("gx", sample.gx), ("gy", sample.gy), ("gz", sample.gz)):
            if np.isfinite(value) and abs(value) > max_rate:
                result.add_error(f"{name} out of range: {np.rad2deg(value):.1f} deg/s")

        self._check_timestamp(sample.timestamp_ns, self._last_gyro_ns, result)
        if result.is_valid:
            self._last_gyro_ns = sample.timestamp_ns
        return result

    def validate_accel(self, sample: AccelSample) -> ValidationResult:
        """Validate an accelerometer sample.

        Args:
            sample: Accelerometer measurement to validate.

        Returns:
            ValidationResult with validation status and any errors/warnings.
        """
        result = ValidationResult(is_valid=True)
        self._check_finite((sample.ax, sample.ay, sample.az), result)

        if result.is_valid and sample.magnitude == 0:
            result.add_warning("Zero acceleration, gravity direction unknown")

        self._check_timestamp(sample.timestamp_ns, self._last_accel_ns, result)
        if result.is_valid:
            self._last_accel_ns = sample.timestamp_ns
        return result

    def _check_finite(self, values, result: ValidationResult) -> None:
        """Check all values are finite (not NaN or Inf)."""
        for i, val in enumerate(values):
            if not np.isfinite(val):
                result.add_error(f"Non-finite value at index {i}: {val}")

    def _check_timestamp(
        self,
        timestamp_ns: int,
        last_ns: Optional[int],
        result: ValidationResult,
    ) -> None:
        """Validate timestamp monotonicity and gap size."""
        if last_ns is None:
            return

        delta_ns = timestamp_ns - last_ns
        if delta_ns <= 0:
            result.add_error(f"Non-monotonic timestamp: dt={delta_ns}ns")
        elif delta_ns > self._config.tracker.discontinuity_ns:
            result.add_warning(f"Stream gap: {delta_ns / 1e6:.1f}ms")

    def reset(self) -> None:
        """Reset validator state."""
        self._last_gyro_ns = None
        self._last_accel_ns = None


class QuaternionValidator:
    """Validates the tracker's rotation state."""

    def __init__(self, config: Config):
        """Initialize validator with configuration.

        Args:
            config: System configuration with quaternion thresholds.
        """
        self._config = config

    def validate(self, q: Quaternion) -> ValidationResult:
        """Validate quaternion state.

        Args:
            q: Quaternion to validate.

        Returns:
            ValidationResult with status and any issues.
        """
        result = ValidationResult(is_valid=True)
        cfg = self._config.validation.quaternion

        if not q._is_finite():
            result.add_error("Quaternion contains non-finite values")
            return result

        norm_error = abs(q.norm - 1.0)

        if norm_error > cfg.divergence_threshold:
            result.add_error(f"Quaternion diverged: norm={q.norm:.4f}")
        elif norm_error > cfg.norm_tolerance:
            result.add_warning(f"Quaternion norm drift: {q.norm:.6f}")

        return result
