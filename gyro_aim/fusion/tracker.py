"""Gyro and accelerometer fusion into an aim direction.

Reference frames:

ECEF frame:
    The earth's frame. Only observed through gravity; the earth's own
    rotation is negligible next to the gyro's steady-state error.

Initial frame:
    The controller's axes when its first gyro sample arrived. It is
    assumed to have been level (Y aligned with gravity) at that moment.
    That is rarely true, but it does not affect the output, which is the
    difference between the current and recentre frames, and it gives the
    accelerometer correction a simple reference.

Current frame:
    The controller's axes right now.

Recentre frame:
    The controller's axes at the last recentre, with roll removed.

The output is the rotation between the recentre frame and the current
frame, applied to the forwards axis.
"""

import logging
import threading
from dataclasses import replace
from typing import Optional

import numpy as np
from numpy.typing import NDArray

from ..calibration.gyro_bias import GyroBiasDetector
from ..core.config import Config
from ..core.quaternion import QuaternionOps, UNIT_X, UNIT_Y, FORWARDS, DOWN
from ..core.types import (
    AccelSample,
    AimAngles,
    GyroSample,
    Quaternion,
    StreamStats,
    TrackerState,
)
from ..core.validation import QuaternionValidator

logger = logging.getLogger(__name__)


class OrientationTracker:
    """Complementary filter tracking where the controller points.

    Gyro samples are integrated into the current-to-initial rotation and
    accelerometer samples pull its pitch and roll back towards gravity.
    Yaw drift cannot be seen by the accelerometer and is left alone.

    All public methods take the same lock, so samples may be pushed from
    a sensor thread while the frame loop reads the forwards vector.

    Usage:
        tracker = OrientationTracker(config)
        tracker.push_gyro_event(t_ns, angular_velocity)
        tracker.push_accelerometer_event(t_ns, acceleration)
        aim = tracker.get_forwards()
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        bias_detector: Optional[GyroBiasDetector] = None,
    ):
        """Initialize tracker with identity rotations.

        Args:
            config: System configuration. Defaults are used if None.
            bias_detector: Stationary bias detector. If None, one is
                created only when ``config.bias.enabled`` is set.
        """
        self._config = config if config is not None else Config()
        self._tracker_cfg = self._config.tracker

        if bias_detector is None and self._config.bias.enabled:
            bias_detector = GyroBiasDetector.from_config(self._config)
        self._bias_detector = bias_detector

        self._quat_validator = QuaternionValidator(self._config)
        self._lock = threading.Lock()
        self._init_state()

    def _init_state(self) -> None:
        # Current -> initial.
        self._current_to_initial = Quaternion.identity()
        # Initial -> recentre, kept inverted since every read needs it.
        self._initial_to_recentre = Quaternion.identity()

        self._last_ang_vel = np.zeros(3, dtype=np.float64)
        self._last_gyro_ns = 0
        self._last_accel_ns = 0
        self._gyro_bias = np.zeros(3, dtype=np.float64)
        self._updates_since_normalize = 0
        self._stats = StreamStats()

    def _is_discontinuity(self, delta_ns: int) -> bool:
        # Out-of-order timestamps count as a gap too.
        return delta_ns < 0 or delta_ns > self._tracker_cfg.discontinuity_ns

    def push_gyro_event(self, timestamp_ns: int, angular_velocity) -> None:
        """Integrate one gyro sample into the current rotation.

        The true angular velocity is assumed to vary linearly between the
        previous sample and this one. The integral of that ramp over the
        interval is the mean of the two samples times the interval.

        Args:
            timestamp_ns: Monotonic sample time in nanoseconds.
            angular_velocity: [x, y, z] rates in rad/s, controller axes.
        """
        angular_velocity = np.array(angular_velocity, dtype=np.float64)

        with self._lock:
            self._stats.gyro_samples += 1
            delta_ns = int(timestamp_ns) - self._last_gyro_ns
            self._last_gyro_ns = int(timestamp_ns)

            if self._is_discontinuity(delta_ns):
                # Something interrupted the stream; integrating across the
                # gap would add a bogus large rotation.
                self._stats.gyro_discontinuities += 1
                logger.debug("Gyro stream gap of %d ns, not integrating", delta_ns)
                self._last_ang_vel = angular_velocity
                return

            delta_s = delta_ns / 1e9
            average_ang_vel = (self._last_ang_vel + angular_velocity) / 2.0 - self._gyro_bias
            integrated_euler = average_ang_vel * delta_s

            update = QuaternionOps.from_local_euler(integrated_euler)

            # Local deltas go on the right, like building a local->world
            # matrix.
            self._current_to_initial = QuaternionOps.multiply(self._current_to_initial, update)
            self._last_ang_vel = angular_velocity
            self._after_rotation_update()

            if self._bias_detector is not None:
                bias = self._bias_detector.update(angular_velocity)
                if bias is not None:
                    self._gyro_bias = bias

    def push_accelerometer_event(self, timestamp_ns: int, acceleration) -> None:
        """Nudge the current rotation so its tilt agrees with gravity.

        An accelerometer at rest reads the reaction to gravity, pointing
        away from the earth. The correction turns the estimated down axis
        towards the opposite of that reading by the angle between them
        scaled by the elapsed time, which makes it a fixed-gain IIR filter
        on the tilt error.

        Args:
            timestamp_ns: Monotonic sample time in nanoseconds.
            acceleration: [x, y, z] acceleration, controller axes.
        """
        acceleration = np.asarray(acceleration, dtype=np.float64)

        with self._lock:
            self._stats.accel_samples += 1
            delta_ns = int(timestamp_ns) - self._last_accel_ns
            self._last_accel_ns = int(timestamp_ns)

            if self._is_discontinuity(delta_ns):
                self._stats.accel_discontinuities += 1
                logger.debug("Accelerometer stream gap of %d ns, not correcting", delta_ns)
                return

            delta_s = delta_ns / 1e9

            magnitude = float(np.linalg.norm(acceleration))
            if magnitude == 0:
                self._stats.skipped_corrections += 1
                return

            # Shaking the controller should roughly average out, leaving
            # gravity.
            gravity = acceleration / magnitude

            # The initial frame's down axis seen from the current frame.
            initial_to_current = QuaternionOps.inverse(self._current_to_initial)
            down = QuaternionOps.rotate(initial_to_current, DOWN)

            cross = np.cross(down, gravity)
            length = float(np.linalg.norm(cross))
            if length == 0:
                self._stats.skipped_corrections += 1
                return

            angle = float(np.arcsin(min(length, 1.0)))
            axis = cross / length

            correction = QuaternionOps.from_axis_angle(axis, angle * delta_s)
            self._current_to_initial = QuaternionOps.multiply(self._current_to_initial, correction)
            self._after_rotation_update()

    def push_gyro_sample(self, sample: GyroSample) -> None:
        """Push a :class:`GyroSample`."""
        self.push_gyro_event(sample.timestamp_ns, sample.angular_velocity)

    def push_accel_sample(self, sample: AccelSample) -> None:
        """Push an :class:`AccelSample`."""
        self.push_accelerometer_event(sample.timestamp_ns, sample.acceleration)

    def _after_rotation_update(self) -> None:
        interval = self._tracker_cfg.renormalize_interval
        if interval == 0:
            return

        self._updates_since_normalize += 1
        if self._updates_since_normalize < interval:
            return

        validation = self._quat_validator.validate(self._current_to_initial)
        for warning in validation.warnings:
            logger.warning("Rotation state: %s", warning)
        for error in validation.errors:
            logger.warning("Rotation state: %s", error)

        self._current_to_initial = self._current_to_initial.normalized()
        self._updates_since_normalize = 0
        self._stats.renormalizations += 1

    def recentre(self) -> None:
        """Make the current yaw and pitch the new zero for the output.

        Roll is left out so that recentring always levels the horizon.
        """
        with self._lock:
            forwards = QuaternionOps.rotate(self._current_to_initial, FORWARDS)
            aim = QuaternionOps.aim_angles(forwards)

            # Yaw has to be included to cancel pitch: the plane pitch acts
            # in depends on yaw, and without it the camera would not return
            # to the horizon.
            recentre_to_initial = QuaternionOps.multiply(
                QuaternionOps.from_axis_angle(UNIT_Y, aim.yaw),
                QuaternionOps.from_axis_angle(UNIT_X, aim.pitch),
            )
            self._initial_to_recentre = QuaternionOps.inverse(recentre_to_initial)
            self._stats.recentres += 1

        logger.info("Recentred at yaw=%.1f, pitch=%.1f deg", aim.yaw_deg, aim.pitch_deg)

    def get_forwards(self) -> NDArray[np.float64]:
        """Direction the controller points, relative to the recentre frame.

        Returns:
            Vector out of the controller's USB port, (0, 0, -1) until the
            controller is moved.
        """
        with self._lock:
            return self._forwards()

    def _forwards(self) -> NDArray[np.float64]:
        # With the path as rotations q1..qn and a recentre after qm,
        # initial_to_recentre * current_to_initial reduces to qm+1..qn,
        # the motion since the recentre.
        current_to_recentre = QuaternionOps.multiply(
            self._initial_to_recentre, self._current_to_initial
        )
        return QuaternionOps.rotate(current_to_recentre, FORWARDS)

    def aim_angles(self) -> AimAngles:
        """Yaw and pitch of the forwards vector."""
        return QuaternionOps.aim_angles(self.get_forwards())

    def reset(self) -> None:
        """Return to the state of a freshly constructed tracker."""
        with self._lock:
            self._init_state()
            if self._bias_detector is not None:
                self._bias_detector.reset()
        logger.info("Tracker reset")

    @property
    def state(self) -> TrackerState:
        """Snapshot of the current tracker state."""
        with self._lock:
            forwards = self._forwards()
            return TrackerState(
                current_to_initial=self._current_to_initial,
                initial_to_recentre=self._initial_to_recentre,
                forwards=forwards,
                aim=QuaternionOps.aim_angles(forwards),
                last_gyro_timestamp_ns=self._last_gyro_ns,
                last_accel_timestamp_ns=self._last_accel_ns,
                gyro_bias=self._gyro_bias.copy(),
            )

    @property
    def current_to_initial(self) -> Quaternion:
        """Rotation from the current frame to the initial frame."""
        with self._lock:
            return self._current_to_initial

    @property
    def initial_to_recentre(self) -> Quaternion:
        """Rotation from the initial frame to the recentre frame."""
        with self._lock:
            return self._initial_to_recentre

    @property
    def last_angular_velocity(self) -> NDArray[np.float64]:
        """Most recent gyro sample in rad/s."""
        with self._lock:
            return self._last_ang_vel.copy()

    @property
    def gyro_bias(self) -> NDArray[np.float64]:
        """Bias subtracted from gyro samples, in rad/s."""
        with self._lock:
            return self._gyro_bias.copy()

    @property
    def stats(self) -> StreamStats:
        """Copy of the stream counters."""
        with self._lock:
            return replace(self._stats)

    @property
    def bias_detector(self) -> Optional[GyroBiasDetector]:
        """Attached bias detector, if any."""
        return self._bias_detector
