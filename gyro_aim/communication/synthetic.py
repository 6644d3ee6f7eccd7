"""Synthetic controller for tests and development without hardware."""

import logging
from typing import Iterator, List, Optional

import numpy as np
from numpy.typing import NDArray

from ..core.quaternion import QuaternionOps, DOWN
from ..core.types import Quaternion
from .recording import ACCEL, GYRO, SensorEvent

logger = logging.getLogger(__name__)


class SyntheticController:
    """Generates gyro and accelerometer events for a constant rotation.

    The controller starts level and turns at a fixed body rate. Its true
    orientation is known in closed form, so the accelerometer reports the
    reaction to gravity in the controller's current axes exactly, plus
    optional Gaussian noise.
    """

    def __init__(
        self,
        angular_velocity=(0.0, 0.0, 0.0),
        gyro_rate_hz: float = 100.0,
        accel_rate_hz: float = 100.0,
        gravity: float = 9.81,
        gyro_noise: float = 0.0,
        accel_noise: float = 0.0,
        gyro_bias=(0.0, 0.0, 0.0),
        start_ns: int = 0,
        seed: Optional[int] = 42,
    ):
        """Initialize synthetic controller.

        Args:
            angular_velocity: True body rate [x, y, z] in rad/s.
            gyro_rate_hz: Gyro sample rate.
            accel_rate_hz: Accelerometer sample rate, 0 for none.
            gravity: Magnitude of the reported acceleration.
            gyro_noise: Standard deviation of gyro noise in rad/s.
            accel_noise: Standard deviation of accelerometer noise.
            gyro_bias: Constant offset added to every gyro sample.
            start_ns: Timestamp of the first samples.
            seed: Random seed for the noise.
        """
        self.angular_velocity = np.asarray(angular_velocity, dtype=np.float64)
        self.gyro_rate_hz = gyro_rate_hz
        self.accel_rate_hz = accel_rate_hz
        self.gravity = gravity
        self.gyro_noise = gyro_noise
        self.accel_noise = accel_noise
        self.gyro_bias = np.asarray(gyro_bias, dtype=np.float64)
        self.start_ns = start_ns
        self._rng = np.random.default_rng(seed)

    def true_orientation(self, elapsed_s: float) -> Quaternion:
        """Current-to-initial rotation after ``elapsed_s`` seconds."""
        rate = float(np.linalg.norm(self.angular_velocity))
        if rate == 0:
            return Quaternion.identity()
        return QuaternionOps.from_axis_angle(self.angular_velocity, rate * elapsed_s)

    def accel_reading(self, elapsed_s: float) -> NDArray[np.float64]:
        """Accelerometer reading after ``elapsed_s`` seconds, pointing up at rest."""
        initial_to_current = QuaternionOps.inverse(self.true_orientation(elapsed_s))
        return -self.gravity * QuaternionOps.rotate(initial_to_current, DOWN)

    def _timestamps(self, rate_hz: float, duration_s: float) -> List[int]:
        if rate_hz <= 0:
            return []
        period_ns = int(round(1e9 / rate_hz))
        count = int(round(duration_s * rate_hz)) + 1
        return [self.start_ns + i * period_ns for i in range(count)]

    def events(self, duration_s: float) -> Iterator[SensorEvent]:
        """Generate events covering ``duration_s`` seconds.

        Gyro and accelerometer events are merged in timestamp order, gyro
        first on ties.

        Args:
            duration_s: Session length in seconds.

        Yields:
            SensorEvent in time order.
        """
        events = []

        for t_ns in self._timestamps(self.gyro_rate_hz, duration_s):
            gyr = self.angular_velocity + self.gyro_bias
            if self.gyro_noise > 0:
                gyr = gyr + self._rng.normal(0, self.gyro_noise, 3)
            events.append(SensorEvent(GYRO, t_ns, float(gyr[0]), float(gyr[1]), float(gyr[2])))

        for t_ns in self._timestamps(self.accel_rate_hz, duration_s):
            acc = self.accel_reading((t_ns - self.start_ns) / 1e9)
            if self.accel_noise > 0:
                acc = acc + self._rng.normal(0, self.accel_noise, 3)
            events.append(SensorEvent(ACCEL, t_ns, float(acc[0]), float(acc[1]), float(acc[2])))

        events.sort(key=lambda e: (e.timestamp_ns, e.kind != GYRO))
        logger.debug("Generated %d synthetic events over %.2f s", len(events), duration_s)
        return iter(events)
