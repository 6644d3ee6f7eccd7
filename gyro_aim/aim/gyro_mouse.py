"""Gyro-as-mouse view mapping.

Turns raw gyro rates into per-frame yaw and pitch changes for a camera,
as an alternative to reading the absolute aim vector from the tracker.
"""

import math
from dataclasses import dataclass
from enum import IntEnum
from typing import Tuple

from ..core.config import Config, GyroMouseConfig


class GyroMode(IntEnum):
    """When the gyro drives the view."""
    OFF = 0
    HOLD_TO_ENABLE = 1
    HOLD_TO_DISABLE = 2
    ALWAYS_ON = 3


class TurningAxis(IntEnum):
    """Controller axis used for turning left and right."""
    YAW = 0
    ROLL = 1


@dataclass(frozen=True)
class AimDelta:
    """View change for one frame, in degrees.

    Positive yaw turns left (counter-clockwise from above), positive
    pitch looks up.
    """
    yaw_deg: float
    pitch_deg: float


class GyroMouse:
    """Maps gyro rates to view deltas.

    Small rates are scaled down ("tightening") so that hand tremor does
    not move the view, while deliberate movements pass through 1:1 times
    the configured sensitivity.
    """

    def __init__(self, config: GyroMouseConfig):
        """Initialize from the ``gyro_mouse`` config section.

        Raises:
            ValueError: If mode or turning axis is unknown.
        """
        self._config = config
        self._mode = GyroMode(config.mode)
        self._turning_axis = TurningAxis(config.turning_axis)
        self._active = self._mode in (GyroMode.HOLD_TO_DISABLE, GyroMode.ALWAYS_ON)

    @classmethod
    def from_config(cls, config: Config) -> "GyroMouse":
        return cls(config.gyro_mouse)

    @property
    def mode(self) -> GyroMode:
        return self._mode

    @property
    def is_active(self) -> bool:
        """Whether gyro input currently moves the view."""
        return self._active and self._mode != GyroMode.OFF

    def press_action(self) -> None:
        """Gyro action button pressed."""
        if self._mode == GyroMode.HOLD_TO_ENABLE:
            self._active = True
        elif self._mode == GyroMode.HOLD_TO_DISABLE:
            self._active = False

    def release_action(self) -> None:
        """Gyro action button released."""
        if self._mode == GyroMode.HOLD_TO_ENABLE:
            self._active = False
        elif self._mode == GyroMode.HOLD_TO_DISABLE:
            self._active = True

    def tighten(self, yaw_rate: float, pitch_rate: float) -> Tuple[float, float]:
        """Scale down rates below the tightening threshold.

        Args:
            yaw_rate: Turning rate in rad/s.
            pitch_rate: Pitch rate in rad/s.

        Returns:
            Tightened (yaw_rate, pitch_rate).
        """
        magnitude = math.hypot(yaw_rate, pitch_rate)
        threshold = math.radians(self._config.tightening_deg_s)

        if magnitude < threshold:
            scale = magnitude / threshold
            return yaw_rate * scale, pitch_rate * scale
        return yaw_rate, pitch_rate

    def view_delta(self, gx: float, gy: float, gz: float, frame_time_s: float) -> AimDelta:
        """View change for one frame.

        Args:
            gx: Rate about the controller's X axis (pitch), rad/s.
            gy: Rate about the controller's Y axis (yaw), rad/s.
            gz: Rate about the controller's Z axis (roll), rad/s.
            frame_time_s: Duration of the frame in seconds.

        Returns:
            AimDelta for the frame, zero while the gyro is inactive.
        """
        if not self.is_active:
            return AimDelta(yaw_deg=0.0, pitch_deg=0.0)

        if self._turning_axis == TurningAxis.YAW:
            yaw_rate = gy
        else:
            yaw_rate = -gz
        pitch_rate = gx

        if yaw_rate == 0 and pitch_rate == 0:
            return AimDelta(yaw_deg=0.0, pitch_deg=0.0)

        yaw_rate, pitch_rate = self.tighten(yaw_rate, pitch_rate)

        return AimDelta(
            yaw_deg=math.degrees(yaw_rate * frame_time_s) * self._config.yaw_sensitivity,
            pitch_deg=math.degrees(pitch_rate * frame_time_s) * self._config.pitch_sensitivity,
        )
