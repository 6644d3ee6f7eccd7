"""Gyro aim: motion controller orientation tracking for aiming."""

from .core import Config, load_config, GyroSample, AccelSample, Quaternion
from .fusion import OrientationTracker
from .calibration import GyroBiasDetector
from .aim import GyroMouse, GyroMode

__all__ = [
    "Config",
    "load_config",
    "GyroSample",
    "AccelSample",
    "Quaternion",
    "OrientationTracker",
    "GyroBiasDetector",
    "GyroMouse",
    "GyroMode",
]
