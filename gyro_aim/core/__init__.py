"""Core module for gyro aim tracking."""

from .types import (
    GyroSample,
    AccelSample,
    Quaternion,
    AimAngles,
    TrackerState,
    ValidationResult,
    StreamStats,
)
from .validation import SampleValidator, QuaternionValidator
from .quaternion import QuaternionOps
from .config import Config, load_config

__all__ = [
    "GyroSample",
    "AccelSample",
    "Quaternion",
    "AimAngles",
    "TrackerState",
    "ValidationResult",
    "StreamStats",
    "SampleValidator",
    "QuaternionValidator",
    "QuaternionOps",
    "Config",
    "load_config",
]
