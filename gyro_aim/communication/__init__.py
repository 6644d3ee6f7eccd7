"""Sensor event sources for gyro aim tracking."""

from .recording import (
    RecordingReader,
    RecordingError,
    SensorEvent,
    write_recording,
)
from .synthetic import SyntheticController

__all__ = [
    "RecordingReader",
    "RecordingError",
    "SensorEvent",
    "write_recording",
    "SyntheticController",
]
