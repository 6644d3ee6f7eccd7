"""Stream monitoring for gyro aim tracking."""

from .metrics import StreamMonitor, StreamRateStats, GYRO, ACCEL

__all__ = [
    "StreamMonitor",
    "StreamRateStats",
    "GYRO",
    "ACCEL",
]
