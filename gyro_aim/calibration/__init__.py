"""Calibration tools for gyro aim tracking."""

from .gyro_bias import GyroBiasDetector

__all__ = [
    'GyroBiasDetector',
]
