"""Sensor fusion module for controller aim tracking."""

from .tracker import OrientationTracker

__all__ = [
    "OrientationTracker",
]
