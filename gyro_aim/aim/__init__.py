"""View mapping from raw gyro rates."""

from .gyro_mouse import GyroMouse, GyroMode, TurningAxis, AimDelta

__all__ = [
    "GyroMouse",
    "GyroMode",
    "TurningAxis",
    "AimDelta",
]
