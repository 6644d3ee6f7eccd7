"""Pytest fixtures for gyro aim tests."""

import sys
from pathlib import Path
import pytest
import numpy as np

repo_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(repo_root))

from gyro_aim.core.config import Config
from gyro_aim.core.types import GyroSample, AccelSample, Quaternion
from gyro_aim.fusion.tracker import OrientationTracker

MS = 1_000_000


@pytest.fixture
def config() -> Config:
    """Create default configuration for tests."""
    return Config()


@pytest.fixture
def tracker(config) -> OrientationTracker:
    """Create a fresh tracker with default configuration."""
    return OrientationTracker(config)


@pytest.fixture
def forwards() -> np.ndarray:
    """Canonical forwards vector."""
    return np.array([0.0, 0.0, -1.0])


@pytest.fixture
def yaw_gyro_sample() -> GyroSample:
    """Gyro sample turning left at 90 deg/s."""
    return GyroSample(timestamp_ns=10 * MS, gx=0.0, gy=np.pi / 2, gz=0.0)


@pytest.fixture
def level_accel_sample() -> AccelSample:
    """Accelerometer sample of a level controller at rest.

    The reading is the reaction to gravity, so it points up (+Y).
    """
    return AccelSample(timestamp_ns=10 * MS, ax=0.0, ay=9.81, az=0.0)


@pytest.fixture
def sample_quaternion() -> Quaternion:
    """Create a sample non-identity quaternion.

    Represents a 30 degree rotation about Y (yaw left).
    """
    angle = np.deg2rad(30)
    return Quaternion(
        w=np.cos(angle / 2),
        x=0.0,
        y=np.sin(angle / 2),
        z=0.0,
    )


@pytest.fixture
def recording_text() -> str:
    """Small recording with a quarter turn and a recentre."""
    lines = ["# kind,timestamp_ns,x,y,z", ""]
    for i in range(101):
        lines.append(f"gyro,{i * 10 * MS},0.0,1.5707963267948966,0.0")
    lines.append(f"recentre,{1000 * MS}")
    lines.append(f"accel,{1000 * MS},0.0,9.81,0.0")
    return "\n".join(lines) + "\n"
