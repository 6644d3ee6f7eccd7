"""Data types for gyro aim tracking."""

from dataclasses import dataclass, field
import numpy as np
from numpy.typing import NDArray


@dataclass(frozen=True)
class GyroSample:
    """Single gyroscope measurement.

    Angular velocity is in rad/s, expressed in the controller's local axes.
    """
    timestamp_ns: int  # Monotonic clock, nanoseconds
    gx: float
    gy: float
    gz: float

    @property
    def angular_velocity(self) -> NDArray[np.float64]:
        """Angular velocity vector [gx, gy, gz]."""
        return np.array([self.gx, self.gy, self.gz], dtype=np.float64)

    @property
    def magnitude(self) -> float:
        """Magnitude of angular rate vector."""
        return float(np.linalg.norm(self.angular_velocity))


@dataclass(frozen=True)
class AccelSample:
    """Single accelerometer measurement.

    Units only need to be consistent: the tracker uses the direction.
    """
    timestamp_ns: int  # Monotonic clock, nanoseconds
    ax: float
    ay: float
    az: float

    @property
    def acceleration(self) -> NDArray[np.float64]:
        """Acceleration vector [ax, ay, az]."""
        return np.array([self.ax, self.ay, self.az], dtype=np.float64)

    @property
    def magnitude(self) -> float:
        """Magnitude of acceleration vector."""
        return float(np.linalg.norm(self.acceleration))


@dataclass(frozen=True)
class Quaternion:
    """Unit quaternion representing a rotation between two frames.

    Convention: [w, x, y, z] where w is the scalar component.
    """
    w: float
    x: float
    y: float
    z: float

    @classmethod
    def identity(cls) -> "Quaternion":
        """Return identity quaternion (no rotation)."""
        return cls(w=1.0, x=0.0, y=0.0, z=0.0)

    @classmethod
    def from_array(cls, arr: NDArray[np.float64]) -> "Quaternion":
        """Create from numpy array [w, x, y, z]."""
        return cls(w=float(arr[0]), x=float(arr[1]),
                   y=float(arr[2]), z=float(arr[3]))

    def to_array(self) -> NDArray[np.float64]:
        """Convert to numpy array [w, x, y, z]."""
        return np.array([self.w, self.x, self.y, self.z], dtype=np.float64)

    @property
    def norm(self) -> float:
        """Euclidean norm of quaternion."""
        return float(np.sqrt(self.w**2 + self.x**2 + self.y**2 + self.z**2))

    def is_valid(self, tolerance: float = 0.01) -> bool:
        """Check if quaternion is unit quaternion within tolerance."""
        return abs(self.norm - 1.0) <= tolerance and self._is_finite()

    def _is_finite(self) -> bool:
        """Check all components are finite."""
        return all(np.isfinite([self.w, self.x, self.y, self.z]))

    def normalized(self) -> "Quaternion":
        """Return normalized copy."""
        n = self.norm
        if n < 1e-10:
            return Quaternion.identity()
        return Quaternion(w=self.w/n, x=self.x/n, y=self.y/n, z=self.z/n)


@dataclass(frozen=True)
class AimAngles:
    """Yaw and pitch of an aim vector, in radians.

    Yaw is positive counter-clockwise viewed from above, pitch is
    positive above the horizon. Roll is not represented.
    """
    yaw: float
    pitch: float

    @property
    def yaw_deg(self) -> float:
        """Yaw angle in degrees."""
        return float(np.rad2deg(self.yaw))

    @property
    def pitch_deg(self) -> float:
        """Pitch angle in degrees."""
        return float(np.rad2deg(self.pitch))


@dataclass
class TrackerState:
    """Snapshot of the orientation tracker."""
    current_to_initial: Quaternion
    initial_to_recentre: Quaternion
    forwards: NDArray[np.float64]
    aim: AimAngles
    last_gyro_timestamp_ns: int
    last_accel_timestamp_ns: int
    gyro_bias: NDArray[np.float64] = field(default_factory=lambda: np.zeros(3))

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "qw": self.current_to_initial.w,
            "qx": self.current_to_initial.x,
            "qy": self.current_to_initial.y,
            "qz": self.current_to_initial.z,
            "fx": float(self.forwards[0]),
            "fy": float(self.forwards[1]),
            "fz": float(self.forwards[2]),
            "yaw": self.aim.yaw_deg,
            "pitch": self.aim.pitch_deg,
            "q_norm": self.current_to_initial.norm,
            "gyro_bias": [float(b) for b in self.gyro_bias],
            "gyro_timestamp_ns": self.last_gyro_timestamp_ns,
            "accel_timestamp_ns": self.last_accel_timestamp_ns,
        }


@dataclass
class ValidationResult:
    """Result of sensor data validation."""
    is_valid: bool
    errors: list = field(default_factory=list)
    warnings: list = field(default_factory=list)

    def add_error(self, message: str) -> None:
        """Add validation error."""
        self.is_valid = False
        self.errors.append(message)

    def add_warning(self, message: str) -> None:
        """Add validation warning."""
        self.warnings.append(message)


@dataclass
class StreamStats:
    """Counters for what the tracker did with its input streams."""
    gyro_samples: int = 0
    accel_samples: int = 0
    gyro_discontinuities: int = 0
    accel_discontinuities: int = 0
    skipped_corrections: int = 0
    renormalizations: int = 0
    recentres: int = 0

    @property
    def applied_corrections(self) -> int:
        """Accelerometer samples that actually nudged the rotation."""
        return self.accel_samples - self.accel_discontinuities - self.skipped_corrections

    @property
    def gyro_discontinuity_rate(self) -> float:
        """Fraction of gyro samples that followed a stream gap."""
        if self.gyro_samples == 0:
            return 0.0
        return self.gyro_discontinuities / self.gyro_samples
