"""Stationary gyroscope bias detection.

While the controller rests on a table the gyro should read zero; whatever
it reads instead is its DC bias. Stillness is detected by watching the
norm of the angular velocity: if it stays nearly constant over a whole
window, the window's mean vector is taken as the bias.

Only the norm is compared, so a slowly changing rotation direction is not
noticed. The tolerance is tight enough that this does not matter in
practice, and a cap on the bias magnitude rejects steady deliberate turns.
"""

import logging
from typing import Optional

import numpy as np
from numpy.typing import NDArray

from ..core.config import Config

logger = logging.getLogger(__name__)


class GyroBiasDetector:
    """Windowed detector feeding a bias offset to the tracker."""

    def __init__(
        self,
        window_size: int = 500,
        block_count: int = 10,
        tolerance: float = 0.01,
        max_bias_rad_s: float = 0.1,
    ):
        """Initialize the detector.

        Args:
            window_size: Samples per detection window.
            block_count: Blocks the window is split into for comparison.
            tolerance: Allowed relative deviation of a block's mean norm.
            max_bias_rad_s: Largest average rate accepted as a bias.

        Raises:
            ValueError: If the window cannot be split into equal blocks.
        """
        if window_size <= 0 or block_count <= 0 or window_size % block_count:
            raise ValueError(
                f"window_size ({window_size}) must be a positive multiple "
                f"of block_count ({block_count})"
            )

        self._window_size = window_size
        self._block_count = block_count
        self._tolerance = tolerance
        self._max_bias = max_bias_rad_s

        self._norms = np.zeros(window_size, dtype=np.float64)
        self._index = 0
        self._running_sum = np.zeros(3, dtype=np.float64)
        self._bias = np.zeros(3, dtype=np.float64)
        self._detections = 0

    @classmethod
    def from_config(cls, config: Config) -> "GyroBiasDetector":
        """Build a detector from the ``bias`` config section."""
        cfg = config.bias
        return cls(
            window_size=cfg.window_size,
            block_count=cfg.block_count,
            tolerance=cfg.tolerance,
            max_bias_rad_s=cfg.max_bias_rad_s,
        )

    def update(self, angular_velocity: NDArray[np.float64]) -> Optional[NDArray[np.float64]]:
        """Add a raw gyro sample.

        Args:
            angular_velocity: Uncorrected angular velocity in rad/s.

        Returns:
            The new bias when this sample completed a stationary window,
            otherwise None.
        """
        angular_velocity = np.asarray(angular_velocity, dtype=np.float64)
        self._norms[self._index] = np.linalg.norm(angular_velocity)
        self._running_sum += angular_velocity
        self._index += 1

        if self._index < self._window_size:
            return None

        # The running sum gives the mean without a second pass over the
        # window, which lets the buffer hold norms rather than vectors.
        average = self._running_sum / self._index
        average_norm = float(np.linalg.norm(average))
        min_req = average_norm * (1 - self._tolerance)
        max_req = average_norm * (1 + self._tolerance)

        block_means = self._norms.reshape(self._block_count, -1).mean(axis=1)
        outside = int(np.count_nonzero((block_means < min_req) | (block_means > max_req)))

        self._index = 0
        self._running_sum = np.zeros(3, dtype=np.float64)

        if outside:
            logger.debug("Window not stationary: %d/%d blocks outside tolerance",
                         outside, self._block_count)
            return None

        if average_norm > self._max_bias:
            logger.debug("Steady rate %.4f rad/s too large for a bias", average_norm)
            return None

        self._bias = average
        self._detections += 1
        logger.info("Gyro bias updated: [%.5f, %.5f, %.5f] rad/s", *average)
        return self._bias.copy()

    @property
    def bias(self) -> NDArray[np.float64]:
        """Current bias estimate in rad/s."""
        return self._bias.copy()

    @property
    def detections(self) -> int:
        """Number of windows accepted as stationary."""
        return self._detections

    def reset(self) -> None:
        """Forget the window and the bias."""
        self._norms[:] = 0.0
        self._index = 0
        self._running_sum = np.zeros(3, dtype=np.float64)
        self._bias = np.zeros(3, dtype=np.float64)
        self._detections = 0
