"""Sample-rate metrics for the gyro and accelerometer streams."""

import logging
from collections import deque
from dataclasses import dataclass
from typing import Deque, Dict, Optional
import numpy as np

from ..core.config import Config

logger = logging.getLogger(__name__)

GYRO = "gyro"
ACCEL = "accel"


@dataclass
class StreamRateStats:
    """Aggregated interval statistics for one stream."""
    mean_interval_ms: float
    std_interval_ms: float
    max_interval_ms: float
    min_interval_ms: float
    effective_rate_hz: float
    jitter_ms: float
    gaps: int
    total_samples: int


class _StreamWindow:
    """Rolling interval history for a single stream."""

    def __init__(self, window: int):
        self.intervals: Deque[float] = deque(maxlen=window)
        self.last_ns: Optional[int] = None
        self.gaps = 0
        self.samples = 0


class StreamMonitor:
    """Tracks inter-sample timing of each sensor stream.

    Counts gaps longer than the tracker's discontinuity threshold and
    logs a rate report every ``log_interval_s`` of sample time.
    """

    def __init__(self, config: Config):
        """Initialize stream monitor.

        Args:
            config: System configuration with monitoring settings.
        """
        self._config = config
        self._mon_cfg = config.monitoring
        self._gap_ns = config.tracker.discontinuity_ns

        self._streams: Dict[str, _StreamWindow] = {
            GYRO: _StreamWindow(self._mon_cfg.window_size),
            ACCEL: _StreamWindow(self._mon_cfg.window_size),
        }
        self._last_log_ns: Optional[int] = None

    def record(self, stream: str, timestamp_ns: int) -> None:
        """Record a sample arrival.

        Args:
            stream: ``"gyro"`` or ``"accel"``.
            timestamp_ns: Sample timestamp in nanoseconds.

        Raises:
            KeyError: If the stream name is unknown.
        """
        window = self._streams[stream]
        window.samples += 1

        if window.last_ns is not None:
            delta_ns = timestamp_ns - window.last_ns
            if delta_ns < 0 or delta_ns > self._gap_ns:
                window.gaps += 1
                logger.debug("%s stream gap: %.1f ms", stream, delta_ns / 1e6)
            else:
                window.intervals.append(delta_ns / 1e6)

        window.last_ns = timestamp_ns
        self._maybe_log_stats(timestamp_ns)

    def _maybe_log_stats(self, timestamp_ns: int) -> None:
        """Log statistics periodically."""
        if self._last_log_ns is None:
            self._last_log_ns = timestamp_ns
            return

        interval_ns = self._mon_cfg.log_interval_s * 1e9
        if timestamp_ns - self._last_log_ns < interval_ns:
            return

        for name in self._streams:
            stats = self.get_stats(name)
            logger.info(
                "%s: rate=%.1f Hz, dt=%.2f+/-%.2f ms, gaps=%d",
                name,
                stats.effective_rate_hz,
                stats.mean_interval_ms,
                stats.std_interval_ms,
                stats.gaps,
            )
        self._last_log_ns = timestamp_ns

    def get_stats(self, stream: str) -> StreamRateStats:
        """Get aggregated statistics for a stream.

        Args:
            stream: ``"gyro"`` or ``"accel"``.

        Returns:
            StreamRateStats with current metrics.
        """
        window = self._streams[stream]
        if not window.intervals:
            return StreamRateStats(
                mean_interval_ms=0.0,
                std_interval_ms=0.0,
                max_interval_ms=0.0,
                min_interval_ms=0.0,
                effective_rate_hz=0.0,
                jitter_ms=0.0,
                gaps=window.gaps,
                total_samples=window.samples,
            )

        dt_array = np.array(window.intervals)
        mean_dt = float(np.mean(dt_array))
        effective_rate = 1000.0 / mean_dt if mean_dt > 0 else 0.0

        return StreamRateStats(
            mean_interval_ms=mean_dt,
            std_interval_ms=float(np.std(dt_array)),
            max_interval_ms=float(np.max(dt_array)),
            min_interval_ms=float(np.min(dt_array)),
            effective_rate_hz=effective_rate,
            jitter_ms=float(np.max(np.abs(dt_array - mean_dt))),
            gaps=window.gaps,
            total_samples=window.samples,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        result = {}
        for name in self._streams:
            stats = self.get_stats(name)
            result.update({
                f"{name}_rate_hz": stats.effective_rate_hz,
                f"{name}_dt_mean_ms": stats.mean_interval_ms,
                f"{name}_jitter_ms": stats.jitter_ms,
                f"{name}_gaps": stats.gaps,
                f"{name}_samples": stats.total_samples,
            })
        return result

    def reset(self) -> None:
        """Reset all metrics."""
        self._streams = {
            name: _StreamWindow(self._mon_cfg.window_size) for name in self._streams
        }
        self._last_log_ns = None
