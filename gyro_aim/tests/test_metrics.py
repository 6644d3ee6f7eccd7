"""Tests for stream monitoring."""

import logging

import pytest

from gyro_aim.core.config import Config, MonitoringConfig
from gyro_aim.monitoring.metrics import StreamMonitor, GYRO, ACCEL

MS = 1_000_000


class TestStreamMonitor:
    """Tests for StreamMonitor."""

    @pytest.fixture
    def monitor(self, config):
        return StreamMonitor(config)

    def test_empty_stats(self, monitor):
        """No samples should give zeroed statistics."""
        stats = monitor.get_stats(GYRO)
        assert stats.effective_rate_hz == 0.0
        assert stats.total_samples == 0

    def test_regular_rate(self, monitor):
        """Samples 10 ms apart should report 100 Hz."""
        for i in range(50):
            monitor.record(GYRO, i * 10 * MS)

        stats = monitor.get_stats(GYRO)
        assert abs(stats.effective_rate_hz - 100.0) < 1e-9
        assert abs(stats.mean_interval_ms - 10.0) < 1e-9
        assert stats.jitter_ms < 1e-9
        assert stats.total_samples == 50

    def test_jitter(self, monitor):
        """Irregular spacing should show as jitter."""
        t = 0
        for dt_ms in (10, 10, 14, 10, 6, 10):
            t += dt_ms * MS
            monitor.record(ACCEL, t)

        stats = monitor.get_stats(ACCEL)
        assert abs(stats.mean_interval_ms - 10.0) < 1e-9
        assert abs(stats.jitter_ms - 4.0) < 1e-9
        assert stats.max_interval_ms == 14.0
        assert stats.min_interval_ms == 6.0

    def test_gaps_counted_not_averaged(self, monitor):
        """Stream gaps should be counted and left out of the rate."""
        monitor.record(GYRO, 0)
        monitor.record(GYRO, 10 * MS)
        monitor.record(GYRO, 900 * MS)
        monitor.record(GYRO, 910 * MS)
        monitor.record(GYRO, 905 * MS)

        stats = monitor.get_stats(GYRO)
        assert stats.gaps == 2
        assert abs(stats.effective_rate_hz - 100.0) < 1e-9

    def test_streams_independent(self, monitor):
        """Gyro and accelerometer streams should not share history."""
        for i in range(10):
            monitor.record(GYRO, i * 5 * MS)
            monitor.record(ACCEL, i * 20 * MS)

        assert abs(monitor.get_stats(GYRO).effective_rate_hz - 200.0) < 1e-9
        assert abs(monitor.get_stats(ACCEL).effective_rate_hz - 50.0) < 1e-9

    def test_unknown_stream(self, monitor):
        """Unknown stream names should raise KeyError."""
        with pytest.raises(KeyError):
            monitor.record("magnetometer", 0)

    def test_to_dict(self, monitor):
        """Dictionary should carry keys for both streams."""
        monitor.record(GYRO, 0)
        monitor.record(GYRO, 10 * MS)

        d = monitor.to_dict()
        assert d["gyro_samples"] == 2
        assert d["accel_samples"] == 0
        assert "gyro_rate_hz" in d
        assert "accel_jitter_ms" in d

    def test_periodic_log(self, caplog):
        """Rates should be logged once per log interval of sample time."""
        config = Config(monitoring=MonitoringConfig(log_interval_s=0.1))
        monitor = StreamMonitor(config)

        with caplog.at_level(logging.INFO, logger="gyro_aim.monitoring.metrics"):
            for i in range(31):
                monitor.record(GYRO, i * 10 * MS)

        reports = [r for r in caplog.records if r.getMessage().startswith("gyro:")]
        assert len(reports) == 3

    def test_reset(self, monitor):
        """Reset should clear all streams."""
        for i in range(5):
            monitor.record(GYRO, i * 10 * MS)
        monitor.reset()

        assert monitor.get_stats(GYRO).total_samples == 0
