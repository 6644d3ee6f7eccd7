"""Tests for stationary gyro bias detection."""

import pytest
import numpy as np
from numpy.testing import assert_allclose

from gyro_aim.calibration.gyro_bias import GyroBiasDetector
from gyro_aim.core.config import Config


class TestGyroBiasDetector:
    """Tests for GyroBiasDetector."""

    def test_invalid_split(self):
        """Window that cannot be split evenly should be rejected."""
        with pytest.raises(ValueError):
            GyroBiasDetector(window_size=105, block_count=10)
        with pytest.raises(ValueError):
            GyroBiasDetector(window_size=0, block_count=10)

    def test_from_config(self):
        """Detector should take its parameters from the bias section."""
        config = Config()
        config.bias.window_size = 40
        config.bias.block_count = 4
        detector = GyroBiasDetector.from_config(config)

        for _ in range(39):
            assert detector.update(np.array([0.001, 0.0, 0.0])) is None
        assert detector.update(np.array([0.001, 0.0, 0.0])) is not None

    def test_stationary_window_detected(self):
        """A constant small reading should become the bias."""
        detector = GyroBiasDetector(window_size=100, block_count=10)
        offset = np.array([0.01, -0.02, 0.005])

        results = [detector.update(offset) for _ in range(100)]

        assert all(r is None for r in results[:-1])
        assert_allclose(results[-1], offset, atol=1e-12)
        assert_allclose(detector.bias, offset, atol=1e-12)
        assert detector.detections == 1

    def test_noisy_stationary_window(self):
        """Small noise around the bias should still be accepted."""
        rng = np.random.default_rng(1)
        detector = GyroBiasDetector(window_size=500, block_count=10, tolerance=0.05)
        offset = np.array([0.03, 0.02, -0.01])

        result = None
        for _ in range(500):
            result = detector.update(offset + rng.normal(0, 1e-4, 3))

        assert result is not None
        assert_allclose(result, offset, atol=1e-4)

    def test_moving_window_rejected(self):
        """A changing rate should not be mistaken for a bias."""
        detector = GyroBiasDetector(window_size=100, block_count=10)

        result = None
        for i in range(100):
            rate = 0.01 if i < 50 else 0.03
            result = detector.update(np.array([rate, 0.0, 0.0]))

        assert result is None
        assert_allclose(detector.bias, np.zeros(3))

    def test_steady_turn_rejected(self):
        """A steady deliberate turn exceeds the bias cap."""
        detector = GyroBiasDetector(window_size=100, block_count=10, max_bias_rad_s=0.1)

        result = None
        for _ in range(100):
            result = detector.update(np.array([0.0, 0.5, 0.0]))

        assert result is None
        assert detector.detections == 0

    def test_window_restarts(self):
        """Each window should be judged independently."""
        detector = GyroBiasDetector(window_size=20, block_count=4)

        for i in range(20):
            detector.update(np.array([0.002 * i, 0.0, 0.0]))
        assert detector.detections == 0

        for _ in range(20):
            detector.update(np.array([0.02, 0.0, 0.0]))
        assert detector.detections == 1
        assert_allclose(detector.bias, [0.02, 0.0, 0.0], atol=1e-12)

    def test_reset(self):
        """Reset should clear the bias and the partial window."""
        detector = GyroBiasDetector(window_size=10, block_count=2)
        for _ in range(10):
            detector.update(np.array([0.01, 0.0, 0.0]))
        for _ in range(5):
            detector.update(np.array([0.5, 0.0, 0.0]))

        detector.reset()

        assert_allclose(detector.bias, np.zeros(3))
        assert detector.detections == 0
        for _ in range(9):
            assert detector.update(np.array([0.02, 0.0, 0.0])) is None
        assert detector.update(np.array([0.02, 0.0, 0.0])) is not None
