"""
Amplitude normalizer tests
==========================

Rolling 15-day position of today's tidal range.
"""
from datetime import date, timedelta

import pytest

from conftest import daily_series
from features.stages.services.amplitude_normalizer import AmplitudeNormalizer

START = date(2025, 11, 1)
TARGET = START + timedelta(days=14)


class TestNormalize:
    """normalize() 테스트"""

    def test_position_in_window(self):
        ranges = [100, 240] + [150] * 12 + [170]
        assert AmplitudeNormalizer().normalize(daily_series(START, ranges), TARGET) == pytest.approx(0.5)

    def test_window_max_is_one(self):
        ranges = [100 + 10 * i for i in range(15)]
        assert AmplitudeNormalizer().normalize(daily_series(START, ranges), TARGET) == pytest.approx(1.0)

    def test_fewer_than_window_days(self):
        """유효 일수 15일 미만이면 None"""
        ranges = [100 + 10 * i for i in range(14)]
        series = daily_series(START + timedelta(days=1), ranges)
        assert AmplitudeNormalizer().normalize(series, TARGET) is None

    def test_invalid_day_in_window(self):
        ranges = [100 + 10 * i for i in range(15)]
        ranges[3] = None
        assert AmplitudeNormalizer().normalize(daily_series(START, ranges), TARGET) is None

    def test_nan_day_in_window(self):
        ranges = [100 + 10 * i for i in range(15)]
        ranges[5] = float("nan")
        assert AmplitudeNormalizer().normalize(daily_series(START, ranges), TARGET) is None

    def test_target_missing(self):
        ranges = [100 + 10 * i for i in range(15)]
        assert AmplitudeNormalizer().normalize(daily_series(START, ranges), TARGET + timedelta(days=1)) is None

    def test_flat_window(self):
        assert AmplitudeNormalizer().normalize(daily_series(START, [200] * 15), TARGET) == 0.0

    def test_days_after_target_ignored(self):
        ranges = [100 + 10 * i for i in range(15)] + [1000, 1000]
        assert AmplitudeNormalizer().normalize(daily_series(START, ranges), TARGET) == pytest.approx(1.0)

    def test_result_is_bounded(self):
        ranges = [300, 20, 500, 90, 250, 410, 60, 330, 180, 75, 440, 210, 130, 360, 15]
        value = AmplitudeNormalizer().normalize(daily_series(START, ranges), TARGET)
        assert 0.0 <= value <= 1.0


class TestFromRange:
    """Single-day fallback"""

    def test_scaled(self):
        assert AmplitudeNormalizer().from_range(150) == pytest.approx(0.5)

    def test_saturates(self):
        assert AmplitudeNormalizer().from_range(720) == 1.0

    def test_unknown(self):
        assert AmplitudeNormalizer().from_range(None) is None
        assert AmplitudeNormalizer().from_range(float("inf")) is None
