"""
Tests for the trailing moving average.
"""
import random

import pytest

from jrrp.errors import ValidationError, WindowLengthError
from jrrp.smoothing import moving_average


def _series(values):
    return [(f"2024-01-{i + 1:02d}", v) for i, v in enumerate(values)]


def _naive(series, window):
    return [
        (series[i + window - 1][0], sum(v for _, v in series[i:i + window]) / window)
        for i in range(len(series) - window + 1)
    ]


class TestMovingAverage:
    def test_simple_window(self):
        result = moving_average(_series([10, 20, 30, 40]), 2)
        assert result == [("2024-01-02", 15.0), ("2024-01-03", 25.0), ("2024-01-04", 35.0)]

    def test_trailing_alignment_uses_last_day_of_window(self):
        series = _series([1, 2, 3, 4, 5])
        result = moving_average(series, 3)
        assert [day for day, _ in result] == ["2024-01-03", "2024-01-04", "2024-01-05"]

    def test_window_equal_to_length_gives_single_point(self):
        series = _series([0, 100, 50])
        assert moving_average(series, 3) == [("2024-01-03", 50.0)]

    def test_window_of_one_is_identity(self):
        series = _series([7, 8, 9])
        assert moving_average(series, 1) == [(d, float(v)) for d, v in series]

    @pytest.mark.parametrize("length", [1, 2, 5, 17, 31])
    def test_output_length_for_every_window(self, length):
        rng = random.Random(length)
        series = _series([rng.randint(0, 100) for _ in range(length)])
        for window in range(1, length + 1):
            assert len(moving_average(series, window)) == length - window + 1

    def test_matches_naive_recomputation_with_floats(self):
        rng = random.Random(42)
        series = [(f"day-{i:04d}", rng.uniform(1, 100)) for i in range(500)]
        for window in (1, 2, 7, 30, 123, 500):
            fast = moving_average(series, window)
            slow = _naive(series, window)
            assert [d for d, _ in fast] == [d for d, _ in slow]
            for (_, a), (_, b) in zip(fast, slow):
                assert a == pytest.approx(b, rel=1e-9)


class TestMovingAverageValidation:
    def test_window_longer_than_history(self):
        with pytest.raises(WindowLengthError) as exc:
            moving_average(_series([1, 2, 3]), 4)
        assert exc.value.code == "WINDOW_TOO_LARGE"
        assert exc.value.details == {"window": 4, "length": 3}
        assert "exceeds history length" in exc.value.message

    def test_window_error_is_a_validation_error(self):
        with pytest.raises(ValidationError):
            moving_average(_series([1]), 2)

    @pytest.mark.parametrize("window", [0, -1])
    def test_non_positive_window(self, window):
        with pytest.raises(WindowLengthError) as exc:
            moving_average(_series([1, 2, 3]), window)
        assert exc.value.code == "INVALID_WINDOW"

    @pytest.mark.parametrize("window", [1.5, "2", True])
    def test_non_integer_window(self, window):
        with pytest.raises(ValidationError):
            moving_average(_series([1, 2, 3]), window)

    def test_empty_series(self):
        with pytest.raises(WindowLengthError):
            moving_average([], 1)
