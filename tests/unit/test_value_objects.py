"""Unit tests for domain value objects."""

import pytest
from pydantic import ValidationError

from src.domain.value_objects import FrameSamplingConfig


class TestFrameSamplingConfig:
    """Tests for FrameSamplingConfig."""

    def test_defaults(self):
        config = FrameSamplingConfig()
        assert config.interval_seconds == 2.0
        assert config.max_frames == 300
        assert config.quality == 85
        assert config.width is None

    def test_fps(self):
        assert FrameSamplingConfig(interval_seconds=2.0).fps == 0.5
        assert FrameSamplingConfig(interval_seconds=0.5).fps == 2.0

    @pytest.mark.parametrize(
        ("frame_number", "expected"),
        [(1, 0.0), (2, 2.0), (12, 22.0)],
    )
    def test_timestamp_for(self, frame_number, expected):
        assert FrameSamplingConfig().timestamp_for(frame_number) == expected

    def test_timestamp_rounding(self):
        config = FrameSamplingConfig(interval_seconds=0.1)
        assert config.timestamp_for(4) == 0.3

    @pytest.mark.parametrize(
        ("duration", "expected"),
        [(0, 0), (-5, 0), (1.0, 1), (24.0, 12), (24.5, 13), (10_000, 300)],
    )
    def test_expected_frame_count(self, duration, expected):
        assert FrameSamplingConfig().expected_frame_count(duration) == expected

    def test_is_frozen(self):
        config = FrameSamplingConfig()
        with pytest.raises(ValidationError):
            config.max_frames = 10  # type: ignore[misc]

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"interval_seconds": 0},
            {"max_frames": 0},
            {"quality": 101},
            {"width": 8},
        ],
    )
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValidationError):
            FrameSamplingConfig(**kwargs)
