"""
Tests for duration and distance formatting.
"""

import pytest

from logic.formatting import format_distance, format_duration, round_half_up


@pytest.mark.parametrize(
    "days, hours, expected",
    [
        (0, 0, "0 min"),
        (0, 0.5, "30 min"),
        (0, 0.25, "18 min"),
        (0, 0.96, "1 hr"),
        (0, 1, "1 hr"),
        (0, 2.5, "2.5 hr"),
        (0, 7.94, "7.9 hr"),
        (1, 0, "1 day"),
        (1, 0.04, "1 day"),
        (3, 0, "3 days"),
        (1, 4, "1 day, 4 hr"),
        (2, 1.25, "2 days, 1.3 hr"),
    ],
)
def test_format_duration(days, hours, expected):
    assert format_duration(days, hours) == expected


def test_round_half_up():
    assert round_half_up(2.25) == 2.3
    assert round_half_up(0.05) == 0.1
    assert round_half_up(2.5, 0) == 3


def test_format_distance():
    assert format_distance(12.346, "miles") == "12.35 miles"
    assert format_distance(24, "km") == "24 km"
