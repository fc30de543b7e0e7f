import pytest

from chronology.time_of_day import (
    classify,
    format_12_hour,
    minutes_of_day,
    progress_to_time,
    time_period,
    time_to_progress,
)
from config import CalendarConfig, FractionRange


def test_progress_to_time_on_a_24_hour_day() -> None:
    assert progress_to_time(0.0, 24) == "00:00"
    assert progress_to_time(0.5, 24) == "12:00"
    assert progress_to_time(0.375, 24) == "09:00"
    assert progress_to_time(1.0, 24) == "00:00"


def test_progress_to_time_clamps_out_of_range_values() -> None:
    assert progress_to_time(-0.2, 24) == "00:00"
    assert progress_to_time(1.7, 24) == progress_to_time(1.0, 24)


def test_progress_to_time_on_a_short_day() -> None:
    """A 20-hour day puts the halfway mark at 10:00."""
    assert progress_to_time(0.5, 20) == "10:00"
    assert minutes_of_day(0.5, 20) == 600


def test_time_to_progress() -> None:
    assert time_to_progress(6, 0, 24) == pytest.approx(0.25)
    assert time_to_progress(14, 30, 24) == pytest.approx(14.5 / 24)


@pytest.mark.parametrize(
    ("time_str", "expected"),
    [
        ("00:05", "12:05 AM"),
        ("09:30", "9:30 AM"),
        ("12:00", "12:00 PM"),
        ("14:30", "2:30 PM"),
        ("23:59", "11:59 PM"),
    ],
)
def test_format_12_hour_on_even_days(time_str: str, expected: str) -> None:
    assert format_12_hour(time_str, 24) == expected


def test_format_12_hour_leaves_odd_days_alone() -> None:
    assert format_12_hour("14:30", 25) == "14:30"


def test_classify_respects_wrapping_and_order() -> None:
    ranges = {
        "Night": FractionRange(start=0.8, end=0.2),
        "Day": FractionRange(start=0.2, end=0.8),
    }
    assert classify(0.9, ranges) == "Night"
    assert classify(0.1, ranges) == "Night"
    assert classify(0.5, ranges) == "Day"


def test_classify_full_end_only_when_allowed() -> None:
    ranges = {"Late": FractionRange(start=0.5, end=1.0)}
    assert classify(1.0, ranges) == "Unknown"
    assert classify(1.0, ranges, allow_full_end=True) == "Late"


def test_time_period_uses_configured_periods(earth_config: CalendarConfig) -> None:
    assert time_period(0.0, earth_config) == "Late Night"
    assert time_period(0.35, earth_config) == "Morning"
    assert time_period(0.95, earth_config) == "Late Night"
