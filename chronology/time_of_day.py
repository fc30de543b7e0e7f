"""Clock-face conversions between day progress and wall time."""

from __future__ import annotations

from collections.abc import Mapping

from config import UNKNOWN_PERIOD, CalendarConfig, FractionRange


def minutes_of_day(day_progress: float, hours_per_day: int) -> int:
    """Whole minutes since midnight for a day progress in ``[0, 1]``."""
    total_minutes = int(day_progress * hours_per_day * 60)
    hour = (total_minutes // 60) % hours_per_day
    return hour * 60 + total_minutes % 60


def progress_to_time(day_progress: float, hours_per_day: int) -> str:
    day_progress = max(0.0, min(1.0, day_progress))
    hour, minute = divmod(minutes_of_day(day_progress, hours_per_day), 60)
    return f"{hour:02d}:{minute:02d}"


def time_to_progress(hour: int, minute: int, hours_per_day: int) -> float:
    return (hour + minute / 60) / hours_per_day


def format_12_hour(time_str: str, hours_per_day: int) -> str:
    """Render ``HH:MM`` with an AM/PM suffix.

    Days with an odd number of hours cannot be split into two halves, so the
    time is returned unchanged for them.
    """
    if hours_per_day % 2 != 0:
        return time_str

    hour_str, minute_str = time_str.split(":")
    hour = int(hour_str)
    half_day = hours_per_day // 2

    is_pm = hour >= half_day
    if is_pm and hour > half_day:
        hour -= half_day
    if hour == 0:
        hour = half_day
    return f"{hour}:{minute_str} {'PM' if is_pm else 'AM'}"


def classify(
    value: float,
    ranges: Mapping[str, FractionRange],
    allow_full_end: bool = False,
) -> str:
    """Name of the first range containing ``value``, in declaration order."""
    for name, fraction_range in ranges.items():
        if fraction_range.contains(value, allow_full_end=allow_full_end):
            return name
    return UNKNOWN_PERIOD


def time_period(day_progress: float, config: CalendarConfig) -> str:
    return classify(day_progress, config.time_periods)
