"""Calendar arithmetic and clock-face helpers."""

from .date_math import LAST, CivilDate, DateArithmetic
from .time_of_day import (
    classify,
    format_12_hour,
    minutes_of_day,
    progress_to_time,
    time_period,
    time_to_progress,
)

__all__ = [
    "LAST",
    "CivilDate",
    "DateArithmetic",
    "classify",
    "format_12_hour",
    "minutes_of_day",
    "progress_to_time",
    "time_period",
    "time_to_progress",
]
