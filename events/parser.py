"""Line grammar for event records.

One event per line::

    Name: daily
    Name: Monday                      (or Mondays)
    Name: 4th Thursday of November [2025] [once|only|every N years]
    Name: 12/25[/2024] [once|one-off|only|every N years|annual|yearly]

Any form may be followed by ``lasting N days`` and then by
``@ HH:MM-HH:MM[, HH:MM-HH:MM ...]``. Lines that match nothing are dropped.
"""

from __future__ import annotations

import re

from chronology.date_math import LAST
from config import CalendarConfig
from events.rules import (
    AnnualEvent,
    AnyEventRule,
    ClockTime,
    DailyEvent,
    EveryNYears,
    EveryYear,
    OnceEvent,
    OnlyYear,
    PeriodicEvent,
    RelativeEvent,
    TimeWindow,
    WeeklyEvent,
    YearGate,
)
from simulation.logging_utils import CalendarLogger

_logger = CalendarLogger("EventParser")

_BULLET = re.compile(r"^[-•*]\s*")
_TIME_SUFFIX = re.compile(r"^(.+?)@\s*(.+)$")
_DURATION = re.compile(r"^(.+?)\s+lasting\s+(\d+)\s+days?$", re.IGNORECASE)
_TIME_RANGE = re.compile(r"(\d{1,2}):(\d{2})-(\d{1,2}):(\d{2})")
_DAILY = re.compile(r"^(.+?):\s*daily\s*$", re.IGNORECASE)
_WEEKLY = re.compile(r"^(.+?):\s*(\w+)\s*$")
_RELATIVE = re.compile(
    r"^(.+?):\s*(1st|2nd|3rd|4th|5th|last)\s+(\w+)\s+of\s+(\w+)\s*(.*)$",
    re.IGNORECASE,
)
_FIXED_DATE = re.compile(r"^(.+?):\s*(\d{1,2})/(\d{1,2})(?:/(\d{4}))?\s*(.*)$")
_YEAR = re.compile(r"(\d{4})")
_EVERY = re.compile(r"every\s+(\d+)\s+years?")

_NTH = {"1st": 1, "2nd": 2, "3rd": 3, "4th": 4, "5th": 5, "last": LAST}


def parse_time_ranges(spec: str) -> tuple[TimeWindow, ...]:
    windows: list[TimeWindow] = []
    for part in spec.split(","):
        match = _TIME_RANGE.search(part.strip())
        if not match:
            continue
        start_hour, start_minute, end_hour, end_minute = (int(group) for group in match.groups())
        try:
            windows.append(
                TimeWindow(ClockTime(start_hour, start_minute), ClockTime(end_hour, end_minute))
            )
        except ValueError as exc:
            _logger.debug(f"Ignoring time range '{part.strip()}': {exc}")
    return tuple(windows)


def _split_schedule(text: str) -> tuple[str, int, tuple[TimeWindow, ...]]:
    """Strip the ``@`` time ranges and ``lasting`` clause off an event line."""
    base = text
    time_ranges: tuple[TimeWindow, ...] = ()
    time_match = _TIME_SUFFIX.match(text)
    if time_match:
        base = time_match.group(1).strip()
        time_ranges = parse_time_ranges(time_match.group(2).strip())

    duration = 1
    duration_match = _DURATION.match(base)
    if duration_match:
        base = duration_match.group(1).strip()
        duration = max(int(duration_match.group(2)), 1)
    return base, duration, time_ranges


def _match_weekday(word: str, config: CalendarConfig) -> int | None:
    index = config.weekday_index(word)
    if index is None and word.lower().endswith("s"):
        index = config.weekday_index(word[:-1])
    return index


def _relative_gate(modifiers: str) -> YearGate:
    year_match = _YEAR.search(modifiers)
    if not year_match:
        return EveryYear()
    year = int(year_match.group(1))
    if "once" in modifiers or "only" in modifiers:
        return OnlyYear(year)
    every_match = _EVERY.search(modifiers)
    if every_match and int(every_match.group(1)) > 0:
        return EveryNYears(start_year=year, frequency=int(every_match.group(1)))
    # A year without "once" or "every N years" does not restrict the rule.
    return EveryYear()


def _parse_relative(
    match: re.Match[str],
    config: CalendarConfig,
    duration: int,
    time_ranges: tuple[TimeWindow, ...],
) -> RelativeEvent | None:
    name = match.group(1).strip()
    nth = _NTH[match.group(2).lower()]
    weekday_name, month_name = match.group(3), match.group(4)
    modifiers = match.group(5).strip().lower()

    month = config.month_index(month_name)
    if month is None:
        _logger.debug(f"Invalid month in event: {name} ({month_name})")
        return None
    weekday = config.weekday_index(weekday_name)
    if weekday is None:
        _logger.debug(f"Invalid weekday in event: {name} ({weekday_name})")
        return None

    return RelativeEvent(
        name=name,
        month=month,
        nth=nth,
        weekday=weekday,
        gate=_relative_gate(modifiers),
        duration_days=duration,
        time_ranges=time_ranges,
    )


def _parse_fixed_date(
    match: re.Match[str],
    config: CalendarConfig,
    duration: int,
    time_ranges: tuple[TimeWindow, ...],
) -> AnnualEvent | OnceEvent | PeriodicEvent | None:
    name = match.group(1).strip()
    month = int(match.group(2)) - 1
    day = int(match.group(3))
    year = int(match.group(4)) if match.group(4) else None
    modifiers = match.group(5).strip().lower()

    if not 0 <= month < len(config.months):
        _logger.debug(f"Invalid month in event: {name} ({match.group(2)})")
        return None
    # Days that only exist in leap years are accepted.
    if not 1 <= day <= config.max_month_length(month):
        _logger.debug(f"Invalid day in event: {name} ({day} in {config.months[month].name})")
        return None

    common = {"name": name, "month": month, "day": day, "duration_days": duration, "time_ranges": time_ranges}
    if year is None or "annual" in modifiers or "yearly" in modifiers:
        return AnnualEvent(**common)
    if "once" in modifiers or "one-off" in modifiers or "only" in modifiers:
        return OnceEvent(year=year, **common)
    every_match = _EVERY.search(modifiers)
    if every_match and int(every_match.group(1)) > 0:
        return PeriodicEvent(year=year, frequency=int(every_match.group(1)), **common)
    return OnceEvent(year=year, **common)


def parse_event_line(line: str, config: CalendarConfig) -> AnyEventRule | None:
    """Parse a single event line, returning ``None`` when it matches no form."""
    cleaned = _BULLET.sub("", line.strip()).strip()
    if not cleaned:
        return None

    base, duration, time_ranges = _split_schedule(cleaned)

    daily_match = _DAILY.match(base)
    if daily_match:
        return DailyEvent(
            name=daily_match.group(1).strip(), duration_days=duration, time_ranges=time_ranges
        )

    weekly_match = _WEEKLY.match(base)
    if weekly_match:
        weekday = _match_weekday(weekly_match.group(2), config)
        if weekday is not None:
            return WeeklyEvent(
                name=weekly_match.group(1).strip(),
                weekday=weekday,
                duration_days=duration,
                time_ranges=time_ranges,
            )

    relative_match = _RELATIVE.match(base)
    if relative_match:
        return _parse_relative(relative_match, config, duration, time_ranges)

    fixed_match = _FIXED_DATE.match(base)
    if fixed_match:
        return _parse_fixed_date(fixed_match, config, duration, time_ranges)

    _logger.debug(f"Unrecognized event line: {cleaned}")
    return None


def parse_event_text(text: str, config: CalendarConfig) -> list[AnyEventRule]:
    """Parse every event line of a record field, skipping blanks and comments."""
    rules: list[AnyEventRule] = []
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("//") or stripped.startswith("#"):
            continue
        rule = parse_event_line(stripped, config)
        if rule is not None:
            rules.append(rule)
    return rules
