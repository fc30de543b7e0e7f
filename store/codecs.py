"""Conversion between record text and calendar objects."""

from __future__ import annotations

import re
from collections.abc import Sequence

from config import (
    CalendarConfig,
    EpochDate,
    FractionRange,
    LeapYearRule,
    MonthDefinition,
)
from sim_clock import NEVER_PROCESSED, TimeState
from simulation.logging_utils import CalendarLogger
from store.text_format import SectionValue, parse_sections

_logger = CalendarLogger("Codecs")

_FRACTION_ITEM = re.compile(r"^(.+?):\s*([\d.]+)-([\d.]+)$")
_MONTH_ITEM = re.compile(r"^(.+?)(?:\s*:\s*(\d+))?$")
_ADJUSTMENT_ITEM = re.compile(r"^(.+?):\s*([+-]?\d+)$")
_LEADING_INT = re.compile(r"^\s*(-?\d+)")
_START_DATE = re.compile(r"^\s*(\d{1,2})/(\d{1,2})/(-?\d+)")

_STATE_DAY = re.compile(r"^Day:\s*(-?\d+)")
_STATE_PROGRESS = re.compile(r"^Progress:\s*(\d+)")
_STATE_LAST_TURN = re.compile(r"^Last Processed Turn:\s*(-?\d+)")
_STATE_EVENT_DAY = re.compile(r"^Last Event Day:\s*(-?\d+)")

STATE_HEADER = "# Time State"


class ConfigurationError(ValueError):
    """Raised when calendar configuration text lacks a required field."""


# --- Calendar configuration ---
def _header_value(text: str, label: str) -> str | None:
    for line in text.split("\n"):
        if f"{label}:" in line:
            return line.split(":", 1)[1].strip()
    return None


def _required_int(text: str, label: str) -> int:
    raw = _header_value(text, label)
    match = _LEADING_INT.match(raw) if raw is not None else None
    if match is None or int(match.group(1)) == 0:
        raise ConfigurationError(f"Missing required configuration field: {label}")
    return int(match.group(1))


def _epoch(text: str) -> EpochDate:
    raw = _header_value(text, "Start Date")
    match = _START_DATE.match(raw) if raw is not None else None
    if match is None:
        raise ConfigurationError("Missing required configuration field: Start Date")
    month, day, year = (int(group) for group in match.groups())
    if month < 1:
        raise ConfigurationError(f"Start Date month must be >= 1, got {month}")
    return EpochDate(month=month - 1, day=day, year=year)


def _section_list(sections: dict[str, SectionValue], key: str) -> list[str] | None:
    section = sections.get(key)
    if section is None:
        return None
    if not isinstance(section, list):
        _logger.warning(f"Section '{key}' is not a list; ignoring it")
        return None
    return section


def _fraction_ranges(items: list[str] | None) -> dict[str, FractionRange]:
    ranges: dict[str, FractionRange] = {}
    for item in items or []:
        match = _FRACTION_ITEM.match(item)
        if match:
            ranges[match.group(1).strip()] = FractionRange(
                start=float(match.group(2)), end=float(match.group(3))
            )
    return ranges


def _months(items: list[str] | None) -> list[MonthDefinition]:
    months: list[MonthDefinition] = []
    for item in items or []:
        match = _MONTH_ITEM.match(item)
        if match and match.group(1).strip():
            base_days = int(match.group(2)) if match.group(2) else 30
            months.append(MonthDefinition(name=match.group(1).strip(), base_days=base_days))
    return months


def _month_lookup(months: list[MonthDefinition], name: str) -> int | None:
    lowered = name.strip().lower()
    for index, month in enumerate(months):
        if month.name.lower() == lowered:
            return index
    return None


def _leap_rule(
    section: SectionValue | None,
    adjustment_items: list[str] | None,
    months: list[MonthDefinition],
) -> LeapYearRule | None:
    if section is None:
        return None
    if not isinstance(section, dict):
        _logger.warning("Leap Year section is not a key/value block; ignoring it")
        return None

    enabled = section.get("enabled") is True
    frequency = section.get("frequency")
    if enabled and not frequency:
        _logger.warning("Leap year enabled but frequency not specified; ignoring it")
        return None

    adjustments: dict[int, int] = {}
    legacy_month = section.get("month")
    if legacy_month is not None:
        index = _month_lookup(months, str(legacy_month))
        if index is None:
            _logger.warning(f"Unknown month in legacy leap year: {legacy_month}")
        else:
            adjustments[index] = 1

    for item in adjustment_items or []:
        match = _ADJUSTMENT_ITEM.match(item)
        if not match:
            continue
        index = _month_lookup(months, match.group(1))
        if index is None:
            _logger.warning(f"Unknown month in leap adjustment: {match.group(1).strip()}")
            continue
        adjustments[index] = int(match.group(2))

    if enabled and not adjustments:
        _logger.warning("Leap year enabled but no adjustments defined; disabling it")
        enabled = False

    return LeapYearRule(
        enabled=enabled,
        frequency=frequency or 4,
        skip_frequency=section.get("skip_frequency", 0),
        skip_exception_frequency=section.get("skip_exception", 0),
        start_year=section.get("start_year", 0),
        adjustments=adjustments,
    )


def parse_calendar_text(text: str) -> CalendarConfig:
    """Build a :class:`CalendarConfig` from configuration record text.

    Raises:
        ConfigurationError: a required field or section is missing
        pydantic.ValidationError: a value is out of range
    """
    if not text.strip():
        raise ConfigurationError("Configuration text is empty")

    actions_per_day = _required_int(text, "Actions Per Day")
    hours_per_day = _required_int(text, "Hours Per Day")
    epoch_date = _epoch(text)

    sections = parse_sections(text)

    time_periods = _fraction_ranges(_section_list(sections, "time_periods"))
    if not time_periods:
        raise ConfigurationError("No time periods defined in configuration")

    weekdays = _section_list(sections, "days_of_week")
    if not weekdays:
        raise ConfigurationError("No days of week defined in configuration")

    months = _months(_section_list(sections, "months"))
    if not months:
        raise ConfigurationError("No months defined in configuration")

    return CalendarConfig(
        weekdays=weekdays,
        months=months,
        leap_year=_leap_rule(
            sections.get("leap_year"),
            _section_list(sections, "leap_year_adjustments"),
            months,
        ),
        time_periods=time_periods,
        seasons=_fraction_ranges(_section_list(sections, "seasons")),
        actions_per_day=actions_per_day,
        hours_per_day=hours_per_day,
        epoch_date=epoch_date,
    )


def render_calendar_text(config: CalendarConfig) -> str:
    """Render ``config`` in the layout :func:`parse_calendar_text` reads."""
    epoch = config.epoch_date
    lines = [
        "# Time Configuration",
        f"Actions Per Day: {config.actions_per_day}",
        f"Start Date: {epoch.month + 1:02d}/{epoch.day:02d}/{epoch.year}",
        f"Hours Per Day: {config.hours_per_day}",
        "",
        "## Time Periods",
        *(f"- {name}: {span.start}-{span.end}" for name, span in config.time_periods.items()),
    ]
    if config.seasons:
        lines += ["", "## Seasons"]
        lines += [f"- {name}: {span.start}-{span.end}" for name, span in config.seasons.items()]
    lines += ["", "## Days of Week", *(f"- {name}" for name in config.weekdays)]
    lines += ["", "## Months", *(f"- {month.name}: {month.base_days}" for month in config.months)]

    leap = config.leap_year
    if leap is not None:
        lines += [
            "",
            "## Leap Year",
            f"Enabled: {'true' if leap.enabled else 'false'}",
            f"Frequency: {leap.frequency}",
            f"Skip Frequency: {leap.skip_frequency}",
            f"Skip Exception: {leap.skip_exception_frequency}",
            f"Start Year: {leap.start_year}",
        ]
        if leap.adjustments:
            lines += ["", "## Leap Year Adjustments"]
            lines += [
                f"- {config.months[index].name}: {delta:+d}"
                for index, delta in sorted(leap.adjustments.items())
            ]
    return "\n".join(lines)


def replace_config_value(text: str, label: str, value: int) -> str:
    """Rewrite the integer on the ``label:`` line, leaving the rest untouched."""
    pattern = re.compile(rf"{re.escape(label)}:\s*\d+")
    if not pattern.search(text):
        raise ConfigurationError(f"Configuration has no '{label}' line")
    return pattern.sub(f"{label}: {value}", text, count=1)


# --- Time state ---
def render_state_text(
    state: TimeState,
    actions_per_day: int,
    time_label: str,
    date_label: str,
    season: str | None = None,
    today_events: Sequence[str] = (),
    active_events: Sequence[str] = (),
    announced_day: int | None = None,
) -> str:
    lines = [
        STATE_HEADER,
        f"Progress: {state.progress}/[{actions_per_day}]",
        f"Time: [{time_label}]",
        f"Day: {state.day_number}",
        f"Date: [{date_label}]",
    ]
    if season:
        lines.append(f"Season: [{season}]")
    if today_events:
        lines.append(f"Today's Events: [{', '.join(today_events)}]")
        if active_events:
            lines.append(f"Active Events: [{', '.join(active_events)}]")
    lines += ["", f"Last Processed Turn: {state.last_processed_turn}"]
    if announced_day is not None:
        lines.append(f"Last Event Day: {announced_day}")
    return "\n".join(lines)


def parse_announced_day(text: str) -> int | None:
    """Day number the event-day notification was last sent for, if recorded."""
    for raw_line in text.split("\n"):
        if match := _STATE_EVENT_DAY.match(raw_line.strip()):
            return int(match.group(1))
    return None


def parse_state_text(text: str) -> TimeState:
    """Read the three persisted fields back; missing fields keep their defaults."""
    day_number, progress, last_turn = 0, 0, NEVER_PROCESSED
    for raw_line in text.split("\n"):
        line = raw_line.strip()
        if match := _STATE_DAY.match(line):
            day_number = int(match.group(1))
        elif match := _STATE_PROGRESS.match(line):
            progress = int(match.group(1))
        elif match := _STATE_LAST_TURN.match(line):
            last_turn = int(match.group(1))
    return TimeState(day_number=day_number, progress=progress, last_processed_turn=last_turn)


# --- Default records ---
DEFAULT_CALENDAR_TEXT = """# Time Configuration
Actions Per Day: 200
Start Date: 11/06/2022
Hours Per Day: 24

## Time Periods
- Late Night: 0.92-0.21
- Dawn: 0.21-0.29
- Morning: 0.29-0.42
- Midday: 0.42-0.58
- Afternoon: 0.58-0.71
- Evening: 0.71-0.79
- Night: 0.79-0.92

## Seasons
// Fractions of the year: 0.0 is the first day, 1.0 the end of the last.
// A range whose start is larger than its end wraps into the next year.
- Winter: 0.92-0.25
- Spring: 0.25-0.5
- Summer: 0.5-0.75
- Autumn: 0.75-0.92

## Days of Week
// The first entry is the weekday of the start date.
- Sunday
- Monday
- Tuesday
- Wednesday
- Thursday
- Friday
- Saturday

## Months
- January: 31
- February: 28
- March: 31
- April: 30
- May: 31
- June: 30
- July: 31
- August: 31
- September: 30
- October: 31
- November: 30
- December: 31

## Leap Year
// Every 4 years, skipped every 100, except every 400.
Enabled: true
Frequency: 4
Skip Frequency: 100
Skip Exception: 400
Start Year: 0

## Leap Year Adjustments
// Signed day deltas applied in leap years, e.g. "- Voidmonth: -3".
- February: +1"""

DEFAULT_EVENT_TEXT = """# Event Days
// Event Name: MM/DD[/YYYY] [once | every N years | annual]
// Event Name: Nth Weekday of Month (1st-5th or last)
// Event Name: Weekday
// Event Name: daily
// Append "lasting N days" for multi-day events and "@ HH:MM-HH:MM" for time windows.

## Annual Events
- New Year: 1/1
- Valentine's Day: 2/14
- Independence Day: 7/4
- Halloween: 10/31
- Christmas: 12/25 @ 10:00-14:00

## Relative Date Events
- Martin Luther King Jr Day: 3rd Monday of January
- Presidents Day: 3rd Monday of February
- Mother's Day: 2nd Sunday of May @ 11:00-14:00
- Memorial Day: last Monday of May
- Father's Day: 3rd Sunday of June
- Labor Day: 1st Monday of September
- Columbus Day: 2nd Monday of October
- Thanksgiving: 4th Thursday of November @ 12:00-20:00

## Daily Events
- Sunrise: daily @ 6:00-6:30
- Lunch Break: daily @ 12:00-13:00
- Sunset: daily @ 18:00-18:30
- Shop Hours: daily @ 9:00-17:00

## Weekly Events
- Monday Meeting: Monday @ 9:00-10:00
- Trash Pickup: Tuesday @ 8:00-8:30
- Market Day: Wednesday @ 8:00-14:00
- Happy Hour: Friday @ 17:00-19:00
- Boss Raid: Sunday @ 20:00-22:00

## Multi-Day Events
- Spring Conference: 3/15 lasting 3 days @ 9:00-17:00
- Summer Festival: 2nd Friday of July lasting 3 days @ 10:00-22:00

## Periodic Events
- Summer Olympics: 7/15/2024 every 4 years @ 9:00-23:00
- Winter Olympics: 2/1/2026 every 4 years @ 8:00-22:00
- World Cup: 6/1/2026 every 4 years
- Leap Day: 2/29 annual

## One-Time Events
- Solar Eclipse: 4/8/2024 @ 14:00-14:30 once"""

DEFAULT_EVENT_DESCRIPTION = "// More events can be listed here."
