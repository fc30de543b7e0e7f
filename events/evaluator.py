"""Matching event rules against dates and times of day."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Literal

from chronology.date_math import CivilDate, DateArithmetic
from chronology.time_of_day import minutes_of_day
from events.rules import (
    AnnualEvent,
    AnyEventRule,
    DailyEvent,
    OnceEvent,
    PeriodicEvent,
    RelativeEvent,
    TimeWindow,
    WeeklyEvent,
)

RangeState = Literal["active", "upcoming", "completed"]


@dataclass(frozen=True)
class TimeRangeStatus:
    state: RangeState
    all_day: bool = False
    current_range: TimeWindow | None = None
    progress: float | None = None
    minutes_remaining: int | None = None
    next_range: TimeWindow | None = None
    minutes_until: int | None = None

    @property
    def active(self) -> bool:
        return self.state == "active"


@dataclass(frozen=True)
class ScheduledEvent:
    rule: AnyEventRule
    status: TimeRangeStatus


@dataclass(frozen=True)
class UpcomingDay:
    days_until: int
    date: str
    events: tuple[AnyEventRule, ...]


@dataclass(frozen=True)
class OngoingEvent:
    rule: AnyEventRule
    start_day_number: int
    day_index: int
    """1-based day within the event's ``duration_days``."""


def time_range_status(
    event: AnyEventRule, day_progress: float, hours_per_day: int
) -> TimeRangeStatus:
    """Where ``day_progress`` falls relative to the event's time windows.

    Window ends are inclusive, so the last minute of a window is still active
    with zero minutes remaining.
    """
    if event.all_day:
        return TimeRangeStatus(state="active", all_day=True)

    now = minutes_of_day(day_progress, hours_per_day)
    for window in event.time_ranges:
        if window.start_minutes <= now <= window.end_minutes:
            length = window.end_minutes - window.start_minutes
            return TimeRangeStatus(
                state="active",
                current_range=window,
                progress=(now - window.start_minutes) / length if length else 0.0,
                minutes_remaining=window.end_minutes - now,
            )

    ahead = [window for window in event.time_ranges if window.start_minutes > now]
    if ahead:
        next_window = min(ahead, key=lambda window: window.start_minutes)
        return TimeRangeStatus(
            state="upcoming",
            next_range=next_window,
            minutes_until=next_window.start_minutes - now,
        )
    return TimeRangeStatus(state="completed")


@dataclass(frozen=True)
class EventEvaluator:
    """Answers "what happens on this day" for a catalog of rules."""

    dates: DateArithmetic

    def occurs_on(self, rule: AnyEventRule, date: CivilDate, weekday: int) -> bool:
        match rule:
            case DailyEvent():
                return True
            case WeeklyEvent(weekday=rule_weekday):
                return rule_weekday == weekday
            case RelativeEvent(month=month, nth=nth, weekday=rule_weekday, gate=gate):
                if month != date.month or not gate.allows(date.year):
                    return False
                resolved = self.dates.nth_weekday_of_month(nth, rule_weekday, month, date.year)
                return resolved == date.day
            case AnnualEvent(month=month, day=day):
                return (month, day) == (date.month, date.day)
            case OnceEvent(month=month, day=day, year=year):
                return (month, day, year) == (date.month, date.day, date.year)
            case PeriodicEvent(month=month, day=day):
                return (month, day) == (date.month, date.day) and rule.occurs_in(date.year)
        return False

    def events_on_date(self, date: CivilDate, catalog: Iterable[AnyEventRule]) -> list[AnyEventRule]:
        # Feb 30 and friends match nothing rather than raising.
        if not self.dates.date_exists(date):
            return []
        weekday = self.dates.day_of_week_for_date(date.month, date.day, date.year)
        return [rule for rule in catalog if self.occurs_on(rule, date, weekday)]

    def events_on_day(self, day_number: int, catalog: Iterable[AnyEventRule]) -> list[AnyEventRule]:
        return self.events_on_date(self.dates.date_from_day_number(day_number), catalog)

    def scheduled_events(
        self, day_number: int, day_progress: float, catalog: Iterable[AnyEventRule]
    ) -> list[ScheduledEvent]:
        hours_per_day = self.dates.config.hours_per_day
        return [
            ScheduledEvent(rule, time_range_status(rule, day_progress, hours_per_day))
            for rule in self.events_on_day(day_number, catalog)
        ]

    def active_events(
        self, day_number: int, day_progress: float, catalog: Iterable[AnyEventRule]
    ) -> list[ScheduledEvent]:
        return [
            scheduled
            for scheduled in self.scheduled_events(day_number, day_progress, catalog)
            if scheduled.status.active
        ]

    def upcoming_events(
        self, day_number: int, days_ahead: int, catalog: Iterable[AnyEventRule]
    ) -> list[UpcomingDay]:
        rules = list(catalog)
        upcoming: list[UpcomingDay] = []
        for offset in range(1, days_ahead + 1):
            future_day = day_number + offset
            day_events = self.events_on_day(future_day, rules)
            if day_events:
                upcoming.append(
                    UpcomingDay(
                        days_until=offset,
                        date=self.dates.format_date(future_day),
                        events=tuple(day_events),
                    )
                )
        return upcoming

    def ongoing_events(self, day_number: int, catalog: Iterable[AnyEventRule]) -> list[OngoingEvent]:
        """Multi-day events that started on an earlier or the current day and still run."""
        multi_day = [rule for rule in catalog if rule.duration_days > 1]
        if not multi_day:
            return []

        ongoing: list[OngoingEvent] = []
        longest = max(rule.duration_days for rule in multi_day)
        for days_back in range(longest):
            start_day = day_number - days_back
            candidates = [rule for rule in multi_day if rule.duration_days > days_back]
            for rule in self.events_on_day(start_day, candidates):
                ongoing.append(OngoingEvent(rule, start_day_number=start_day, day_index=days_back + 1))
        return ongoing
