"""Change detection between two time states and the notifications it produces."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Literal

from chronology.date_math import DateArithmetic
from chronology.time_of_day import time_period
from config import UNKNOWN_PERIOD, CalendarConfig
from events.evaluator import EventEvaluator, time_range_status
from events.rules import AnyEventRule
from sim_clock import TimeState, TurnResult
from simulation.logging_utils import CalendarLogger

NotificationType = Literal[
    "timeReversed",
    "timeOfDayChanged",
    "dayChanged",
    "seasonChanged",
    "timeRangeEventStarted",
    "timeRangeEventEnding",
    "timeRangeEventEnded",
    "eventDay",
]


@dataclass(frozen=True)
class CalendarNotification:
    type: NotificationType
    data: dict[str, Any] = field(default_factory=dict)


class EventDispatcher:
    """
    Turns a reconciled turn into an ordered list of notifications.

    Notifications accumulate until ``drain()`` hands them to the caller.
    """

    def __init__(
        self,
        dates: DateArithmetic,
        ending_soon_minutes: int = 5,
        logger: CalendarLogger | None = None,
    ) -> None:
        self.dates = dates
        self.evaluator = EventEvaluator(dates)
        self.ending_soon_minutes = ending_soon_minutes
        self.logger = logger or CalendarLogger("Dispatcher")
        self._pending: list[CalendarNotification] = []

    @property
    def config(self) -> CalendarConfig:
        return self.dates.config

    def dispatch(self, notification_type: NotificationType, data: dict[str, Any]) -> None:
        self._pending.append(CalendarNotification(notification_type, data))
        self.logger.log_event(notification_type, data)

    def drain(self) -> list[CalendarNotification]:
        notifications, self._pending = self._pending, []
        return notifications

    # --- Detection ---
    def process_turn(self, result: TurnResult, catalog: Iterable[AnyEventRule]) -> None:
        """Queue the notifications for one reconciled turn."""
        if result.reversed:
            self.dispatch(
                "timeReversed",
                {"previous_day": result.previous.day_number, "state": result.state},
            )
            return
        if not result.elapsed:
            return

        previous, current = result.previous, result.state
        self._check_time_of_day(previous, current)
        if result.day_changed:
            self.dispatch(
                "dayChanged",
                {"previous_day": previous.day_number, "current_day": current.day_number, "state": current},
            )
            self._check_season(previous, current)
        if current.progress != previous.progress:
            self._check_time_ranges(previous, current, catalog)

    def _check_time_of_day(self, previous: TimeState, current: TimeState) -> None:
        actions_per_day = self.config.actions_per_day
        previous_period = time_period(previous.progress / actions_per_day, self.config)
        current_period = time_period(current.progress / actions_per_day, self.config)
        if previous_period == current_period or UNKNOWN_PERIOD in (previous_period, current_period):
            return
        self.dispatch(
            "timeOfDayChanged",
            {"previous_period": previous_period, "current_period": current_period, "state": current},
        )

    def _check_season(self, previous: TimeState, current: TimeState) -> None:
        if not self.config.seasons:
            return
        previous_season = self.dates.season(previous.day_number)
        current_season = self.dates.season(current.day_number)
        if previous_season != current_season:
            self.dispatch(
                "seasonChanged",
                {"previous_season": previous_season, "current_season": current_season, "state": current},
            )

    def _check_time_ranges(
        self, previous: TimeState, current: TimeState, catalog: Iterable[AnyEventRule]
    ) -> None:
        actions_per_day = self.config.actions_per_day
        hours_per_day = self.config.hours_per_day
        previous_progress = previous.progress / actions_per_day
        current_progress = current.progress / actions_per_day

        for rule in self.evaluator.events_on_day(current.day_number, catalog):
            if rule.all_day:
                continue
            before = time_range_status(rule, previous_progress, hours_per_day)
            after = time_range_status(rule, current_progress, hours_per_day)

            if not before.active and after.active:
                self.dispatch(
                    "timeRangeEventStarted",
                    {"event": rule.name, "time_range": str(after.current_range), "state": current},
                )
            if (
                before.active
                and after.active
                and (before.minutes_remaining or 0) > self.ending_soon_minutes
                and (after.minutes_remaining or 0) <= self.ending_soon_minutes
            ):
                self.dispatch(
                    "timeRangeEventEnding",
                    {"event": rule.name, "minutes_remaining": after.minutes_remaining, "state": current},
                )
            if before.active and not after.active:
                self.dispatch("timeRangeEventEnded", {"event": rule.name, "state": current})

    def announce_event_day(self, state: TimeState, catalog: Iterable[AnyEventRule]) -> bool:
        """Queue ``eventDay`` for the current day; return whether anything matched."""
        events = self.evaluator.events_on_day(state.day_number, catalog)
        if not events:
            return False
        self.dispatch(
            "eventDay",
            {
                "events": [rule.name for rule in events],
                "date": self.dates.format_date(state.day_number),
                "state": state,
            },
        )
        return True
