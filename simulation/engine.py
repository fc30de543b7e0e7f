from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from chronology.date_math import DateArithmetic
from chronology.time_of_day import format_12_hour, progress_to_time, time_period
from config import UNKNOWN_PERIOD, CalendarConfig, EngineSettings
from config_cache import TurnCache
from events.catalog import EventCatalog
from events.evaluator import EventEvaluator, OngoingEvent, ScheduledEvent, UpcomingDay
from events.rules import AnyEventRule
from sim_clock import (
    TimeState,
    TimeStateMachine,
    TurnOutcome,
    TurnResult,
    normalize_state,
    parse_time_spec,
)
from simulation.dispatcher import CalendarNotification, EventDispatcher
from simulation.logging_utils import CalendarLogger
from store.codecs import (
    DEFAULT_CALENDAR_TEXT,
    DEFAULT_EVENT_DESCRIPTION,
    DEFAULT_EVENT_TEXT,
    ConfigurationError,
    parse_announced_day,
    parse_calendar_text,
    parse_state_text,
    render_state_text,
    replace_config_value,
)
from store.records import Record, RecordStore


@dataclass(frozen=True)
class TurnReport:
    result: TurnResult
    notifications: list[CalendarNotification] = field(default_factory=list)

    @property
    def state(self) -> TimeState:
        return self.result.state

    @property
    def outcome(self) -> TurnOutcome:
        return self.result.outcome


@dataclass(frozen=True)
class MonthWeekdays:
    month: str
    year: int
    weekdays: dict[str, list[int]]


class CalendarEngine:
    """
    Turn-driven calendar bound to a record store.

    Configuration, state and the event catalog are read through a per-turn
    cache: ``process_turn`` clears it first, and every write drops the
    affected entry. All queries return ``None`` (or an empty list) while the
    calendar configuration is absent or unusable.
    """

    def __init__(
        self,
        store: RecordStore,
        settings: EngineSettings | None = None,
        calendar_id: str | None = None,
    ) -> None:
        self.store = store
        self.settings = settings or EngineSettings()
        self.logger = CalendarLogger("Calendar", calendar_id)
        self._cache: TurnCache[Any] = TurnCache("turn")

    # --- Record loading ---
    def _event_record_names(self) -> list[str]:
        prefix = self.settings.event_record_prefix
        return [prefix] + [f"{prefix} {index}" for index in range(2, self.settings.max_event_records + 1)]

    def _write_defaults(self) -> None:
        self.logger.info("No configuration found, creating default")
        self.store.upsert(Record(self.settings.config_record, entry=DEFAULT_CALENDAR_TEXT))
        if self.store.get(self.settings.event_record_prefix) is None:
            self.store.upsert(
                Record(
                    self.settings.event_record_prefix,
                    entry=DEFAULT_EVENT_TEXT,
                    description=DEFAULT_EVENT_DESCRIPTION,
                )
            )

    def _read_config(self) -> CalendarConfig | None:
        record = self.store.get(self.settings.config_record)
        if record is None:
            self._write_defaults()
            record = self.store.get(self.settings.config_record)
            if record is None:
                self.logger.error("Failed to create configuration record")
                return None
        try:
            return parse_calendar_text(record.entry)
        except (ConfigurationError, ValidationError) as exc:
            self.logger.warning(f"Calendar configuration unusable: {exc}")
            return None

    def _load_config(self) -> CalendarConfig | None:
        return self._cache.get(self.settings.config_record, self._read_config)

    def _load_catalog(self, config: CalendarConfig) -> EventCatalog:
        def read() -> EventCatalog:
            texts: list[str] = []
            for name in self._event_record_names():
                record = self.store.get(name)
                if record is None:
                    break
                texts += [record.entry, record.description]
            catalog = EventCatalog.from_texts(texts, config)
            self.logger.debug(f"Loaded {len(catalog)} events")
            return catalog

        return self._cache.get(self.settings.event_record_prefix, read)

    def _load_state(self, config: CalendarConfig) -> TimeState:
        def read() -> TimeState:
            record = self.store.get(self.settings.state_record)
            if record is None:
                self.logger.info("No state found, creating initial state")
                state = TimeState()
                self._save_state(state, config)
                return state

            state = parse_state_text(record.entry)
            normalized = normalize_state(state, config.actions_per_day)
            if normalized != state:
                self.logger.log_state_change(
                    f"day {state.day_number} progress {state.progress}",
                    f"day {normalized.day_number} progress {normalized.progress}",
                    reason="normalized hand-edited state",
                )
                self._save_state(normalized, config)
            return normalized

        return self._cache.get(self.settings.state_record, read)

    def _load_announced_day(self) -> int | None:
        record = self.store.get(self.settings.state_record)
        return None if record is None else parse_announced_day(record.entry)

    def _save_state(
        self, state: TimeState, config: CalendarConfig, announced_day: int | None = None
    ) -> None:
        """Persist ``state``; the recorded event day is kept unless ``announced_day`` is given."""
        dates = DateArithmetic(config)
        day_progress = state.progress / config.actions_per_day
        scheduled = EventEvaluator(dates).scheduled_events(
            state.day_number, day_progress, self._load_catalog(config)
        )
        season = dates.season(state.day_number) if config.seasons else None
        clock = progress_to_time(day_progress, config.hours_per_day)
        existing = self.store.get(self.settings.state_record)
        if announced_day is None and existing is not None:
            announced_day = parse_announced_day(existing.entry)

        entry = render_state_text(
            state,
            actions_per_day=config.actions_per_day,
            time_label=f"{clock} {time_period(day_progress, config)}",
            date_label=dates.format_date(state.day_number),
            season=None if season == UNKNOWN_PERIOD else season,
            today_events=[item.rule.name for item in scheduled],
            active_events=[item.rule.name for item in scheduled if item.status.active],
            announced_day=announced_day,
        )
        description = existing.description if existing is not None else ""
        self.store.upsert(Record(self.settings.state_record, entry=entry, description=description))
        self._cache.invalidate(self.settings.state_record)

    def _snapshot(self) -> tuple[CalendarConfig, TimeState] | None:
        config = self._load_config()
        if config is None:
            return None
        return config, self._load_state(config)

    # --- Turn processing ---
    def process_turn(self, turn_counter: int) -> TurnReport | None:
        """Reconcile the stored state with ``turn_counter`` and collect notifications.

        Returns ``None`` when the calendar is unavailable this turn; nothing is
        persisted in that case.
        """
        self._cache.clear()
        config = self._load_config()
        if config is None:
            self.logger.warning("Time system requires configuration to function")
            return None

        state = self._load_state(config)
        result = TimeStateMachine(config).reconcile(state, turn_counter)
        catalog = self._load_catalog(config)
        dispatcher = EventDispatcher(
            DateArithmetic(config),
            ending_soon_minutes=self.settings.ending_soon_minutes,
            logger=self.logger,
        )

        # The announced day lives in the state record so other engines on the store see it.
        announced_day = self._load_announced_day()
        announce = announced_day != result.state.day_number
        if result.outcome is not TurnOutcome.UNCHANGED or announce:
            self._save_state(result.state, config, announced_day=result.state.day_number)

        if result.outcome is not TurnOutcome.UNCHANGED:
            dispatcher.process_turn(result, catalog)
            self.logger.info(
                f"Turn {turn_counter}: {result.outcome.value} to day {result.state.day_number}, "
                f"progress {result.state.progress}/{config.actions_per_day}"
            )

        if announce:
            dispatcher.announce_event_day(result.state, catalog)

        return TurnReport(result=result, notifications=dispatcher.drain())

    # --- Time queries ---
    def current_time(self) -> str | None:
        snapshot = self._snapshot()
        if snapshot is None:
            return None
        config, state = snapshot
        return progress_to_time(state.progress / config.actions_per_day, config.hours_per_day)

    def formatted_time(self) -> str | None:
        config = self._load_config()
        time_str = self.current_time()
        if config is None or time_str is None:
            return None
        return format_12_hour(time_str, config.hours_per_day)

    def time_of_day(self) -> str | None:
        snapshot = self._snapshot()
        if snapshot is None:
            return None
        config, state = snapshot
        return time_period(state.progress / config.actions_per_day, config)

    def day_progress(self) -> float | None:
        snapshot = self._snapshot()
        if snapshot is None:
            return None
        config, state = snapshot
        return state.progress / config.actions_per_day

    # --- Date queries ---
    def current_date(self) -> str | None:
        snapshot = self._snapshot()
        if snapshot is None:
            return None
        config, state = snapshot
        return DateArithmetic(config).format_date(state.day_number)

    def day_of_week(self) -> str | None:
        snapshot = self._snapshot()
        if snapshot is None:
            return None
        config, state = snapshot
        return config.weekdays[DateArithmetic(config).day_of_week(state.day_number)]

    def day_of_month(self) -> int | None:
        snapshot = self._snapshot()
        if snapshot is None:
            return None
        config, state = snapshot
        return DateArithmetic(config).date_from_day_number(state.day_number).day

    def month_name(self) -> str | None:
        snapshot = self._snapshot()
        if snapshot is None:
            return None
        config, state = snapshot
        return config.month_names[DateArithmetic(config).date_from_day_number(state.day_number).month]

    def year(self) -> int | None:
        snapshot = self._snapshot()
        if snapshot is None:
            return None
        config, state = snapshot
        return DateArithmetic(config).date_from_day_number(state.day_number).year

    def day_number(self) -> int | None:
        snapshot = self._snapshot()
        return None if snapshot is None else snapshot[1].day_number

    def day_of_year(self) -> int | None:
        """1-based day of the current year."""
        snapshot = self._snapshot()
        if snapshot is None:
            return None
        config, state = snapshot
        day_of_year, _ = DateArithmetic(config).day_of_year(state.day_number)
        return day_of_year + 1

    def current_season(self) -> str | None:
        snapshot = self._snapshot()
        if snapshot is None or not snapshot[0].seasons:
            return None
        config, state = snapshot
        return DateArithmetic(config).season(state.day_number)

    def year_progress(self) -> float | None:
        snapshot = self._snapshot()
        if snapshot is None:
            return None
        config, state = snapshot
        dates = DateArithmetic(config)
        return dates.year_progress(*dates.day_of_year(state.day_number))

    def month_weekdays(self, month_offset: int = 0) -> MonthWeekdays | None:
        snapshot = self._snapshot()
        if snapshot is None:
            return None
        config, state = snapshot
        dates = DateArithmetic(config)
        today = dates.date_from_day_number(state.day_number)
        month, year = dates.shift_month(today.month, today.year, month_offset)
        return MonthWeekdays(
            month=config.month_names[month],
            year=year,
            weekdays=dates.month_weekdays(month, year),
        )

    # --- Event queries ---
    def today_events(self) -> list[ScheduledEvent]:
        snapshot = self._snapshot()
        if snapshot is None:
            return []
        config, state = snapshot
        return EventEvaluator(DateArithmetic(config)).scheduled_events(
            state.day_number, state.progress / config.actions_per_day, self._load_catalog(config)
        )

    def active_time_range_events(self) -> list[ScheduledEvent]:
        return [scheduled for scheduled in self.today_events() if scheduled.status.active]

    def upcoming_events(self, days_ahead: int | None = None) -> list[UpcomingDay]:
        snapshot = self._snapshot()
        if snapshot is None:
            return []
        config, state = snapshot
        days = self.settings.upcoming_days if days_ahead is None else days_ahead
        return EventEvaluator(DateArithmetic(config)).upcoming_events(
            state.day_number, days, self._load_catalog(config)
        )

    def ongoing_events(self) -> list[OngoingEvent]:
        snapshot = self._snapshot()
        if snapshot is None:
            return []
        config, state = snapshot
        return EventEvaluator(DateArithmetic(config)).ongoing_events(
            state.day_number, self._load_catalog(config)
        )

    def all_events(self) -> list[AnyEventRule]:
        config = self._load_config()
        if config is None:
            return []
        return list(self._load_catalog(config))

    def is_event_day(self) -> bool:
        return bool(self.today_events())

    def state(self) -> TimeState | None:
        snapshot = self._snapshot()
        return None if snapshot is None else snapshot[1]

    def config(self) -> CalendarConfig | None:
        return self._load_config()

    # --- Mutations ---
    def _apply(
        self, reason: str, transform: Callable[[TimeStateMachine, TimeState], TimeState]
    ) -> TimeState | None:
        snapshot = self._snapshot()
        if snapshot is None:
            return None
        config, state = snapshot
        new_state = transform(TimeStateMachine(config), state)
        self._save_state(new_state, config)
        self.logger.log_state_change(
            f"day {state.day_number} progress {state.progress}",
            f"day {new_state.day_number} progress {new_state.progress}",
            reason=reason,
        )
        return new_state

    def advance_time(self, spec: str) -> TimeState | None:
        """Move the clock by a spec such as ``"1d, 4h, 30m"`` or ``"-2h30m"``."""
        config = self._load_config()
        if config is None:
            return None
        hours = parse_time_spec(spec, config.hours_per_day)
        return self.advance_hours(hours)

    def advance_hours(self, hours: float) -> TimeState | None:
        return self._apply(
            f"advance {hours:g}h", lambda machine, state: machine.advance_hours(state, hours)
        )

    def set_time(self, hour: int, minute: int = 0) -> TimeState | None:
        return self._apply(
            f"set time {hour:02d}:{minute:02d}",
            lambda machine, state: machine.set_time(state, hour, minute),
        )

    def set_day(self, day_number: int) -> TimeState | None:
        return self._apply(
            f"set day {day_number}", lambda machine, state: machine.set_day(state, day_number)
        )

    def _rewrite_config_line(self, label: str, value: int) -> CalendarConfig | None:
        record = self.store.get(self.settings.config_record)
        if record is None:
            return None
        try:
            entry = replace_config_value(record.entry, label, value)
        except ConfigurationError as exc:
            self.logger.warning(str(exc))
            return None
        self.store.upsert(Record(record.name, entry=entry, description=record.description))
        self.clear_config_cache()
        return self._load_config()

    def set_actions_per_day(self, actions_per_day: int) -> TimeState | None:
        """Change the day length in actions, keeping the current time of day."""
        if actions_per_day < 1:
            raise ValueError(f"actions per day must be >= 1, got {actions_per_day}")
        snapshot = self._snapshot()
        if snapshot is None:
            return None
        config, state = snapshot

        new_state = TimeStateMachine(config).rescale(state, actions_per_day)
        new_config = self._rewrite_config_line("Actions Per Day", actions_per_day)
        if new_config is None:
            return None
        self._save_state(new_state, new_config)
        self.logger.info(f"Actions per day changed to {actions_per_day}")
        return new_state

    def set_hours_per_day(self, hours_per_day: int) -> TimeState | None:
        """Change the day length in hours; progress through the day is unchanged."""
        if hours_per_day < 1:
            raise ValueError(f"hours per day must be >= 1, got {hours_per_day}")
        snapshot = self._snapshot()
        if snapshot is None:
            return None
        _, state = snapshot

        new_config = self._rewrite_config_line("Hours Per Day", hours_per_day)
        if new_config is None:
            return None
        self._save_state(state, new_config)
        self.logger.info(f"Hours per day changed to {hours_per_day}")
        return state

    # --- Cache control ---
    def clear_event_cache(self) -> None:
        self._cache.invalidate(self.settings.event_record_prefix)

    def clear_config_cache(self) -> None:
        self._cache.invalidate(self.settings.config_record)

    def clear_all_caches(self) -> None:
        self._cache.clear()

    def cache_stats(self) -> dict[str, Any]:
        return self._cache.get_stats()
