"""Event rule variants.

Every rule is an immutable value. Equality of ``dedup_key()`` defines
"the same event": the first rule carrying a key wins inside a catalog.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from chronology.date_math import LAST

EventKey = tuple[object, ...]


@dataclass(frozen=True, order=True)
class ClockTime:
    hour: int
    minute: int

    def __post_init__(self) -> None:
        if self.hour < 0:
            raise ValueError(f"hour must be >= 0, got {self.hour}")
        if not 0 <= self.minute < 60:
            raise ValueError(f"minute must be in [0, 60), got {self.minute}")

    @property
    def minutes(self) -> int:
        return self.hour * 60 + self.minute

    def __str__(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"


@dataclass(frozen=True)
class TimeWindow:
    """A same-day window; both ends are inclusive minutes of the day."""

    start: ClockTime
    end: ClockTime

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError(f"time window ends before it starts: {self.start}-{self.end}")

    @property
    def start_minutes(self) -> int:
        return self.start.minutes

    @property
    def end_minutes(self) -> int:
        return self.end.minutes

    def __str__(self) -> str:
        return f"{self.start}-{self.end}"


# --- Year gates for relative rules ---
@dataclass(frozen=True)
class EveryYear:
    def allows(self, year: int) -> bool:
        return True


@dataclass(frozen=True)
class OnlyYear:
    year: int

    def allows(self, year: int) -> bool:
        return year == self.year


@dataclass(frozen=True)
class EveryNYears:
    start_year: int
    frequency: int

    def __post_init__(self) -> None:
        if self.frequency < 1:
            raise ValueError("frequency must be >= 1")

    def allows(self, year: int) -> bool:
        years_since = year - self.start_year
        return years_since >= 0 and years_since % self.frequency == 0


YearGate = EveryYear | OnlyYear | EveryNYears


# --- Rules ---
@dataclass(frozen=True, kw_only=True)
class EventRule:
    kind: ClassVar[str] = "event"

    name: str
    duration_days: int = 1
    time_ranges: tuple[TimeWindow, ...] = ()

    def __post_init__(self) -> None:
        if self.duration_days < 1:
            raise ValueError(f"{self.name}: duration_days must be >= 1")

    @property
    def all_day(self) -> bool:
        return not self.time_ranges

    def _discriminators(self) -> tuple[object, ...]:
        return ()

    def dedup_key(self) -> EventKey:
        return (self.name, self.kind, *self._discriminators(), self.time_ranges)


@dataclass(frozen=True, kw_only=True)
class DailyEvent(EventRule):
    kind: ClassVar[str] = "daily"


@dataclass(frozen=True, kw_only=True)
class WeeklyEvent(EventRule):
    kind: ClassVar[str] = "weekly"

    weekday: int

    def _discriminators(self) -> tuple[object, ...]:
        return (self.weekday,)


@dataclass(frozen=True, kw_only=True)
class AnnualEvent(EventRule):
    kind: ClassVar[str] = "annual"

    month: int
    day: int

    def _discriminators(self) -> tuple[object, ...]:
        return (self.month, self.day)


@dataclass(frozen=True, kw_only=True)
class OnceEvent(EventRule):
    kind: ClassVar[str] = "once"

    month: int
    day: int
    year: int

    def _discriminators(self) -> tuple[object, ...]:
        return (self.month, self.day, self.year)


@dataclass(frozen=True, kw_only=True)
class PeriodicEvent(EventRule):
    kind: ClassVar[str] = "periodic"

    month: int
    day: int
    year: int
    frequency: int

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.frequency < 1:
            raise ValueError(f"{self.name}: frequency must be >= 1")

    def occurs_in(self, year: int) -> bool:
        years_since = year - self.year
        return years_since >= 0 and years_since % self.frequency == 0

    def _discriminators(self) -> tuple[object, ...]:
        return (self.month, self.day, self.year, self.frequency)


@dataclass(frozen=True, kw_only=True)
class RelativeEvent(EventRule):
    """The ``nth`` (1-5) or last ``weekday`` of ``month``."""

    kind: ClassVar[str] = "relative"

    month: int
    nth: int
    weekday: int
    gate: YearGate = EveryYear()

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.nth != LAST and not 1 <= self.nth <= 5:
            raise ValueError(f"{self.name}: nth must be 1-5 or LAST, got {self.nth}")

    def _discriminators(self) -> tuple[object, ...]:
        return (self.month, self.nth, self.weekday, self.gate)


AnyEventRule = DailyEvent | WeeklyEvent | AnnualEvent | OnceEvent | PeriodicEvent | RelativeEvent
