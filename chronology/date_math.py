"""Calendar arithmetic over signed, epoch-relative day numbers.

Conventions used everywhere in this project:

- day number 0 is the configured epoch date; negative numbers lie before it
- month indices are 0-based, days of the month are 1-based
- weekday index 0 is the weekday of the epoch date

Date conversion walks month by month from the epoch, so its cost grows with
the distance in months. That is fine for narrative time spans.
"""

from __future__ import annotations

from dataclasses import dataclass

from chronology.time_of_day import classify
from config import CalendarConfig

LAST = -1
"""``nth`` value selecting the last occurrence of a weekday in a month."""


@dataclass(frozen=True)
class CivilDate:
    month: int
    day: int
    year: int

    @property
    def sort_key(self) -> tuple[int, int, int]:
        return (self.year, self.month, self.day)


@dataclass(frozen=True)
class DateArithmetic:
    """Pure date functions bound to one calendar configuration."""

    config: CalendarConfig

    @property
    def epoch(self) -> CivilDate:
        epoch = self.config.epoch_date
        return CivilDate(month=epoch.month, day=epoch.day, year=epoch.year)

    # --- Month and year lengths ---
    def is_leap_year(self, year: int) -> bool:
        return self.config.is_leap_year(year)

    def days_in_month(self, month: int, year: int) -> int:
        return self.config.month_length(month, year)

    def days_in_year(self, year: int) -> int:
        return sum(self.days_in_month(month, year) for month in range(len(self.config.months)))

    def date_exists(self, date: CivilDate) -> bool:
        if not 0 <= date.month < len(self.config.months):
            return False
        return 1 <= date.day <= self.days_in_month(date.month, date.year)

    def shift_month(self, month: int, year: int, offset: int) -> tuple[int, int]:
        """Return ``(month, year)`` moved by ``offset`` months."""
        year_delta, month = divmod(month + offset, len(self.config.months))
        return month, year + year_delta

    # --- Day number <-> civil date ---
    def date_from_day_number(self, day_number: int) -> CivilDate:
        month, day, year = self.epoch.month, self.epoch.day, self.epoch.year
        month_count = len(self.config.months)

        if day_number < 0:
            remaining = -day_number
            while remaining > 0:
                if remaining >= day:
                    # Step back to the last day of the previous month.
                    remaining -= day
                    month -= 1
                    if month < 0:
                        month = month_count - 1
                        year -= 1
                    day = self.days_in_month(month, year)
                else:
                    day -= remaining
                    remaining = 0
        else:
            remaining = day_number
            while remaining > 0:
                days_left_in_month = self.days_in_month(month, year) - day + 1
                if remaining >= days_left_in_month:
                    remaining -= days_left_in_month
                    day = 1
                    month += 1
                    if month >= month_count:
                        month = 0
                        year += 1
                else:
                    day += remaining
                    remaining = 0

        return CivilDate(month=month, day=day, year=year)

    def days_between(self, start: CivilDate, end: CivilDate) -> int:
        """Signed number of days from ``start`` to ``end``."""
        if end.sort_key < start.sort_key:
            return -self.days_between(end, start)
        if (start.year, start.month) == (end.year, end.month):
            return end.day - start.day

        # Rest of the start month, whole months in between, then into the end month.
        total = self.days_in_month(start.month, start.year) - start.day + 1
        month, year = self.shift_month(start.month, start.year, 1)
        while (year, month) != (end.year, end.month):
            total += self.days_in_month(month, year)
            month, year = self.shift_month(month, year, 1)
        return total + end.day - 1

    def day_number_from_date(self, date: CivilDate) -> int:
        return self.days_between(self.epoch, date)

    # --- Weekdays ---
    def day_of_week(self, day_number: int) -> int:
        # Python's modulo is already non-negative for a positive divisor.
        return day_number % self.config.weekday_count

    def day_of_week_for_date(self, month: int, day: int, year: int) -> int:
        delta = self.days_between(self.epoch, CivilDate(month=month, day=day, year=year))
        return delta % self.config.weekday_count

    def nth_weekday_of_month(self, nth: int, weekday: int, month: int, year: int) -> int | None:
        """Day of the month of the ``nth`` ``weekday``, or ``None`` if the month has none.

        ``nth`` is 1-based; ``LAST`` selects the final occurrence.
        """
        weekday_count = self.config.weekday_count
        length = self.days_in_month(month, year)

        if nth == LAST:
            last_weekday = self.day_of_week_for_date(month, length, year)
            days_from_last = (last_weekday - weekday) % weekday_count
            target = length - days_from_last
            return target if target >= 1 else None

        first_weekday = self.day_of_week_for_date(month, 1, year)
        days_until_first = (weekday - first_weekday) % weekday_count
        target = 1 + days_until_first + (nth - 1) * weekday_count
        if target > length:
            return None
        return target

    def month_weekdays(self, month: int, year: int) -> dict[str, list[int]]:
        """Map every weekday name to the days of ``month`` that fall on it."""
        weekday_map: dict[str, list[int]] = {name: [] for name in self.config.weekdays}
        first_weekday = self.day_of_week_for_date(month, 1, year)
        for day in range(1, self.days_in_month(month, year) + 1):
            name = self.config.weekdays[(first_weekday + day - 1) % self.config.weekday_count]
            weekday_map[name].append(day)
        return weekday_map

    # --- Position within the year ---
    def day_of_year(self, day_number: int) -> tuple[int, int]:
        """Return ``(day_of_year, year)`` with a 0-based day of year."""
        date = self.date_from_day_number(day_number)
        elapsed = sum(self.days_in_month(month, date.year) for month in range(date.month))
        return elapsed + date.day - 1, date.year

    def year_progress(self, day_of_year: int, year: int) -> float:
        return day_of_year / self.days_in_year(year)

    def season(self, day_number: int) -> str:
        """Name of the configured season containing ``day_number``."""
        progress = self.year_progress(*self.day_of_year(day_number))
        return classify(progress, self.config.seasons, allow_full_end=True)

    # --- Presentation ---
    def format_date(self, day_number: int) -> str:
        date = self.date_from_day_number(day_number)
        weekday = self.config.weekdays[self.day_of_week(day_number)]
        month_name = self.config.month_names[date.month]
        return f"{weekday}, {month_name} {date.day}, {date.year}"
