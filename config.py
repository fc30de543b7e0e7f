from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Literal, cast

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeInt,
    PositiveInt,
    field_validator,
    model_validator,
)

UNKNOWN_PERIOD = "Unknown"


class BaseConfigModel(BaseModel):
    model_config = ConfigDict(validate_default=True, frozen=True)


class MonthDefinition(BaseConfigModel):
    name: str = Field(min_length=1)
    base_days: PositiveInt = 30


class FractionRange(BaseConfigModel):
    """A named slice of a day or a year, expressed as fractions in ``[0, 1]``.

    A range whose ``start`` is greater than its ``end`` wraps around
    (midnight for time periods, the new year for seasons).
    """

    start: float = Field(ge=0, le=1)
    end: float = Field(ge=0, le=1)

    @property
    def wraps(self) -> bool:
        return self.start > self.end

    def contains(self, value: float, allow_full_end: bool = False) -> bool:
        if self.wraps:
            return value >= self.start or value < self.end
        if self.start <= value < self.end:
            return True
        # A season that runs up to 1.0 also owns the last instant of the year.
        return allow_full_end and self.end == 1.0 and value >= self.start


class LeapYearRule(BaseConfigModel):
    enabled: bool = False
    frequency: PositiveInt = 4
    skip_frequency: NonNegativeInt = 0
    skip_exception_frequency: NonNegativeInt = 0
    start_year: int = 0
    adjustments: dict[int, int] = Field(default_factory=dict)

    def is_leap_year(self, year: int) -> bool:
        if not self.enabled:
            return False
        years_since_start = year - self.start_year
        if years_since_start % self.frequency != 0:
            return False
        if self.skip_frequency > 0 and years_since_start % self.skip_frequency == 0:
            return (
                self.skip_exception_frequency > 0
                and years_since_start % self.skip_exception_frequency == 0
            )
        return True


class EpochDate(BaseConfigModel):
    month: NonNegativeInt = 0
    day: PositiveInt = 1
    year: int = 0


class CalendarConfig(BaseConfigModel):
    """Parsed, immutable description of a calendar."""

    weekdays: list[str] = Field(min_length=1)
    months: list[MonthDefinition] = Field(min_length=1)
    leap_year: LeapYearRule | None = None
    time_periods: dict[str, FractionRange] = Field(min_length=1)
    seasons: dict[str, FractionRange] = Field(default_factory=dict)
    actions_per_day: PositiveInt = 200
    hours_per_day: PositiveInt = 24
    epoch_date: EpochDate = Field(default_factory=EpochDate)

    @field_validator("weekdays")
    @classmethod
    def _validate_weekdays(cls, value: list[str]) -> list[str]:
        cleaned = [name.strip() for name in value]
        if any(not name for name in cleaned):
            msg = "Weekday names must not be empty"
            raise ValueError(msg)
        if len({name.lower() for name in cleaned}) != len(cleaned):
            msg = "Weekday names must be unique"
            raise ValueError(msg)
        return cleaned

    @model_validator(mode="after")
    def _validate_epoch_and_leap(self) -> CalendarConfig:
        month_count = len(self.months)
        if self.leap_year is not None:
            for month_index in self.leap_year.adjustments:
                if not 0 <= month_index < month_count:
                    msg = f"Leap adjustment for unknown month index {month_index}"
                    raise ValueError(msg)
        epoch = self.epoch_date
        if epoch.month >= month_count:
            msg = f"Epoch month {epoch.month + 1} exceeds the {month_count} configured months"
            raise ValueError(msg)
        if epoch.day > self.month_length(epoch.month, epoch.year):
            msg = f"Epoch day {epoch.day} does not exist in {self.months[epoch.month].name}"
            raise ValueError(msg)
        return self

    @property
    def weekday_count(self) -> int:
        return len(self.weekdays)

    @property
    def month_names(self) -> list[str]:
        return [month.name for month in self.months]

    def is_leap_year(self, year: int) -> bool:
        return self.leap_year is not None and self.leap_year.is_leap_year(year)

    def month_length(self, month_index: int, year: int) -> int:
        """Days in ``month_index`` for ``year`` with leap adjustments, never below 1."""
        month_index %= len(self.months)
        days = self.months[month_index].base_days
        if self.is_leap_year(year):
            rule = cast(LeapYearRule, self.leap_year)
            days += rule.adjustments.get(month_index, 0)
        return max(days, 1)

    def max_month_length(self, month_index: int) -> int:
        """Largest length ``month_index`` can reach in any year."""
        days = self.months[month_index].base_days
        if self.leap_year is not None and self.leap_year.enabled:
            days += max(self.leap_year.adjustments.get(month_index, 0), 0)
        return days

    def month_index(self, name: str) -> int | None:
        lowered = name.strip().lower()
        for index, month in enumerate(self.months):
            if month.name.lower() == lowered:
                return index
        return None

    def weekday_index(self, name: str) -> int | None:
        lowered = name.strip().lower()
        for index, weekday in enumerate(self.weekdays):
            if weekday.lower() == lowered:
                return index
        return None


class EngineSettings(BaseConfigModel):
    logging_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_file: str | None = None
    log_format: str = "%(asctime)s - %(levelname)s - %(message)s"
    config_record: str = "[CALENDAR] Time Configuration"
    state_record: str = "[CALENDAR] Time State"
    event_record_prefix: str = "[CALENDAR] Event Days"
    max_event_records: PositiveInt = 10
    ending_soon_minutes: NonNegativeInt = 5
    upcoming_days: PositiveInt = 30

    @field_validator("logging_level", mode="before")
    @classmethod
    def _upper_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value


ConfigScalar = bool | int | float | str | None
ConfigValue = ConfigScalar | list["ConfigValue"] | dict[str, "ConfigValue"]


def _coerce_value(value: object) -> ConfigValue:
    if isinstance(value, (bool, int, float, str)) or value is None:
        return value
    if isinstance(value, (list, tuple)):
        return [_coerce_value(item) for item in value]
    if isinstance(value, Mapping):
        coerced: dict[str, ConfigValue] = {}
        for key, item in value.items():
            # YAML turns numeric keys (leap adjustments) into ints.
            if not isinstance(key, (str, int)):
                msg = "CONFIG keys must be strings"
                raise TypeError(msg)
            coerced[str(key)] = _coerce_value(item)
        return coerced
    msg = f"Unsupported CONFIG value type: {type(value)!r}"
    raise TypeError(msg)


def _coerce_config_dict(data: Mapping[str, object]) -> dict[str, ConfigValue]:
    return {key: _coerce_value(value) for key, value in data.items()}


def _read_yaml_mapping(path: str | Path) -> Mapping[str, object]:
    with open(path, encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, Mapping):
        msg = f"{path}: top-level YAML value must be a mapping"
        raise TypeError(msg)
    return cast(Mapping[str, object], data)


def load_calendar_config(data: Mapping[str, object]) -> CalendarConfig:
    return CalendarConfig(**_coerce_config_dict(data))


def load_calendar_config_from_yaml(path: str | Path) -> CalendarConfig:
    return load_calendar_config(_read_yaml_mapping(path))


def load_engine_settings(data: Mapping[str, object] | None = None) -> EngineSettings:
    if data is not None:
        return EngineSettings(**_coerce_config_dict(data))
    return EngineSettings()


def load_engine_settings_from_yaml(path: str | Path) -> EngineSettings:
    return load_engine_settings(_read_yaml_mapping(path))
