import textwrap
from pathlib import Path

import pytest
from pydantic import ValidationError

import config


def _minimal(**overrides: object) -> config.CalendarConfig:
    fields: dict[str, object] = {
        "weekdays": ["Sun", "Mon"],
        "months": [{"name": "First", "base_days": 30}, {"name": "Second", "base_days": 28}],
        "time_periods": {"Day": {"start": 0.0, "end": 1.0}},
    }
    fields.update(overrides)
    return config.CalendarConfig(**fields)


def test_calendar_config_defaults() -> None:
    """Test that a minimal CalendarConfig fills in the expected defaults."""
    cfg = _minimal()

    assert cfg.actions_per_day == 200
    assert cfg.hours_per_day == 24
    assert cfg.leap_year is None
    assert cfg.seasons == {}
    assert cfg.epoch_date == config.EpochDate(month=0, day=1, year=0)
    assert cfg.month_names == ["First", "Second"]
    assert cfg.weekday_count == 2


def test_calendar_config_is_frozen() -> None:
    cfg = _minimal()

    with pytest.raises(ValidationError):
        cfg.actions_per_day = 5  # type: ignore[misc]


def test_calendar_config_enforces_bounds() -> None:
    """Test that Pydantic validation rejects impossible calendars."""
    with pytest.raises(ValidationError):
        _minimal(weekdays=["Sun", "sun"])
    with pytest.raises(ValidationError):
        _minimal(weekdays=[])
    with pytest.raises(ValidationError):
        _minimal(actions_per_day=0)
    with pytest.raises(ValidationError):
        _minimal(months=[{"name": "Empty", "base_days": 0}])
    with pytest.raises(ValidationError):
        _minimal(time_periods={"Day": {"start": 0.0, "end": 1.5}})


def test_epoch_must_exist() -> None:
    with pytest.raises(ValidationError):
        _minimal(epoch_date={"month": 2, "day": 1, "year": 0})
    with pytest.raises(ValidationError):
        _minimal(epoch_date={"month": 1, "day": 29, "year": 1})


def test_leap_adjustment_needs_a_known_month() -> None:
    with pytest.raises(ValidationError):
        _minimal(leap_year={"enabled": True, "frequency": 4, "adjustments": {5: 1}})


def test_fraction_range_wrapping() -> None:
    night = config.FractionRange(start=0.9, end=0.1)
    late = config.FractionRange(start=0.75, end=1.0)

    assert night.wraps
    assert night.contains(0.95)
    assert night.contains(0.05)
    assert not night.contains(0.5)
    assert not late.contains(1.0)
    assert late.contains(1.0, allow_full_end=True)


def test_load_calendar_config_casts_types() -> None:
    """Test that loading config performs type casting where appropriate."""
    payload = {
        "weekdays": ["Sun", "Mon"],
        "months": [{"name": "First", "base_days": "31"}, {"name": "Second"}],
        "time_periods": {"Day": {"start": "0", "end": "1"}},
        "leap_year": {"enabled": True, "frequency": "4", "adjustments": {1: "1"}},
        "actions_per_day": "50",
    }

    cfg = config.load_calendar_config(payload)

    assert cfg.actions_per_day == 50
    assert cfg.months[0].base_days == 31
    assert cfg.months[1].base_days == 30
    assert cfg.leap_year is not None
    assert cfg.leap_year.adjustments == {1: 1}
    assert cfg.month_length(1, 4) == 31
    assert cfg.max_month_length(1) == 31


def test_load_calendar_config_from_yaml(tmp_path: Path) -> None:
    path = tmp_path / "calendar.yaml"
    path.write_text(
        textwrap.dedent(
            """\
            weekdays: [Moonday, Starday, Sunday]
            months:
              - {name: Thaw, base_days: 20}
              - {name: Bloom, base_days: 25}
            time_periods:
              Light: {start: 0.25, end: 0.75}
              Dark: {start: 0.75, end: 0.25}
            seasons:
              Wet: {start: 0.0, end: 0.5}
              Dry: {start: 0.5, end: 1.0}
            hours_per_day: 20
            epoch_date: {month: 1, day: 5, year: 300}
            """
        ),
        encoding="utf-8",
    )

    cfg = config.load_calendar_config_from_yaml(path)

    assert cfg.weekdays == ["Moonday", "Starday", "Sunday"]
    assert cfg.time_periods["Dark"].wraps
    assert cfg.hours_per_day == 20
    assert cfg.epoch_date.year == 300
    assert cfg.month_index("bloom") == 1
    assert cfg.weekday_index("STARDAY") == 1


def test_yaml_top_level_must_be_a_mapping(tmp_path: Path) -> None:
    path = tmp_path / "list.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(TypeError):
        config.load_calendar_config_from_yaml(path)


def test_engine_settings_defaults_and_yaml(tmp_path: Path) -> None:
    defaults = config.load_engine_settings()
    assert defaults.logging_level == "INFO"
    assert defaults.ending_soon_minutes == 5
    assert defaults.max_event_records == 10
    assert defaults.config_record == "[CALENDAR] Time Configuration"

    path = tmp_path / "settings.yaml"
    path.write_text("logging_level: debug\nupcoming_days: 14\n", encoding="utf-8")
    settings = config.load_engine_settings_from_yaml(path)

    assert settings.logging_level == "DEBUG"
    assert settings.upcoming_days == 14

    with pytest.raises(ValidationError):
        config.load_engine_settings({"logging_level": "LOUD"})
