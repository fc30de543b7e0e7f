import pytest

from chronology.date_math import LAST, CivilDate, DateArithmetic
from config import CalendarConfig, FractionRange, LeapYearRule, MonthDefinition

SUNDAY, MONDAY, THURSDAY = 0, 1, 4
JANUARY, FEBRUARY, MAY, NOVEMBER, DECEMBER = 0, 1, 4, 10, 11


def test_epoch_is_day_zero(dates: DateArithmetic) -> None:
    """Day number 0 is the configured start date."""
    assert dates.date_from_day_number(0) == CivilDate(month=NOVEMBER, day=6, year=2022)
    assert dates.format_date(0) == "Sunday, November 6, 2022"


@pytest.mark.parametrize(
    ("day_number", "expected"),
    [
        (25, CivilDate(month=DECEMBER, day=1, year=2022)),
        (55, CivilDate(month=DECEMBER, day=31, year=2022)),
        (56, CivilDate(month=JANUARY, day=1, year=2023)),
        (-6, CivilDate(month=9, day=31, year=2022)),
        (-309, CivilDate(month=JANUARY, day=1, year=2022)),
        (-310, CivilDate(month=DECEMBER, day=31, year=2021)),
    ],
)
def test_date_from_day_number_walks_months(
    dates: DateArithmetic, day_number: int, expected: CivilDate
) -> None:
    """Forward and backward month walks land on the right civil date."""
    assert dates.date_from_day_number(day_number) == expected


def test_day_number_round_trip(dates: DateArithmetic) -> None:
    """Converting to a date and counting back from the epoch is lossless."""
    for day_number in list(range(-1500, 1500, 37)) + [-1, 0, 1, 480, 481]:
        date = dates.date_from_day_number(day_number)
        assert dates.day_number_from_date(date) == day_number


def test_days_between_is_signed(dates: DateArithmetic) -> None:
    start = CivilDate(month=JANUARY, day=1, year=2024)
    end = CivilDate(month=JANUARY, day=1, year=2025)
    assert dates.days_between(start, end) == 366
    assert dates.days_between(end, start) == -366


def test_leap_year_skip_and_exception_rules(dates: DateArithmetic) -> None:
    assert dates.is_leap_year(2000)
    assert not dates.is_leap_year(1900)
    assert dates.is_leap_year(2004)
    assert not dates.is_leap_year(2001)


def test_february_length_follows_leap_adjustment(dates: DateArithmetic) -> None:
    assert dates.days_in_month(FEBRUARY, 2000) == 29
    assert dates.days_in_month(FEBRUARY, 2001) == 28
    assert dates.days_in_year(2024) == 366
    assert dates.days_in_year(2023) == 365


def test_days_in_month_never_drops_below_one() -> None:
    """A negative leap adjustment larger than the month floors at one day."""
    config = CalendarConfig(
        weekdays=["One", "Two", "Three", "Four", "Five"],
        months=[
            MonthDefinition(name="Frost", base_days=10),
            MonthDefinition(name="Void", base_days=2),
            MonthDefinition(name="Thaw", base_days=10),
        ],
        leap_year=LeapYearRule(enabled=True, frequency=2, adjustments={1: -5}),
        time_periods={"Day": FractionRange(start=0.0, end=1.0)},
    )
    short_calendar = DateArithmetic(config)

    assert short_calendar.days_in_month(1, 2) == 1
    assert short_calendar.days_in_month(1, 3) == 2


def test_day_of_week_is_periodic(dates: DateArithmetic) -> None:
    for day_number in (-50, -1, 0, 3, 400):
        for k in (-3, -1, 1, 5):
            assert dates.day_of_week(day_number) == dates.day_of_week(day_number + k * 7)
    assert dates.day_of_week(0) == SUNDAY
    assert dates.day_of_week(-1) == 6


def test_day_of_week_for_date_matches_real_calendar(dates: DateArithmetic) -> None:
    assert dates.day_of_week_for_date(JANUARY, 1, 2023) == SUNDAY
    assert dates.day_of_week_for_date(FEBRUARY, 1, 2024) == THURSDAY
    assert dates.day_of_week_for_date(JANUARY, 1, 2022) == 6


def test_nth_weekday_of_month(dates: DateArithmetic) -> None:
    """4th Thursday of November 2024 is the 28th."""
    assert dates.nth_weekday_of_month(4, THURSDAY, NOVEMBER, 2024) == 28
    assert dates.nth_weekday_of_month(1, THURSDAY, NOVEMBER, 2024) == 7


def test_last_weekday_of_month(dates: DateArithmetic) -> None:
    """Last Monday of May 2023 is the 29th."""
    assert dates.nth_weekday_of_month(LAST, MONDAY, MAY, 2023) == 29


def test_missing_fifth_weekday_returns_none(dates: DateArithmetic) -> None:
    assert dates.nth_weekday_of_month(5, MONDAY, FEBRUARY, 2023) is None


def test_day_of_year_and_progress(dates: DateArithmetic) -> None:
    assert dates.day_of_year(56) == (0, 2023)
    assert dates.day_of_year(0) == (309, 2022)
    assert dates.year_progress(0, 2023) == pytest.approx(0.0)
    assert dates.year_progress(364, 2022) == pytest.approx(364 / 365)


def test_season_lookup_handles_wrapping_winter(dates: DateArithmetic) -> None:
    assert dates.season(0) == "Autumn"
    assert dates.season(55) == "Winter"
    assert dates.season(56) == "Winter"


def test_month_weekdays_and_shift(dates: DateArithmetic) -> None:
    weekdays = dates.month_weekdays(FEBRUARY, 2024)
    assert weekdays["Thursday"] == [1, 8, 15, 22, 29]
    assert sum(len(days) for days in weekdays.values()) == 29

    assert dates.shift_month(DECEMBER, 2022, 1) == (JANUARY, 2023)
    assert dates.shift_month(JANUARY, 2023, -1) == (DECEMBER, 2022)
    assert dates.shift_month(MAY, 2023, -17) == (DECEMBER, 2021)


def test_date_exists(dates: DateArithmetic) -> None:
    assert dates.date_exists(CivilDate(month=FEBRUARY, day=29, year=2024))
    assert not dates.date_exists(CivilDate(month=FEBRUARY, day=29, year=2023))
    assert not dates.date_exists(CivilDate(month=12, day=1, year=2023))
