import pytest

from config import CalendarConfig, FractionRange, MonthDefinition
from sim_clock import (
    NEVER_PROCESSED,
    TimeState,
    TimeStateMachine,
    TurnOutcome,
    normalize_state,
    parse_time_spec,
)


def _machine(actions_per_day: int = 4, hours_per_day: int = 24) -> TimeStateMachine:
    config = CalendarConfig(
        weekdays=["Sun", "Mon", "Tue"],
        months=[MonthDefinition(name="Only", base_days=30)],
        time_periods={"Day": FractionRange(start=0.0, end=1.0)},
        actions_per_day=actions_per_day,
        hours_per_day=hours_per_day,
    )
    return TimeStateMachine(config)


def test_advancing_a_full_day_increments_day_number() -> None:
    """actions_per_day turns move exactly one day and keep progress."""
    machine = _machine(actions_per_day=4)
    state = TimeState(day_number=2, progress=1, last_processed_turn=10)

    result = machine.reconcile(state, 14)

    assert result.outcome is TurnOutcome.ADVANCED
    assert result.state == TimeState(day_number=3, progress=1, last_processed_turn=14)
    assert result.elapsed == 4
    assert result.day_changed


def test_partial_advance_stays_on_the_same_day() -> None:
    machine = _machine(actions_per_day=4)
    state = TimeState(day_number=2, progress=1, last_processed_turn=10)

    result = machine.reconcile(state, 12)

    assert result.state.day_number == 2
    assert result.state.progress == 3
    assert not result.day_changed


def test_first_turn_counts_from_the_sentinel() -> None:
    machine = _machine(actions_per_day=4)

    result = machine.reconcile(TimeState(), 0)

    assert TimeState().last_processed_turn == NEVER_PROCESSED
    assert result.elapsed == 1
    assert result.state == TimeState(day_number=0, progress=1, last_processed_turn=0)


def test_reversal_recomputes_position_from_turn_counter() -> None:
    """A rewound counter maps to turn = day_number * actions_per_day + progress."""
    machine = _machine(actions_per_day=4)
    state = TimeState(day_number=5, progress=3, last_processed_turn=23)

    result = machine.reconcile(state, 9)

    assert result.outcome is TurnOutcome.REVERSED
    assert result.reversed
    assert not result.day_changed
    assert result.state.day_number * 4 + result.state.progress == 9
    assert result.state.last_processed_turn == 9


def test_reversal_below_zero_clamps_to_zero() -> None:
    machine = _machine(actions_per_day=4)
    state = TimeState(day_number=1, progress=0, last_processed_turn=4)

    result = machine.reconcile(state, -7)

    assert result.state == TimeState(day_number=0, progress=0, last_processed_turn=0)


def test_same_turn_is_unchanged() -> None:
    machine = _machine()
    state = TimeState(day_number=1, progress=2, last_processed_turn=6)

    result = machine.reconcile(state, 6)

    assert result.outcome is TurnOutcome.UNCHANGED
    assert result.state is state


def test_advance_hours_rounds_half_up_and_rewinds() -> None:
    """With 4 actions per 24-hour day one action is six hours."""
    machine = _machine(actions_per_day=4)
    state = TimeState(day_number=1, progress=0, last_processed_turn=3)

    assert machine.advance_hours(state, 3).progress == 1
    assert machine.advance_hours(state, 2.9).progress == 0
    assert machine.advance_hours(state, 30) == TimeState(day_number=2, progress=1, last_processed_turn=3)
    assert machine.advance_hours(state, -6) == TimeState(day_number=0, progress=3, last_processed_turn=3)


def test_set_time_floors_progress_and_validates() -> None:
    machine = _machine(actions_per_day=200)
    state = TimeState(day_number=4, progress=10, last_processed_turn=810)

    moved = machine.set_time(state, 9)

    assert moved.progress == 75
    assert moved.day_number == 4
    assert moved.last_processed_turn == 810
    assert machine.set_time(state, 14, 30).progress == 120

    with pytest.raises(ValueError):
        machine.set_time(state, 24)
    with pytest.raises(ValueError):
        machine.set_time(state, 10, 60)


def test_set_day_keeps_progress_and_turn() -> None:
    machine = _machine()
    state = TimeState(day_number=4, progress=2, last_processed_turn=18)

    assert machine.set_day(state, -12) == TimeState(day_number=-12, progress=2, last_processed_turn=18)


def test_rescale_keeps_time_of_day() -> None:
    machine = _machine(actions_per_day=200)
    state = TimeState(day_number=1, progress=100, last_processed_turn=300)

    rescaled = machine.rescale(state, 100)

    assert rescaled.progress == 50
    assert rescaled.last_processed_turn == 300
    with pytest.raises(ValueError):
        machine.rescale(state, 0)


def test_normalize_state_carries_overflow_and_underflow() -> None:
    assert normalize_state(TimeState(day_number=0, progress=9), 4) == TimeState(day_number=2, progress=1)
    assert normalize_state(TimeState(day_number=3, progress=-1), 4) == TimeState(day_number=2, progress=3)
    untouched = TimeState(day_number=3, progress=2)
    assert normalize_state(untouched, 4) is untouched


@pytest.mark.parametrize(
    ("spec", "hours"),
    [
        ("3d", 72.0),
        ("1.5h", 1.5),
        ("90m", 1.5),
        ("2h30m", 2.5),
        ("-1h30m", -1.5),
        ("1d, -2h", 22.0),
        ("-2d", -48.0),
    ],
)
def test_parse_time_spec(spec: str, hours: float) -> None:
    assert parse_time_spec(spec, 24) == pytest.approx(hours)


def test_parse_time_spec_uses_day_length() -> None:
    assert parse_time_spec("2d", 20) == pytest.approx(40.0)


@pytest.mark.parametrize("spec", ["", "soon", "3 weeks", "0h", "1h, -60m"])
def test_parse_time_spec_rejects_bad_input(spec: str) -> None:
    with pytest.raises(ValueError):
        parse_time_spec(spec, 24)
