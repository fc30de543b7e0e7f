"""Turn-driven time state.

Global convention (used everywhere in this project):

- 1 turn == 1 action
- ``actions_per_day`` actions == 1 in-world day
- ``progress`` counts the actions elapsed within the current day and always
  lies in ``[0, actions_per_day)`` once normalized

Turn reconciliation is the only place where ``last_processed_turn`` changes.
Manual time skips (advance, set time, set day) move the clock without
touching it, so the next turn still counts elapsed turns from the host.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, replace
from enum import Enum

from chronology.time_of_day import time_to_progress
from config import CalendarConfig

NEVER_PROCESSED = -1

_COMBINED_SPEC = re.compile(r"^(-?\d+)h(\d+)m$", re.IGNORECASE)
_SINGLE_SPEC = re.compile(r"^(-?\d+(?:\.\d+)?)\s*([dhm])$", re.IGNORECASE)


@dataclass(frozen=True)
class TimeState:
    day_number: int = 0
    progress: int = 0
    last_processed_turn: int = NEVER_PROCESSED


class TurnOutcome(str, Enum):
    ADVANCED = "advanced"
    REVERSED = "reversed"
    UNCHANGED = "unchanged"


@dataclass(frozen=True)
class TurnResult:
    outcome: TurnOutcome
    previous: TimeState
    state: TimeState
    elapsed: int = 0

    @property
    def day_changed(self) -> bool:
        return (
            self.outcome is TurnOutcome.ADVANCED
            and self.state.day_number != self.previous.day_number
        )

    @property
    def reversed(self) -> bool:
        return self.outcome is TurnOutcome.REVERSED


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def normalize_state(state: TimeState, actions_per_day: int) -> TimeState:
    """Carry progress overflow or underflow into the day number."""
    if 0 <= state.progress < actions_per_day:
        return state
    day_delta, progress = divmod(state.progress, actions_per_day)
    return replace(state, day_number=state.day_number + day_delta, progress=progress)


def parse_time_spec(spec: str, hours_per_day: int) -> float:
    """Total hours described by ``spec``.

    ``spec`` is a comma-separated list of parts such as ``3d``, ``-2.5h``,
    ``30m`` or ``2h30m``. A negative combined part subtracts its minutes too.
    """
    total_hours = 0.0
    for raw_part in spec.split(","):
        part = raw_part.strip()
        combined = _COMBINED_SPEC.match(part)
        if combined:
            hours = int(combined.group(1))
            minutes = int(combined.group(2))
            sign = -1 if combined.group(1).startswith("-") else 1
            total_hours += hours + sign * minutes / 60
            continue

        single = _SINGLE_SPEC.match(part)
        if not single:
            raise ValueError(f"Unrecognized time specification part: {part!r}")
        amount = float(single.group(1))
        match single.group(2).lower():
            case "d":
                total_hours += amount * hours_per_day
            case "h":
                total_hours += amount
            case _:
                total_hours += amount / 60

    if total_hours == 0:
        raise ValueError(f"Time specification {spec!r} does not move the clock")
    return total_hours


@dataclass(frozen=True)
class TimeStateMachine:
    """Pure transitions of :class:`TimeState` under one calendar configuration."""

    config: CalendarConfig

    @property
    def actions_per_day(self) -> int:
        return self.config.actions_per_day

    def day_progress(self, state: TimeState) -> float:
        return state.progress / self.actions_per_day

    # --- Turn reconciliation ---
    def reconcile(self, state: TimeState, turn_counter: int) -> TurnResult:
        """Bring ``state`` up to date with the host's turn counter.

        A counter below ``last_processed_turn`` means the host rewound its own
        history. The counter is then read as an absolute action position.
        """
        if turn_counter == state.last_processed_turn:
            return TurnResult(TurnOutcome.UNCHANGED, previous=state, state=state)

        if turn_counter < state.last_processed_turn:
            target = max(0, turn_counter)
            day_number, progress = divmod(target, self.actions_per_day)
            new_state = TimeState(day_number=day_number, progress=progress, last_processed_turn=target)
            return TurnResult(TurnOutcome.REVERSED, previous=state, state=new_state)

        elapsed = turn_counter - state.last_processed_turn
        day_delta, progress = divmod(state.progress + elapsed, self.actions_per_day)
        new_state = TimeState(
            day_number=state.day_number + day_delta,
            progress=progress,
            last_processed_turn=turn_counter,
        )
        return TurnResult(TurnOutcome.ADVANCED, previous=state, state=new_state, elapsed=elapsed)

    # --- Manual time skips ---
    def advance_hours(self, state: TimeState, hours: float) -> TimeState:
        """Move the clock by ``hours`` (negative rewinds), rounded to whole actions."""
        actions = _round_half_up(hours / self.config.hours_per_day * self.actions_per_day)
        moved = replace(state, progress=state.progress + actions)
        return normalize_state(moved, self.actions_per_day)

    def set_time(self, state: TimeState, hour: int, minute: int = 0) -> TimeState:
        if not 0 <= hour < self.config.hours_per_day:
            raise ValueError(f"hour must be in [0, {self.config.hours_per_day}), got {hour}")
        if not 0 <= minute < 60:
            raise ValueError(f"minute must be in [0, 60), got {minute}")
        target = time_to_progress(hour, minute, self.config.hours_per_day)
        return replace(state, progress=math.floor(target * self.actions_per_day))

    def set_day(self, state: TimeState, day_number: int) -> TimeState:
        return replace(state, day_number=math.floor(day_number))

    def rescale(self, state: TimeState, new_actions_per_day: int) -> TimeState:
        """Re-express ``progress`` for a new day length at the same time of day."""
        if new_actions_per_day < 1:
            raise ValueError(f"actions per day must be >= 1, got {new_actions_per_day}")
        new_progress = math.floor(self.day_progress(state) * new_actions_per_day)
        return replace(state, progress=min(new_progress, new_actions_per_day - 1))
