"""Goal, streak and hydration tracking."""

import logging
import math
from dataclasses import dataclass, field, replace
from datetime import timedelta
from typing import Protocol

from nutrivision.domain.goals import Goals, MacroTargets, StreakState
from nutrivision.services.calendar import LocalCalendar

logger = logging.getLogger(__name__)


class GoalsRepository(Protocol):
    """Persistence interface for user goals."""

    def load_goals(self) -> Goals | None:
        """Return stored goals, if any."""

    def save_goals(self, goals: Goals) -> None:
        """Persist goals."""


class StreakRepository(Protocol):
    """Persistence interface for streak state."""

    def load_streak(self) -> StreakState | None:
        """Return stored streak state, if any."""

    def save_streak(self, streak: StreakState) -> None:
        """Persist streak state."""


class WaterLogRepository(Protocol):
    """Persistence interface for the daily water log."""

    def get_water(self, day_key: str) -> int:
        """Return glasses logged for a day key (0 when absent)."""

    def set_water(self, day_key: str, glasses: int) -> None:
        """Persist glasses for a day key."""


def progress_percent(consumed: float, goal: float | None) -> int:
    """Return progress toward a goal as a whole percentage capped at 100.

    A zero or missing goal has no displayable progress and yields 0. Halves
    round up.
    """
    if not goal or goal <= 0:
        return 0
    return min(100, math.floor(100 * consumed / goal + 0.5))


@dataclass
class GoalTracker:
    """Holds goals, streak state and today's hydration."""

    goals_repository: GoalsRepository
    streak_repository: StreakRepository
    water_repository: WaterLogRepository
    calendar: LocalCalendar
    _goals: Goals = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._goals = self.goals_repository.load_goals() or Goals()

    @property
    def goals(self) -> Goals:
        """Return the current goals."""
        return self._goals

    def macro_targets(self) -> MacroTargets:
        """Return gram targets for protein, carbs and fat."""
        return MacroTargets(protein=self._goals.daily_protein_goal)

    def set_calorie_goal(self, value: int) -> bool:
        """Set the daily calorie goal; non-positive values are ignored."""
        return self._apply("daily_calorie_goal", value)

    def set_protein_goal(self, value: int) -> bool:
        """Set the daily protein goal; non-positive values are ignored."""
        return self._apply("daily_protein_goal", value)

    def set_hydration_goal(self, value: int) -> bool:
        """Set the daily glass target; non-positive values are ignored."""
        return self._apply("hydration_goal", value)

    def start_session(self) -> StreakState:
        """Advance the streak for a new session and return it."""
        today = self.calendar.today()
        current = self.streak_repository.load_streak()
        if current is None or current.last_active_date is None:
            updated = StreakState(count=1, last_active_date=today)
        elif current.last_active_date == today:
            return current
        elif current.last_active_date == today - timedelta(days=1):
            updated = StreakState(count=current.count + 1, last_active_date=today)
        else:
            updated = StreakState(count=1, last_active_date=today)
        self.streak_repository.save_streak(updated)
        return updated

    def streak(self) -> StreakState:
        """Return the stored streak without advancing it."""
        return self.streak_repository.load_streak() or StreakState(
            count=1, last_active_date=None
        )

    def water_today(self) -> int:
        """Return glasses logged today."""
        return self.water_repository.get_water(self.calendar.day_key())

    def adjust_water(self, delta: int) -> int:
        """Add delta glasses to today's log, never going below zero."""
        day_key = self.calendar.day_key()
        glasses = max(0, self.water_repository.get_water(day_key) + delta)
        self.water_repository.set_water(day_key, glasses)
        return glasses

    def _apply(self, name: str, value: int) -> bool:
        if not _is_positive_int(value):
            logger.info("Ignored invalid value %r for %s", value, name)
            return False
        self._goals = replace(self._goals, **{name: value})
        self.goals_repository.save_goals(self._goals)
        return True


def _is_positive_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0
