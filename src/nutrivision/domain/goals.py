"""Domain models for goals and streaks."""

from dataclasses import dataclass
from datetime import date

DEFAULT_CALORIE_GOAL = 2200
DEFAULT_PROTEIN_GOAL = 150
DEFAULT_HYDRATION_GOAL = 8
CARBS_TARGET_G = 275
FAT_TARGET_G = 78


@dataclass(frozen=True)
class Goals:
    """User-editable daily goals."""

    daily_calorie_goal: int = DEFAULT_CALORIE_GOAL
    daily_protein_goal: int = DEFAULT_PROTEIN_GOAL
    hydration_goal: int = DEFAULT_HYDRATION_GOAL


@dataclass(frozen=True)
class MacroTargets:
    """Gram targets for each macro."""

    protein: int
    carbs: int = CARBS_TARGET_G
    fat: int = FAT_TARGET_G


@dataclass(frozen=True)
class StreakState:
    """Consecutive days of app usage."""

    count: int
    last_active_date: date | None
