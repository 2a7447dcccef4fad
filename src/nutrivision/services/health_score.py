"""Daily health score derived from totals, goals and hydration."""

from nutrivision.domain.goals import Goals
from nutrivision.domain.stats import DailyTotals

FALLBACK_CALORIE_GOAL = 2000
FALLBACK_PROTEIN_GOAL = 150
MAX_SCORE = 100

EXCELLENT_FROM = 80
GOOD_FROM = 60

CALORIE_CLOSE_LOW = 0.85
CALORIE_CLOSE_HIGH = 1.15
CALORIE_NEAR_LOW = 0.7
CALORIE_NEAR_HIGH = 1.3

PROTEIN_MOST = 0.75
PROTEIN_HALF = 0.5

MIN_GLASSES_FOR_CREDIT = 2
FULL_LOGGING_MEALS = 3


def calculate_health_score(
    totals: DailyTotals, goals: Goals, water_glasses: int, water_goal: int
) -> int:
    """Return a 0-100 score from four independently capped sub-scores."""
    score = (
        _calorie_score(totals.calories, goals.daily_calorie_goal)
        + _protein_score(totals.macros.protein, goals.daily_protein_goal)
        + _hydration_score(water_glasses, water_goal)
        + _logging_score(totals.count)
    )
    return min(MAX_SCORE, score)


def health_rating(score: int) -> str:
    """Return the label shown next to a score."""
    if score >= EXCELLENT_FROM:
        return "Excellent"
    if score >= GOOD_FROM:
        return "Good"
    return "Needs Work"


def _calorie_score(calories: int, goal: int) -> int:
    if calories == 0:
        return 0
    ratio = calories / (goal or FALLBACK_CALORIE_GOAL)
    if CALORIE_CLOSE_LOW <= ratio <= CALORIE_CLOSE_HIGH:
        return 40
    if CALORIE_NEAR_LOW <= ratio <= CALORIE_NEAR_HIGH:
        return 20
    return 10


def _protein_score(protein: int, goal: int) -> int:
    ratio = protein / (goal or FALLBACK_PROTEIN_GOAL)
    if ratio >= 1.0:
        return 30
    if ratio >= PROTEIN_MOST:
        return 20
    if ratio >= PROTEIN_HALF:
        return 10
    return 0


def _hydration_score(glasses: int, goal: int) -> int:
    if glasses >= goal:
        return 20
    if glasses >= goal / 2:
        return 15
    if glasses >= MIN_GLASSES_FOR_CREDIT:
        return 5
    return 0


def _logging_score(count: int) -> int:
    if count >= FULL_LOGGING_MEALS:
        return 10
    if count >= 1:
        return 5
    return 0
