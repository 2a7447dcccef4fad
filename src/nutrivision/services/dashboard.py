"""Dashboard snapshot assembled from the history, goals and hydration."""

from dataclasses import dataclass
from datetime import date

from nutrivision.domain.goals import Goals, MacroTargets, StreakState
from nutrivision.domain.stats import ChartPoint, DailyTotals
from nutrivision.services.analysis import AnalysisGateway
from nutrivision.services.goals import GoalTracker, progress_percent
from nutrivision.services.health_score import calculate_health_score, health_rating
from nutrivision.services.stats import StatsService

DAILY_TIPS = (
    "Hydrate! Drinking water before meals aids digestion.",
    "Eat the rainbow: colorful plates mean diverse vitamins.",
    "Protein at breakfast keeps you full longer.",
    "Chew slowly to help your brain register fullness.",
    "Add fiber-rich veggies to every meal for gut health.",
)


@dataclass(frozen=True)
class MacroProgress:
    """Percent of each target reached today."""

    calories: int
    protein: int
    carbs: int
    fat: int
    water: int


@dataclass(frozen=True)
class DashboardSnapshot:
    """Everything the dashboard renders for today."""

    totals: DailyTotals
    goals: Goals
    targets: MacroTargets
    progress: MacroProgress
    water_glasses: int
    health_score: int
    health_rating: str
    streak: StreakState
    daily_tip: str
    recent: list[ChartPoint]


@dataclass
class DashboardService:
    """Builds dashboard snapshots and coaching advice."""

    stats_service: StatsService
    goal_tracker: GoalTracker
    gateway: AnalysisGateway

    def snapshot(self) -> DashboardSnapshot:
        """Recompute today's dashboard state."""
        totals = self.stats_service.get_today()
        goals = self.goal_tracker.goals
        targets = self.goal_tracker.macro_targets()
        water = self.goal_tracker.water_today()
        score = calculate_health_score(totals, goals, water, goals.hydration_goal)
        return DashboardSnapshot(
            totals=totals,
            goals=goals,
            targets=targets,
            progress=MacroProgress(
                calories=progress_percent(totals.calories, goals.daily_calorie_goal),
                protein=progress_percent(totals.macros.protein, targets.protein),
                carbs=progress_percent(totals.macros.carbs, targets.carbs),
                fat=progress_percent(totals.macros.fat, targets.fat),
                water=progress_percent(water, goals.hydration_goal),
            ),
            water_glasses=water,
            health_score=score,
            health_rating=health_rating(score),
            streak=self.goal_tracker.streak(),
            daily_tip=daily_tip(totals.day),
            recent=self.stats_service.recent_points(),
        )

    async def advice(self) -> str:
        """Return coaching advice for today's entries."""
        today = self.stats_service.calendar.today()
        entries = self.stats_service.entries_for_day(today)
        return await self.gateway.advise(entries, self.goal_tracker.goals)


def daily_tip(day: date) -> str:
    """Return the wellness tip for a day, rotating by day of year."""
    return DAILY_TIPS[day.timetuple().tm_yday % len(DAILY_TIPS)]
