"""Statistics over the local history log."""

from dataclasses import dataclass
from datetime import date, timedelta

from nutrivision.domain.entries import FoodEntry, Macros
from nutrivision.domain.stats import ChartPoint, DailyTotals
from nutrivision.services.calendar import LocalCalendar
from nutrivision.services.entries import EntryStore

WEEK_DAYS = 7


@dataclass
class PeriodSummary:
    """Aggregated totals for a period."""

    daily: list[DailyTotals]
    avg_calories: float
    avg_protein_g: float
    avg_fat_g: float
    avg_carbs_g: float


@dataclass
class StatsService:
    """Service for computing per-day totals in the local calendar."""

    store: EntryStore
    calendar: LocalCalendar

    def entries_for_day(self, day: date) -> list[FoodEntry]:
        """Return entries logged on the given local day, oldest first."""
        return [
            entry
            for entry in self.store.all()
            if self.calendar.day_of(entry.timestamp) == day
        ]

    def totals_for_day(self, day: date) -> DailyTotals:
        """Return calorie, macro and count totals for a local day."""
        return _aggregate_day(day, self.entries_for_day(day))

    def get_today(self) -> DailyTotals:
        """Return today's totals."""
        return self.totals_for_day(self.calendar.today())

    def get_week(self) -> PeriodSummary:
        """Return totals and averages for the last seven local days."""
        today = self.calendar.today()
        start = today - timedelta(days=WEEK_DAYS - 1)
        entries = self.store.all()
        daily = []
        for offset in range(WEEK_DAYS):
            day = start + timedelta(days=offset)
            day_entries = [
                entry for entry in entries if self.calendar.day_of(entry.timestamp) == day
            ]
            daily.append(_aggregate_day(day, day_entries))
        return _summarize(daily)

    def recent_points(self, limit: int = WEEK_DAYS) -> list[ChartPoint]:
        """Return chart points for the most recent entries, oldest first."""
        if limit <= 0:
            return []
        return [
            ChartPoint(
                label=self.calendar.local_time(entry.timestamp).strftime("%a"),
                calories=entry.calories,
                protein=entry.macros.protein,
            )
            for entry in self.store.all()[-limit:]
        ]


def _aggregate_day(day: date, entries: list[FoodEntry]) -> DailyTotals:
    calories = 0
    protein = 0
    carbs = 0
    fat = 0
    for entry in entries:
        calories += entry.calories
        protein += entry.macros.protein
        carbs += entry.macros.carbs
        fat += entry.macros.fat
    return DailyTotals(
        day=day,
        calories=calories,
        macros=Macros(protein=protein, carbs=carbs, fat=fat),
        count=len(entries),
    )


def _summarize(daily: list[DailyTotals]) -> PeriodSummary:
    total_days = max(len(daily), 1)
    return PeriodSummary(
        daily=daily,
        avg_calories=sum(day.calories for day in daily) / total_days,
        avg_protein_g=sum(day.macros.protein for day in daily) / total_days,
        avg_fat_g=sum(day.macros.fat for day in daily) / total_days,
        avg_carbs_g=sum(day.macros.carbs for day in daily) / total_days,
    )
