"""Domain models for statistics."""

from dataclasses import dataclass, field
from datetime import date

from nutrivision.domain.entries import Macros


@dataclass(frozen=True)
class DailyTotals:
    """Daily totals over the history log."""

    day: date
    calories: int = 0
    macros: Macros = field(default_factory=Macros)
    count: int = 0


@dataclass(frozen=True)
class ChartPoint:
    """Single point for the recent intake chart."""

    label: str
    calories: int
    protein: int
