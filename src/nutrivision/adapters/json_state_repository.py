"""Local JSON file persistence for all app state."""

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from datetime import date
from pathlib import Path

from nutrivision.domain.entries import FoodEntry, Macros
from nutrivision.domain.goals import Goals, StreakState
from nutrivision.services.entries import EntryRepository
from nutrivision.services.goals import (
    GoalsRepository,
    StreakRepository,
    WaterLogRepository,
)
from nutrivision.services.preferences import PreferencesRepository

logger = logging.getLogger(__name__)

HISTORY_KEY = "history"
STREAK_KEY = "streak"
GOALS_KEY = "goals"
WATER_KEY = "water"
THEME_KEY = "theme"


@dataclass
class JsonFileStateRepository(
    EntryRepository,
    GoalsRepository,
    StreakRepository,
    WaterLogRepository,
    PreferencesRepository,
):
    """Stores every key in one JSON document, rewritten whole on each change."""

    path: Path

    @classmethod
    def create(cls, path: str) -> "JsonFileStateRepository":
        """Create a repository for a file path, creating parent folders."""
        resolved = Path(path).expanduser()
        resolved.parent.mkdir(parents=True, exist_ok=True)
        return cls(path=resolved)

    def load_entries(self) -> list[FoodEntry]:
        """Return the stored history, or an empty list if missing or corrupt."""
        raw = self._read().get(HISTORY_KEY)
        if raw is None:
            return []
        if not isinstance(raw, list):
            logger.warning("Stored history is not a list; starting empty")
            return []
        try:
            return [_entry_from_record(record) for record in raw]
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Stored history is corrupt (%s); starting empty", exc)
            return []

    def save_entries(self, entries: list[FoodEntry]) -> None:
        """Replace the stored history."""
        self._write_key(HISTORY_KEY, [_entry_to_record(entry) for entry in entries])

    def load_goals(self) -> Goals | None:
        """Return stored goals if present and valid."""
        raw = self._read().get(GOALS_KEY)
        if raw is None:
            return None
        try:
            goals = Goals(
                daily_calorie_goal=int(raw["dailyCalorieGoal"]),
                daily_protein_goal=int(raw["dailyProteinGoal"]),
                hydration_goal=int(raw["hydrationGoal"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Stored goals are corrupt (%s); using defaults", exc)
            return None
        if min(
            goals.daily_calorie_goal, goals.daily_protein_goal, goals.hydration_goal
        ) <= 0:
            logger.warning("Stored goals are not positive; using defaults")
            return None
        return goals

    def save_goals(self, goals: Goals) -> None:
        """Persist goals."""
        self._write_key(
            GOALS_KEY,
            {
                "dailyCalorieGoal": goals.daily_calorie_goal,
                "dailyProteinGoal": goals.daily_protein_goal,
                "hydrationGoal": goals.hydration_goal,
            },
        )

    def load_streak(self) -> StreakState | None:
        """Return stored streak state if present and valid."""
        raw = self._read().get(STREAK_KEY)
        if raw is None:
            return None
        try:
            count = int(raw["count"])
            last_active = raw.get("lastActiveDate")
            last_active_date = date.fromisoformat(last_active) if last_active else None
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            logger.warning("Stored streak is corrupt (%s); resetting", exc)
            return None
        return StreakState(count=max(count, 1), last_active_date=last_active_date)

    def save_streak(self, streak: StreakState) -> None:
        """Persist streak state."""
        self._write_key(
            STREAK_KEY,
            {
                "count": streak.count,
                "lastActiveDate": (
                    streak.last_active_date.isoformat()
                    if streak.last_active_date
                    else None
                ),
            },
        )

    def get_water(self, day_key: str) -> int:
        """Return glasses logged for a day key."""
        raw = self._read().get(WATER_KEY)
        if not isinstance(raw, dict):
            return 0
        try:
            return max(0, int(raw.get(day_key, 0)))
        except (TypeError, ValueError):
            logger.warning("Stored water count for %s is corrupt; using 0", day_key)
            return 0

    def set_water(self, day_key: str, glasses: int) -> None:
        """Persist glasses for a day key."""
        state = self._read()
        water = state.get(WATER_KEY)
        if not isinstance(water, dict):
            water = {}
        water[day_key] = glasses
        state[WATER_KEY] = water
        self._write(state)

    def get_dark_mode(self) -> bool | None:
        """Return the stored theme preference."""
        raw = self._read().get(THEME_KEY)
        if not isinstance(raw, dict) or not isinstance(raw.get("darkMode"), bool):
            return None
        return raw["darkMode"]

    def set_dark_mode(self, enabled: bool) -> None:
        """Persist the theme preference."""
        self._write_key(THEME_KEY, {"darkMode": enabled})

    def _read(self) -> dict[str, object]:
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as exc:
            logger.warning("Could not read state file %s: %s", self.path, exc)
            return {}
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            logger.warning("State file %s is corrupt: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("State file %s does not hold an object", self.path)
            return {}
        return data

    def _write_key(self, key: str, value: object) -> None:
        state = self._read()
        state[key] = value
        self._write(state)

    def _write(self, state: dict[str, object]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(state, handle, ensure_ascii=False)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


def _entry_to_record(entry: FoodEntry) -> dict[str, object]:
    record: dict[str, object] = {
        "id": entry.id,
        "timestamp": entry.timestamp,
        "foodName": entry.food_name,
        "calories": entry.calories,
        "macros": {
            "protein": entry.macros.protein,
            "carbs": entry.macros.carbs,
            "fat": entry.macros.fat,
        },
        "ingredients": list(entry.ingredients),
        "healthTip": entry.health_tip,
        "confidenceScore": entry.confidence_score,
    }
    if entry.image_url is not None:
        record["imageUrl"] = entry.image_url
    return record


def _entry_from_record(record: dict[str, object]) -> FoodEntry:
    macros = record["macros"]
    ingredients = record.get("ingredients") or []
    if not isinstance(ingredients, list):
        raise TypeError("ingredients must be a list")
    return FoodEntry(
        id=str(record["id"]),
        timestamp=int(record["timestamp"]),
        food_name=str(record["foodName"]),
        calories=_non_negative(record["calories"], "calories"),
        macros=Macros(
            protein=_non_negative(macros["protein"], "protein"),
            carbs=_non_negative(macros["carbs"], "carbs"),
            fat=_non_negative(macros["fat"], "fat"),
        ),
        ingredients=tuple(str(item) for item in ingredients),
        health_tip=str(record.get("healthTip") or ""),
        confidence_score=int(record.get("confidenceScore", 100)),
        image_url=record.get("imageUrl"),
    )


def _non_negative(value: object, name: str) -> int:
    number = int(value)
    if number < 0:
        raise ValueError(f"{name} must not be negative")
    return number
