"""Entry store for the food history log."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from typing import Protocol
from uuid import uuid4

from nutrivision.domain.analysis import FoodAnalysis
from nutrivision.domain.entries import FoodEntry, Macros
from nutrivision.services.calendar import LocalCalendar

logger = logging.getLogger(__name__)

MANUAL_HEALTH_TIP = "Manually logged entry"
MANUAL_CONFIDENCE = 100


class EntryRepository(Protocol):
    """Persistence interface for the history log."""

    def load_entries(self) -> list[FoodEntry]:
        """Return the persisted history, oldest first."""

    def save_entries(self, entries: list[FoodEntry]) -> None:
        """Replace the persisted history as a whole."""


@dataclass
class EntryStore:
    """Append-only ordered log of food entries mirrored to local storage."""

    repository: EntryRepository
    calendar: LocalCalendar
    _entries: list[FoodEntry] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._entries = list(self.repository.load_entries())

    def all(self) -> list[FoodEntry]:
        """Return every entry, oldest first."""
        return list(self._entries)

    def get(self, entry_id: str) -> FoodEntry | None:
        """Return the entry with the given id, if present."""
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        return None

    def append(self, entry: FoodEntry) -> FoodEntry:
        """Add an entry to the end of the log."""
        self._entries.append(entry)
        self._persist()
        return entry

    def create(  # noqa: PLR0913
        self,
        *,
        food_name: str,
        calories: int,
        macros: Macros,
        ingredients: Sequence[str] = (),
        health_tip: str = "",
        confidence_score: int = MANUAL_CONFIDENCE,
        image_url: str | None = None,
    ) -> FoodEntry:
        """Stamp a new entry with a fresh id and the current time, then append it."""
        entry = FoodEntry(
            id=_new_id(),
            timestamp=self.calendar.now_ms(),
            food_name=food_name,
            calories=max(calories, 0),
            macros=Macros(
                protein=max(macros.protein, 0),
                carbs=max(macros.carbs, 0),
                fat=max(macros.fat, 0),
            ),
            ingredients=tuple(ingredients),
            health_tip=health_tip,
            confidence_score=confidence_score,
            image_url=image_url,
        )
        return self.append(entry)

    def record(
        self,
        analysis: FoodAnalysis,
        image_url: str | None = None,
    ) -> FoodEntry:
        """Create an entry from an analysis result and append it."""
        return self.create(
            food_name=analysis.food_name,
            calories=analysis.calories,
            macros=analysis.macros.to_domain(),
            ingredients=analysis.ingredients,
            health_tip=analysis.health_tip,
            confidence_score=analysis.confidence_score,
            image_url=image_url,
        )

    def add_manual(self, food_name: str, calories: int, macros: Macros) -> FoodEntry:
        """Append a manually entered food item."""
        return self.create(
            food_name=food_name,
            calories=calories,
            macros=macros,
            health_tip=MANUAL_HEALTH_TIP,
            confidence_score=MANUAL_CONFIDENCE,
        )

    def remove(self, entry_id: str) -> bool:
        """Remove an entry by id; unknown ids are ignored."""
        remaining = [entry for entry in self._entries if entry.id != entry_id]
        if len(remaining) == len(self._entries):
            return False
        self._entries = remaining
        self._persist()
        return True

    def patch_calories(self, entry_id: str, calories: int) -> FoodEntry | None:
        """Replace the calories of an entry.

        Negative values are rejected and leave the store unchanged. Returns the
        updated entry, or None when the entry is unknown or the value rejected.
        """
        if calories < 0:
            logger.info("Rejected negative calorie patch for entry %s", entry_id)
            return None
        for index, entry in enumerate(self._entries):
            if entry.id == entry_id:
                updated = replace(entry, calories=calories)
                self._entries[index] = updated
                self._persist()
                return updated
        return None

    def _persist(self) -> None:
        self.repository.save_entries(list(self._entries))


def _new_id() -> str:
    return str(uuid4())
