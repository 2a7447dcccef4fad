"""Domain models for the food history log."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Macros:
    """Macronutrient grams for an entry or a daily total."""

    protein: int = 0
    carbs: int = 0
    fat: int = 0


@dataclass(frozen=True)
class FoodEntry:
    """A single logged food item."""

    id: str
    timestamp: int
    food_name: str
    calories: int
    macros: Macros
    ingredients: tuple[str, ...] = field(default_factory=tuple)
    health_tip: str = ""
    confidence_score: int = 100
    image_url: str | None = None
