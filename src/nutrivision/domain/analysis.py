"""Models for food analysis results."""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from nutrivision.domain.entries import Macros


class MacrosModel(BaseModel):
    """Macros returned by the analysis model."""

    model_config = ConfigDict(extra="forbid")

    protein: int = Field(ge=0, strict=True)
    carbs: int = Field(ge=0, strict=True)
    fat: int = Field(ge=0, strict=True)

    def to_domain(self) -> Macros:
        """Convert to the domain macros value."""
        return Macros(protein=self.protein, carbs=self.carbs, fat=self.fat)


class FoodAnalysis(BaseModel):
    """Structured output for a food photo analysis."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    food_name: str
    calories: int = Field(ge=0, strict=True)
    macros: MacrosModel
    ingredients: list[str]
    health_tip: str
    confidence_score: int = Field(ge=0, le=100, strict=True)

    @field_validator("ingredients")
    @classmethod
    def _sort_ingredients(cls, value: list[str]) -> list[str]:
        return sorted(value)


class RecalculationResult(BaseModel):
    """Partial nutrition update for a confirmed ingredient set."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    calories: int | None = Field(default=None, ge=0, strict=True)
    macros: MacrosModel | None = None
    health_tip: str | None = None
