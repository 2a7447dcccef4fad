"""Pydantic models for API request payloads."""

from pydantic import BaseModel, Field


class MacrosPayload(BaseModel):
    """Macro grams payload."""

    protein: int = Field(default=0, ge=0)
    carbs: int = Field(default=0, ge=0)
    fat: int = Field(default=0, ge=0)


class ManualEntryRequest(BaseModel):
    """Manually logged food item."""

    food_name: str = Field(min_length=1)
    calories: int = Field(default=0, ge=0)
    macros: MacrosPayload = Field(default_factory=MacrosPayload)


class CaloriePatchRequest(BaseModel):
    """Calorie correction for a logged entry."""

    calories: int


class IngredientRequest(BaseModel):
    """Ingredient added to a pending capture."""

    name: str


class CaptureEditRequest(BaseModel):
    """Manual nutrition overrides for a pending capture."""

    calories: int | None = Field(default=None, ge=0)
    macros: MacrosPayload | None = None


class GoalsUpdateRequest(BaseModel):
    """Goal changes; omitted fields are left unchanged."""

    daily_calorie_goal: int | None = None
    daily_protein_goal: int | None = None
    hydration_goal: int | None = None


class WaterAdjustRequest(BaseModel):
    """Change in glasses of water for today."""

    delta: int


class ThemeRequest(BaseModel):
    """Theme preference update."""

    dark_mode: bool
