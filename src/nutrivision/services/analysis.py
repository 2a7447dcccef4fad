"""Analysis gateway for the external vision-language model."""

import base64
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from pydantic import ValidationError

from nutrivision.domain.analysis import FoodAnalysis, RecalculationResult
from nutrivision.domain.entries import FoodEntry
from nutrivision.domain.goals import Goals

logger = logging.getLogger(__name__)

NO_MEALS_ADVICE = (
    "You haven't logged any meals today. Scan your breakfast to get started!"
)
EMPTY_ADVICE = "Could not generate advice at this time."
ADVICE_UNAVAILABLE = "Unable to connect to AI Coach."

_MACROS_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "protein": {"type": "integer", "description": "Protein in grams"},
        "carbs": {"type": "integer", "description": "Carbohydrates in grams"},
        "fat": {"type": "integer", "description": "Fat in grams"},
    },
    "required": ["protein", "carbs", "fat"],
    "additionalProperties": False,
}

ANALYSIS_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "foodName": {"type": "string", "description": "Name of the food identified"},
        "calories": {
            "type": "integer",
            "description": "Estimated calories (standard value)",
        },
        "macros": _MACROS_SCHEMA,
        "ingredients": {
            "type": "array",
            "items": {"type": "string"},
            "description": "List of identified ingredients",
        },
        "healthTip": {
            "type": "string",
            "description": "A short, actionable health tip about this food",
        },
        "confidenceScore": {
            "type": "integer",
            "description": "Confidence score from 0 to 100",
        },
    },
    "required": [
        "foodName",
        "calories",
        "macros",
        "ingredients",
        "healthTip",
        "confidenceScore",
    ],
    "additionalProperties": False,
}

RECALCULATION_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "calories": {"type": "integer"},
        "macros": _MACROS_SCHEMA,
        "healthTip": {"type": "string"},
    },
    "required": ["calories", "macros", "healthTip"],
    "additionalProperties": False,
}

ANALYSIS_PROMPT = """Analyze the food shown in this image with strict nutritional accuracy.

1. Identify the main food item and all visible ingredients.
2. Estimate the portion size strictly based on visual cues.
3. Calculate Total Calories, Protein, Carbs, and Fat for this specific portion.

CRITICAL CONSTRAINTS:
- Use standard USDA nutritional data values for the identified food and portion.
- Do not guess or output ranges. Return exact single integer values.
- Output MUST be deterministic. Identical image inputs must yield identical outputs.
- If the food is a common composite dish (e.g. Pizza, Burger), break it down by \
standard components to sum the calories."""


class AnalysisFailure(Exception):
    """Raised when the analysis service returns no usable result."""


class RecalculationFailure(AnalysisFailure):
    """Raised when recalculating nutrition for edited ingredients fails."""


@dataclass(frozen=True)
class DecodingParams:
    """Sampling parameters sent with every model call."""

    temperature: float
    top_p: float
    seed: int


class AnalysisClient(Protocol):
    """Interface for the external analysis model."""

    async def generate_json(  # noqa: PLR0913
        self,
        *,
        prompt: str,
        image_data_url: str | None,
        schema: dict[str, object],
        schema_name: str,
        decoding: DecodingParams,
    ) -> dict[str, object]:
        """Return a schema-constrained JSON object."""

    async def generate_text(self, *, prompt: str, decoding: DecodingParams) -> str:
        """Return free-form text."""


@dataclass
class AnalysisGateway:
    """Builds deterministic requests and validates model responses."""

    client: AnalysisClient
    seed: int = 42

    @property
    def deterministic(self) -> DecodingParams:
        """Decoding used for analysis and recalculation."""
        return DecodingParams(temperature=0.0, top_p=0.0, seed=self.seed)

    @property
    def conversational(self) -> DecodingParams:
        """Decoding used for coaching advice."""
        return DecodingParams(temperature=0.2, top_p=1.0, seed=self.seed)

    async def analyze(self, image_bytes: bytes) -> FoodAnalysis:
        """Estimate food identity and nutrition for an image."""
        try:
            raw = await self.client.generate_json(
                prompt=ANALYSIS_PROMPT,
                image_data_url=to_data_url(image_bytes),
                schema=ANALYSIS_SCHEMA,
                schema_name="food_analysis",
                decoding=self.deterministic,
            )
        except Exception as exc:
            logger.exception("Food analysis call failed")
            raise AnalysisFailure("Failed to analyze food image") from exc
        try:
            return FoodAnalysis.model_validate(raw)
        except ValidationError as exc:
            logger.warning("Food analysis response did not match schema: %s", exc)
            raise AnalysisFailure("Analysis response did not match schema") from exc

    async def recalculate(
        self,
        food_name: str,
        ingredients: Sequence[str],
        image_bytes: bytes | None = None,
    ) -> RecalculationResult:
        """Recompute nutrition restricted to a confirmed ingredient set."""
        prompt = build_recalculation_prompt(food_name, ingredients)
        image_data_url = to_data_url(image_bytes) if image_bytes else None
        try:
            raw = await self.client.generate_json(
                prompt=prompt,
                image_data_url=image_data_url,
                schema=RECALCULATION_SCHEMA,
                schema_name="nutrition_update",
                decoding=self.deterministic,
            )
        except Exception as exc:
            logger.exception("Recalculation call failed")
            raise RecalculationFailure("Failed to recalculate nutrition") from exc
        try:
            return RecalculationResult.model_validate(raw)
        except ValidationError as exc:
            logger.warning("Recalculation response did not match schema: %s", exc)
            raise RecalculationFailure(
                "Recalculation response did not match schema"
            ) from exc

    async def advise(self, todays_entries: Sequence[FoodEntry], goals: Goals) -> str:
        """Return short coaching advice for today's log."""
        if not todays_entries:
            return NO_MEALS_ADVICE
        prompt = build_advice_prompt(todays_entries, goals)
        try:
            text = await self.client.generate_text(
                prompt=prompt, decoding=self.conversational
            )
        except Exception:
            logger.exception("Advice call failed")
            return ADVICE_UNAVAILABLE
        return text.strip() or EMPTY_ADVICE


def canonicalize_ingredients(ingredients: Sequence[str]) -> str:
    """Sort ingredients ascending and join them into one stable string."""
    return ", ".join(sorted(ingredients))


def build_recalculation_prompt(food_name: str, ingredients: Sequence[str]) -> str:
    """Build the instruction text for a confirmed ingredient set."""
    confirmed = canonicalize_ingredients(ingredients)
    return f"""Analyze the food shown in the image again with strict adherence to \
standard data. The dish was identified as "{food_name}".

Primary Constraint: The ingredients list is CONFIRMED to be exactly: "{confirmed}".
Do not include any other ingredients in your calculation.

Task: Calculate the Total Calories, Protein, Carbs, and Fat for the portion size \
visible in the image, composed ONLY of the listed ingredients.

CRITICAL:
- Use standard USDA nutritional data values.
- Output MUST be deterministic. Identical inputs must yield identical outputs.

Also provide a new brief health tip based on these specific ingredients."""


def build_advice_prompt(entries: Sequence[FoodEntry], goals: Goals) -> str:
    """Summarize today's entries and goals for the coaching model."""
    logs = "\n".join(
        f"- {entry.food_name}: {entry.calories}kcal, {entry.macros.protein}g protein, "
        f"{entry.macros.carbs}g carbs, {entry.macros.fat}g fat"
        for entry in entries
    )
    return f"""You are an elite nutritionist AI. Analyze the user's nutrition for \
today based on these logs:
{logs}

User Daily Goals: {goals.daily_calorie_goal} calories, \
{goals.daily_protein_goal}g protein.

Task:
1. Briefly analyze their intake so far (balanced? high sugar? good protein?).
2. Suggest a specific, healthy next meal or snack to help them balance their metrics.
3. Keep the tone encouraging, futuristic, and concise (under 80 words)."""


def to_data_url(image_bytes: bytes) -> str:
    """Convert bytes to a base64 data URL for image input."""
    mime_type = _detect_mime_type(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def _detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"
