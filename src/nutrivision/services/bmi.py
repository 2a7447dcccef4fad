"""Body mass index calculator with category guidance."""

from dataclasses import dataclass

UNDERWEIGHT_BELOW = 18.5
HEALTHY_BELOW = 25.0
OVERWEIGHT_BELOW = 30.0


@dataclass(frozen=True)
class BmiCategory:
    """Named BMI band with a one-line plan."""

    label: str
    advice: str


@dataclass(frozen=True)
class BmiPlan:
    """Twelve-week exercise and nutrition focus for a BMI band."""

    exercises: str
    frequency: str
    protein: str
    focus: str


_CATEGORIES = (
    BmiCategory("Underweight", "Focus on surplus calories & strength."),
    BmiCategory("Healthy Weight", "Maintain with balanced diet."),
    BmiCategory("Overweight", "Calorie deficit & cardio."),
    BmiCategory("Obese", "High protein, strict deficit."),
)

_PLANS = (
    BmiPlan(
        exercises="Squats, Deadlifts, Bench Press",
        frequency="3-4x / week",
        protein="1.5g - 2g per kg bodyweight",
        focus="Build Muscle Mass",
    ),
    BmiPlan(
        exercises="Running, Swimming, Yoga",
        frequency="3x / week",
        protein="1.2g per kg bodyweight",
        focus="General Fitness",
    ),
    BmiPlan(
        exercises="HIIT, Brisk Walking, Cycling",
        frequency="4-5x / week",
        protein="1.8g per kg bodyweight",
        focus="Fat Loss",
    ),
    BmiPlan(
        exercises="Low Impact Cardio, Strength",
        frequency="Daily light activity",
        protein="2.0g per kg bodyweight",
        focus="Metabolic Health",
    ),
)


def calculate_bmi(height_cm: float, weight_kg: float) -> float | None:
    """Return BMI rounded to one decimal, or None for non-positive input."""
    height_m = height_cm / 100
    if height_m <= 0 or weight_kg <= 0:
        return None
    return round(weight_kg / (height_m * height_m), 1)


def bmi_category(bmi: float) -> BmiCategory:
    """Return the category for a BMI value."""
    return _CATEGORIES[_band(bmi)]


def bmi_plan(bmi: float) -> BmiPlan:
    """Return the plan for a BMI value."""
    return _PLANS[_band(bmi)]


def _band(bmi: float) -> int:
    if bmi < UNDERWEIGHT_BELOW:
        return 0
    if bmi < HEALTHY_BELOW:
        return 1
    if bmi < OVERWEIGHT_BELOW:
        return 2
    return 3
