"""Models for AI meal analysis results."""

from pydantic import BaseModel, Field, field_validator

from line_meal_bot.domain.nutrition import MealTime


class AnalyzedFood(BaseModel):
    """Single food reported by the analysis model."""

    name: str = Field(min_length=1)
    calories: int = Field(ge=0)
    protein: float = Field(ge=0.0)
    fat: float = Field(ge=0.0)
    carbs: float = Field(ge=0.0)
    weight: int | None = Field(default=None, ge=0)
    confidence: float = Field(default=0.5, ge=0.0, le=1.0)

    @field_validator("calories", "weight", mode="before")
    @classmethod
    def _round_whole(cls, value: object) -> object:
        if isinstance(value, float):
            return round(value)
        return value


class MealAnalysis(BaseModel):
    """Structured output of a meal analysis; untrusted until validated."""

    foods: list[AnalyzedFood] = Field(min_length=1)
    meal_time: MealTime | None = None
    description: str = ""

    @field_validator("meal_time", mode="before")
    @classmethod
    def _unknown_meal_time(cls, value: object) -> object:
        if isinstance(value, MealTime):
            return value
        if value not in {item.value for item in MealTime}:
            return None
        return value
