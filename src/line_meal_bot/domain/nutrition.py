"""Nutrition domain models."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum


@dataclass(frozen=True)
class NutritionFacts:
    """Calories and macronutrients for a food or a whole meal."""

    calories: int
    protein: float
    fat: float
    carbs: float

    def __add__(self, other: "NutritionFacts") -> "NutritionFacts":
        return NutritionFacts(
            calories=self.calories + other.calories,
            protein=self.protein + other.protein,
            fat=self.fat + other.fat,
            carbs=self.carbs + other.carbs,
        )


ZERO_FACTS = NutritionFacts(calories=0, protein=0.0, fat=0.0, carbs=0.0)


class ResolutionMethod(Enum):
    """Tier that produced a resolution result."""

    LEARNED = "learned"
    DATABASE = "database"
    AI_VISION = "ai_vision"
    AI_TEXT = "ai_text"
    FALLBACK = "fallback"


class MealTime(Enum):
    """Meal slot reported by the analysis."""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"


@dataclass(frozen=True)
class FoodItem:
    """Single food inside a resolved meal."""

    name: str
    facts: NutritionFacts
    estimated_weight_grams: int | None
    confidence: float


@dataclass(frozen=True)
class ResolutionResult:
    """Resolved meal with totals and provenance."""

    items: tuple[FoodItem, ...]
    totals: NutritionFacts
    meal_time: MealTime | None
    description: str
    method: ResolutionMethod
    confidence: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", tuple(self.items))
        if not self.items:
            raise ValueError("A resolution result needs at least one item")

    @classmethod
    def from_items(  # noqa: PLR0913
        cls,
        items: Iterable[FoodItem],
        *,
        meal_time: MealTime | None,
        description: str,
        method: ResolutionMethod,
        confidence: float,
    ) -> "ResolutionResult":
        """Build a result whose totals are summed from the items."""
        items = tuple(items)
        return cls(
            items=items,
            totals=sum_facts(items),
            meal_time=meal_time,
            description=description,
            method=method,
            confidence=confidence,
        )


@dataclass(frozen=True)
class ImageInput:
    """Meal photo bytes."""

    content: bytes = field(repr=False)


@dataclass(frozen=True)
class TextInput:
    """Free-form meal description."""

    text: str


MealInput = ImageInput | TextInput


def sum_facts(items: Iterable[FoodItem]) -> NutritionFacts:
    """Return the element-wise sum of the items' facts."""
    total = ZERO_FACTS
    for item in items:
        total = total + item.facts
    return total
