"""Tiered meal resolution.

Text descriptions walk an ordered list of tiers (learned phrases, the static
food index, then AI text analysis) and the first tier that produces a result
wins. Photos always go to AI vision. Whatever fails along the way ends in the
fixed fallback result, so `MealResolver.resolve` never raises.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from line_meal_bot.domain.analysis import MealAnalysis
from line_meal_bot.domain.models import MatchConfidence
from line_meal_bot.domain.nutrition import (
    FoodItem,
    ImageInput,
    MealInput,
    MealTime,
    NutritionFacts,
    ResolutionMethod,
    ResolutionResult,
    TextInput,
)
from line_meal_bot.services.analysis import MealAnalysisService
from line_meal_bot.services.food_index import FoodIndex
from line_meal_bot.services.learned_foods import LearnedFoodCache

_logger = logging.getLogger(__name__)

LEARNED_CONFIDENCE = 0.95
MATCH_CONFIDENCE: dict[str, float] = {"high": 0.9, "medium": 0.7}
DEFAULT_MATCH_CONFIDENCE = 0.5
AI_CONFIDENCE: dict[ResolutionMethod, float] = {
    ResolutionMethod.AI_VISION: 0.85,
    ResolutionMethod.AI_TEXT: 0.75,
}
DATABASE_WEIGHT_GRAMS = 100
LEARNING_THRESHOLD = 0.7

FALLBACK_RESULT = ResolutionResult(
    items=(
        FoodItem(
            name="meal",
            facts=NutritionFacts(calories=350, protein=15.0, fat=12.0, carbs=45.0),
            estimated_weight_grams=200,
            confidence=0.3,
        ),
    ),
    totals=NutritionFacts(calories=350, protein=15.0, fat=12.0, carbs=45.0),
    meal_time=MealTime.LUNCH,
    description="We couldn't analyze this meal. Please adjust it manually.",
    method=ResolutionMethod.FALLBACK,
    confidence=0.3,
)


class TextTier(Protocol):
    """One strategy for resolving a meal description."""

    name: str

    async def resolve(self, user_id: str, text: str) -> ResolutionResult | None:
        """Return a result, or None to let the next tier try."""


@dataclass
class LearnedFoodTier:
    """Reuses a phrase the user has logged before."""

    cache: LearnedFoodCache
    name: str = "learned"

    async def resolve(self, user_id: str, text: str) -> ResolutionResult | None:
        """Return the cached facts for an exact learned match."""
        match = self.cache.lookup(user_id, text)
        if match is None or match.confidence is not MatchConfidence.HIGH:
            return None
        return ResolutionResult.from_items(
            [
                FoodItem(
                    name=match.food,
                    facts=match.facts,
                    estimated_weight_grams=None,
                    confidence=LEARNED_CONFIDENCE,
                )
            ],
            meal_time=None,
            description=f"Learned meal: {match.food}",
            method=ResolutionMethod.LEARNED,
            confidence=LEARNED_CONFIDENCE,
        )


@dataclass
class FoodIndexTier:
    """Looks the description up in the static food index."""

    index: FoodIndex
    name: str = "database"

    async def resolve(self, user_id: str, text: str) -> ResolutionResult | None:
        """Return the index entry scaled by match quality."""
        match = self.index.lookup(text)
        if match is None:
            return None
        confidence = MATCH_CONFIDENCE.get(match.quality, DEFAULT_MATCH_CONFIDENCE)
        return ResolutionResult.from_items(
            [
                FoodItem(
                    name=match.name,
                    facts=match.facts,
                    estimated_weight_grams=DATABASE_WEIGHT_GRAMS,
                    confidence=confidence,
                )
            ],
            meal_time=None,
            description=f"Database match: {match.name}",
            method=ResolutionMethod.DATABASE,
            confidence=confidence,
        )


@dataclass
class AiTextTier:
    """Asks the analysis model about the description."""

    analysis_service: MealAnalysisService
    name: str = "ai_text"

    async def resolve(self, user_id: str, text: str) -> ResolutionResult | None:
        """Return the validated model analysis."""
        analysis = await self.analysis_service.analyze_text(text)
        return result_from_analysis(analysis, ResolutionMethod.AI_TEXT)


def build_text_tiers(
    cache: LearnedFoodCache,
    index: FoodIndex,
    analysis_service: MealAnalysisService,
) -> list[TextTier]:
    """Return the default tier order for text input."""
    return [
        LearnedFoodTier(cache),
        FoodIndexTier(index),
        AiTextTier(analysis_service),
    ]


@dataclass
class MealResolver:
    """Turns a meal input into one resolution result and learns from it."""

    text_tiers: Sequence[TextTier]
    analysis_service: MealAnalysisService
    learned_food_cache: LearnedFoodCache
    learning_threshold: float = LEARNING_THRESHOLD

    async def resolve(self, user_id: str, meal_input: MealInput) -> ResolutionResult:
        """Resolve the input, falling back to a fixed estimate on failure."""
        if isinstance(meal_input, ImageInput):
            result = await self._resolve_image(user_id, meal_input.content)
        else:
            result = await self._resolve_text(user_id, meal_input.text)
        self._learn(user_id, meal_input, result)
        return result

    async def _resolve_image(self, user_id: str, content: bytes) -> ResolutionResult:
        try:
            analysis = await self.analysis_service.analyze_image(content)
            return result_from_analysis(analysis, ResolutionMethod.AI_VISION)
        except Exception:
            _logger.exception("Image analysis failed", extra={"user_id": user_id})
        return FALLBACK_RESULT

    async def _resolve_text(self, user_id: str, text: str) -> ResolutionResult:
        for tier in self.text_tiers:
            try:
                result = await tier.resolve(user_id, text)
            except Exception:
                _logger.exception(
                    "Resolution tier %s failed",
                    tier.name,
                    extra={"user_id": user_id},
                )
                continue
            if result is not None:
                _logger.info(
                    "Resolved meal text via %s", tier.name, extra={"user_id": user_id}
                )
                return result
        return FALLBACK_RESULT

    def _learn(
        self, user_id: str, meal_input: MealInput, result: ResolutionResult
    ) -> None:
        if not isinstance(meal_input, TextInput):
            return
        if result.confidence <= self.learning_threshold or len(result.items) != 1:
            return
        # A learned hit only bumps usage and keeps the stored match metadata.
        reused = result.method is ResolutionMethod.LEARNED
        try:
            self.learned_food_cache.promote(
                user_id,
                meal_input.text,
                result.items[0].facts,
                is_pattern_matched=(
                    None if reused else result.method is ResolutionMethod.DATABASE
                ),
                match_confidence=None if reused else result.method.value,
            )
        except Exception:
            _logger.exception(
                "Failed to store learned food", extra={"user_id": user_id}
            )


def result_from_analysis(
    analysis: MealAnalysis, method: ResolutionMethod
) -> ResolutionResult:
    """Convert a validated model analysis into a resolution result."""
    items = [
        FoodItem(
            name=food.name,
            facts=NutritionFacts(
                calories=food.calories,
                protein=food.protein,
                fat=food.fat,
                carbs=food.carbs,
            ),
            estimated_weight_grams=food.weight,
            confidence=food.confidence,
        )
        for food in analysis.foods
    ]
    return ResolutionResult.from_items(
        items,
        meal_time=analysis.meal_time,
        description=analysis.description or ", ".join(item.name for item in items),
        method=method,
        confidence=AI_CONFIDENCE[method],
    )
