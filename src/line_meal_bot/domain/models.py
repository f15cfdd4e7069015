"""Domain models for users, records and quotas."""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum

from line_meal_bot.domain.nutrition import NutritionFacts, ResolutionResult


@dataclass(frozen=True)
class LineProfile:
    """Display profile returned by the LINE profile API."""

    user_id: str
    display_name: str
    picture_url: str | None = None


class MatchConfidence(Enum):
    """How closely a learned phrase matched the input text."""

    HIGH = "high"
    MEDIUM = "medium"


@dataclass(frozen=True)
class LearnedFoodEntry:
    """A user's learned phrase and the facts it resolves to."""

    facts: NutritionFacts
    learned_at: datetime
    usage_count: int
    is_pattern_matched: bool = False
    match_confidence: str = "ai_analyzed"


@dataclass(frozen=True)
class LearnedMatch:
    """Result of looking a phrase up in the learned cache."""

    food: str
    facts: NutritionFacts
    confidence: MatchConfidence


@dataclass(frozen=True)
class QuotaDecision:
    """Outcome of a quota check."""

    allowed: bool
    limit: int
    used: int


@dataclass(frozen=True)
class MealRecord:
    """A resolved meal ready to be stored in the daily record."""

    id: str
    user_id: str
    record_date: date
    recorded_at: datetime
    result: ResolutionResult
