"""Per-user cache of learned meal phrases."""

import re
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import Protocol

from line_meal_bot.domain.models import LearnedFoodEntry, LearnedMatch, MatchConfidence
from line_meal_bot.domain.nutrition import NutritionFacts

_WHITESPACE = re.compile(r"\s")
DEFAULT_MATCH_CONFIDENCE = "ai_analyzed"


class LearnedFoodRepository(Protocol):
    """Persistence interface for learned foods."""

    def list_learned_foods(self, user_id: str) -> dict[str, LearnedFoodEntry]:
        """Return all learned entries for a user keyed by phrase."""

    def get_learned_food(self, user_id: str, food_text: str) -> LearnedFoodEntry | None:
        """Return a single learned entry, if present."""

    def upsert_learned_food(
        self, user_id: str, food_text: str, entry: LearnedFoodEntry
    ) -> None:
        """Create or update the learned entry for a phrase."""


@dataclass
class LearnedFoodCache:
    """Looks up and promotes learned meal phrases for each user."""

    repository: LearnedFoodRepository
    clock: Callable[[], datetime] = field(default=lambda: datetime.now(tz=UTC))

    def lookup(self, user_id: str, text: str) -> LearnedMatch | None:
        """Find a learned phrase matching the text.

        Exact matches (verbatim, or equal after normalization) win with high
        confidence; otherwise the first phrase that contains or is contained
        by the text is returned with medium confidence.
        """
        normalized = normalize_food_text(text)
        if not normalized:
            return None
        entries = self.repository.list_learned_foods(user_id)

        for key, entry in entries.items():
            if key == text or normalize_food_text(key) == normalized:
                return LearnedMatch(
                    food=key, facts=entry.facts, confidence=MatchConfidence.HIGH
                )

        for key, entry in entries.items():
            normalized_key = normalize_food_text(key)
            if not normalized_key:
                continue
            if (
                key in text
                or text in key
                or normalized_key in normalized
                or normalized in normalized_key
            ):
                return LearnedMatch(
                    food=key, facts=entry.facts, confidence=MatchConfidence.MEDIUM
                )
        return None

    def promote(
        self,
        user_id: str,
        text: str,
        facts: NutritionFacts,
        is_pattern_matched: bool | None = None,
        match_confidence: str | None = None,
    ) -> LearnedFoodEntry:
        """Store the phrase's facts, bumping the usage count on repeats.

        Match metadata left as None keeps what an existing entry already
        holds; a new entry defaults to an AI-analyzed, unmatched phrase.
        """
        existing = self.repository.get_learned_food(user_id, text)
        if existing is None:
            entry = LearnedFoodEntry(
                facts=facts,
                learned_at=self.clock(),
                usage_count=1,
                is_pattern_matched=bool(is_pattern_matched),
                match_confidence=match_confidence or DEFAULT_MATCH_CONFIDENCE,
            )
        else:
            entry = replace(
                existing,
                facts=facts,
                usage_count=existing.usage_count + 1,
                is_pattern_matched=(
                    existing.is_pattern_matched
                    if is_pattern_matched is None
                    else is_pattern_matched
                ),
                match_confidence=match_confidence or existing.match_confidence,
            )
        self.repository.upsert_learned_food(user_id, text, entry)
        return entry


def normalize_food_text(text: str) -> str:
    """Lower-case the text and drop all whitespace."""
    return _WHITESPACE.sub("", text.lower())
