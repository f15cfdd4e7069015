"""Supabase implementation for learned foods."""

from dataclasses import dataclass
from datetime import datetime

from supabase import Client

from line_meal_bot.domain.models import LearnedFoodEntry
from line_meal_bot.domain.nutrition import NutritionFacts
from line_meal_bot.services.learned_foods import LearnedFoodRepository


@dataclass
class SupabaseLearnedFoodRepository(LearnedFoodRepository):
    """Supabase-backed repository for learned foods."""

    client: Client

    def list_learned_foods(self, user_id: str) -> dict[str, LearnedFoodEntry]:
        """Return all learned entries for a user keyed by phrase."""
        response = (
            self.client.table("learned_foods")
            .select("*")
            .eq("line_user_id", user_id)
            .order("learned_at", desc=False)
            .execute()
        )
        return {str(row["food_text"]): _parse_entry(row) for row in response.data or []}

    def get_learned_food(self, user_id: str, food_text: str) -> LearnedFoodEntry | None:
        """Return a single learned entry, if present."""
        response = (
            self.client.table("learned_foods")
            .select("*")
            .eq("line_user_id", user_id)
            .eq("food_text", food_text)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_entry(response.data[0])

    def upsert_learned_food(
        self, user_id: str, food_text: str, entry: LearnedFoodEntry
    ) -> None:
        """Create or update the row for the phrase."""
        self.client.table("learned_foods").upsert(
            {
                "line_user_id": user_id,
                "food_text": food_text,
                "calories": entry.facts.calories,
                "protein": entry.facts.protein,
                "fat": entry.facts.fat,
                "carbs": entry.facts.carbs,
                "learned_at": entry.learned_at.isoformat(),
                "usage_count": entry.usage_count,
                "is_pattern_matched": entry.is_pattern_matched,
                "match_confidence": entry.match_confidence,
            },
            on_conflict="line_user_id,food_text",
        ).execute()


def _parse_entry(row: dict[str, object]) -> LearnedFoodEntry:
    """Parse a learned food row into a domain model."""
    return LearnedFoodEntry(
        facts=NutritionFacts(
            calories=int(row.get("calories") or 0),
            protein=float(row.get("protein") or 0.0),
            fat=float(row.get("fat") or 0.0),
            carbs=float(row.get("carbs") or 0.0),
        ),
        learned_at=datetime.fromisoformat(str(row["learned_at"])),
        usage_count=int(row.get("usage_count") or 1),
        is_pattern_matched=bool(row.get("is_pattern_matched", False)),
        match_confidence=str(row.get("match_confidence") or "ai_analyzed"),
    )
