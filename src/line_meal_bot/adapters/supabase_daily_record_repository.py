"""Supabase repository for daily meal and weight records."""

from dataclasses import dataclass
from datetime import date, datetime

from supabase import Client

from line_meal_bot.domain.models import MealRecord
from line_meal_bot.domain.nutrition import FoodItem, NutritionFacts
from line_meal_bot.services.records import DailyRecordRepository


@dataclass
class SupabaseDailyRecordRepository(DailyRecordRepository):
    """Supabase implementation for daily records."""

    client: Client

    def append_meal_record(self, record: MealRecord) -> None:
        """Insert a meal row; rows with a known id are left as they are."""
        result = record.result
        self.client.table("meal_records").upsert(
            {
                "id": record.id,
                "line_user_id": record.user_id,
                "record_date": record.record_date.isoformat(),
                "recorded_at": record.recorded_at.isoformat(),
                "meal_time": result.meal_time.value if result.meal_time else None,
                "description": result.description,
                "analysis_method": result.method.value,
                "confidence": result.confidence,
                "foods": [_food_payload(item) for item in result.items],
                **_totals_payload(result.totals),
            },
            on_conflict="id",
            ignore_duplicates=True,
        ).execute()

    def set_weight_record(
        self, user_id: str, record_date: date, weight: float, recorded_at: datetime
    ) -> None:
        """Upsert the weight for the user and date."""
        self.client.table("weight_records").upsert(
            {
                "line_user_id": user_id,
                "record_date": record_date.isoformat(),
                "weight": weight,
                "updated_at": recorded_at.isoformat(),
            },
            on_conflict="line_user_id,record_date",
        ).execute()


def _food_payload(item: FoodItem) -> dict[str, object]:
    return {
        "name": item.name,
        "calories": item.facts.calories,
        "protein": item.facts.protein,
        "fat": item.facts.fat,
        "carbs": item.facts.carbs,
        "weight": item.estimated_weight_grams,
        "confidence": item.confidence,
    }


def _totals_payload(totals: NutritionFacts) -> dict[str, object]:
    return {
        "total_calories": totals.calories,
        "total_protein": totals.protein,
        "total_fat": totals.fat,
        "total_carbs": totals.carbs,
    }
