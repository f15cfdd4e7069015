"""Tests for Supabase adapter implementations."""

from dataclasses import dataclass, field
from datetime import UTC, date, datetime

from line_meal_bot.adapters.supabase_counseling_repository import (
    SupabaseCounselingRepository,
)
from line_meal_bot.adapters.supabase_daily_record_repository import (
    SupabaseDailyRecordRepository,
)
from line_meal_bot.adapters.supabase_learned_food_repository import (
    SupabaseLearnedFoodRepository,
)
from line_meal_bot.adapters.supabase_usage_repository import SupabaseUsageRepository
from line_meal_bot.adapters.supabase_user_repository import SupabaseUserRepository
from line_meal_bot.domain.models import LearnedFoodEntry, LineProfile, MealRecord
from line_meal_bot.domain.nutrition import (
    FoodItem,
    MealTime,
    NutritionFacts,
    ResolutionMethod,
    ResolutionResult,
)


@dataclass
class FakeResponse:
    data: list[dict[str, object]] | None


@dataclass
class FakeTable:
    name: str
    response_queue: dict[str, list[list[dict[str, object]]]] = field(
        default_factory=lambda: {"select": [], "upsert": []}
    )
    last_payload: object | None = None
    last_options: dict[str, object] = field(default_factory=dict)
    last_filters: list[tuple[str, object]] = field(default_factory=list)

    def queue(self, action: str, data: list[dict[str, object]]) -> None:
        self.response_queue[action].append(data)

    def select(self, *_args) -> "FakeTable":
        self._action = "select"
        return self

    def upsert(self, payload, **options) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "upsert"
        self.last_payload = payload
        self.last_options = options
        return self

    def eq(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((column, value))
        return self

    def limit(self, _count: int) -> "FakeTable":
        return self

    def order(self, _column: str, desc: bool = False) -> "FakeTable":
        return self

    def execute(self) -> FakeResponse:
        action = getattr(self, "_action", "select")
        queue = self.response_queue.get(action, [])
        data = queue.pop(0) if queue else []
        return FakeResponse(data=data)


@dataclass
class FakeSupabaseClient:
    tables: dict[str, FakeTable] = field(default_factory=dict)

    def table(self, name: str) -> FakeTable:
        if name not in self.tables:
            self.tables[name] = FakeTable(name=name)
        return self.tables[name]


def test_supabase_user_repository_upserts_profile() -> None:
    client = FakeSupabaseClient()
    repository = SupabaseUserRepository(client)

    repository.save_profile(
        LineProfile(user_id="U1", display_name="Hanako"),
        followed_at=datetime(2026, 1, 1, tzinfo=UTC),
    )

    table = client.table("line_users")
    assert isinstance(table.last_payload, dict)
    assert table.last_payload["line_user_id"] == "U1"
    assert table.last_payload["picture_url"] == ""
    assert table.last_options == {"on_conflict": "line_user_id"}


def test_supabase_counseling_repository() -> None:
    client = FakeSupabaseClient()
    client.table("counseling_results").queue(
        "select", [{"answers": {"goal": "keep"}, "ai_analysis": {}}]
    )
    repository = SupabaseCounselingRepository(client)

    assert repository.get_counseling("U1") == {
        "answers": {"goal": "keep"},
        "ai_analysis": {},
    }
    assert repository.get_counseling("U2") is None
    assert ("line_user_id", "U2") in client.table("counseling_results").last_filters


def test_supabase_daily_record_repository_meal_and_weight() -> None:
    client = FakeSupabaseClient()
    repository = SupabaseDailyRecordRepository(client)
    result = ResolutionResult.from_items(
        [
            FoodItem(
                name="rice",
                facts=NutritionFacts(252, 3.8, 0.5, 55.7),
                estimated_weight_grams=150,
                confidence=0.9,
            ),
            FoodItem(
                name="miso soup",
                facts=NutritionFacts(40, 2.6, 1.4, 4.2),
                estimated_weight_grams=None,
                confidence=0.9,
            ),
        ],
        meal_time=MealTime.DINNER,
        description="Rice and miso soup",
        method=ResolutionMethod.AI_VISION,
        confidence=0.85,
    )
    recorded_at = datetime(2026, 1, 2, 12, 0, tzinfo=UTC)

    repository.append_meal_record(
        MealRecord(
            id="event-1",
            user_id="U1",
            record_date=date(2026, 1, 2),
            recorded_at=recorded_at,
            result=result,
        )
    )
    repository.set_weight_record("U1", date(2026, 1, 2), 65.5, recorded_at)

    meals = client.table("meal_records")
    assert isinstance(meals.last_payload, dict)
    assert meals.last_payload["id"] == "event-1"
    assert meals.last_payload["meal_time"] == "dinner"
    assert meals.last_payload["analysis_method"] == "ai_vision"
    assert meals.last_payload["total_calories"] == 292
    assert len(meals.last_payload["foods"]) == 2
    assert meals.last_options == {"on_conflict": "id", "ignore_duplicates": True}

    weights = client.table("weight_records")
    assert isinstance(weights.last_payload, dict)
    assert weights.last_payload["weight"] == 65.5
    assert weights.last_payload["record_date"] == "2026-01-02"
    assert weights.last_options == {"on_conflict": "line_user_id,record_date"}


def test_supabase_learned_food_repository() -> None:
    client = FakeSupabaseClient()
    table = client.table("learned_foods")
    row = {
        "food_text": "chicken salad",
        "calories": 210,
        "protein": 18.5,
        "fat": 11.0,
        "carbs": 8.0,
        "learned_at": "2026-01-01T08:00:00+00:00",
        "usage_count": 2,
        "is_pattern_matched": True,
        "match_confidence": "database",
    }
    table.queue("select", [row])
    table.queue("select", [row])
    repository = SupabaseLearnedFoodRepository(client)

    entries = repository.list_learned_foods("U1")
    entry = repository.get_learned_food("U1", "chicken salad")

    assert list(entries) == ["chicken salad"]
    assert entries["chicken salad"].facts == NutritionFacts(210, 18.5, 11.0, 8.0)
    assert entry is not None
    assert entry.usage_count == 2
    assert entry.is_pattern_matched is True
    assert entry.learned_at == datetime(2026, 1, 1, 8, 0, tzinfo=UTC)
    assert repository.get_learned_food("U1", "unknown") is None

    repository.upsert_learned_food(
        "U1",
        "natto",
        LearnedFoodEntry(
            facts=NutritionFacts(100, 8.3, 5.0, 6.1),
            learned_at=datetime(2026, 1, 3, tzinfo=UTC),
            usage_count=1,
        ),
    )
    assert isinstance(table.last_payload, dict)
    assert table.last_payload["food_text"] == "natto"
    assert table.last_payload["match_confidence"] == "ai_analyzed"
    assert table.last_options == {"on_conflict": "line_user_id,food_text"}


def test_supabase_usage_repository_increments() -> None:
    client = FakeSupabaseClient()
    table = client.table("usage_counters")
    table.queue("select", [{"count": 4}])
    repository = SupabaseUsageRepository(client)

    repository.increment_usage("U1", "ai", date(2026, 1, 2))

    assert isinstance(table.last_payload, dict)
    assert table.last_payload["count"] == 5
    assert table.last_payload["usage_date"] == "2026-01-02"
    assert table.last_options == {"on_conflict": "line_user_id,feature,usage_date"}
    assert repository.get_usage("U1", "ai", date(2026, 1, 3)) == 0
