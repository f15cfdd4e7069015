"""Shared test fixtures."""

import base64
import hashlib
import hmac
from dataclasses import dataclass, field
from datetime import date, datetime

import pytest

from line_meal_bot.adapters.line_client import LineClient
from line_meal_bot.config import Settings
from line_meal_bot.containers import AppContainer, assemble_container
from line_meal_bot.domain.models import LearnedFoodEntry, LineProfile, MealRecord
from line_meal_bot.services.analysis import AnalysisClient, MealAnalysisService
from line_meal_bot.services.learned_foods import LearnedFoodRepository
from line_meal_bot.services.onboarding import CounselingRepository
from line_meal_bot.services.quota import UsageRepository
from line_meal_bot.services.records import DailyRecordRepository
from line_meal_bot.services.users import UserRepository

CHANNEL_SECRET = "test-channel-secret"


def sign(body: bytes, secret: str = CHANNEL_SECRET) -> str:
    """Compute the LINE signature header for a body."""
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("utf-8")


def completed_counseling() -> dict[str, object]:
    return {
        "answers": {"name": "Test", "goal": "weight_loss"},
        "ai_analysis": {"nutrition_plan": {"daily_calories": 2000}},
    }


def analysis_payload(*foods: dict[str, object]) -> dict[str, object]:
    return {
        "foods": list(foods),
        "meal_time": "lunch",
        "description": "Analyzed meal",
    }


def food_payload(
    name: str, calories: int = 500, **overrides: object
) -> dict[str, object]:
    payload: dict[str, object] = {
        "name": name,
        "calories": calories,
        "protein": 20.0,
        "fat": 15.5,
        "carbs": 60.2,
        "weight": 250,
        "confidence": 0.8,
    }
    payload.update(overrides)
    return payload


@dataclass
class InMemoryUserRepository(UserRepository):
    """In-memory user repository for tests."""

    profiles: dict[str, LineProfile] = field(default_factory=dict)

    def save_profile(self, profile: LineProfile, followed_at: datetime) -> None:
        self.profiles[profile.user_id] = profile


@dataclass
class InMemoryCounselingRepository(CounselingRepository):
    """In-memory counseling repository for tests."""

    results: dict[str, dict[str, object]] = field(default_factory=dict)

    def get_counseling(self, user_id: str) -> dict[str, object] | None:
        return self.results.get(user_id)


@dataclass
class InMemoryDailyRecordRepository(DailyRecordRepository):
    """In-memory daily record repository for tests."""

    meals: dict[str, MealRecord] = field(default_factory=dict)
    weights: dict[tuple[str, date], float] = field(default_factory=dict)

    def append_meal_record(self, record: MealRecord) -> None:
        self.meals.setdefault(record.id, record)

    def set_weight_record(
        self, user_id: str, record_date: date, weight: float, recorded_at: datetime
    ) -> None:
        self.weights[(user_id, record_date)] = weight


@dataclass
class InMemoryLearnedFoodRepository(LearnedFoodRepository):
    """In-memory learned food repository for tests."""

    entries: dict[str, dict[str, LearnedFoodEntry]] = field(default_factory=dict)

    def list_learned_foods(self, user_id: str) -> dict[str, LearnedFoodEntry]:
        return dict(self.entries.get(user_id, {}))

    def get_learned_food(self, user_id: str, food_text: str) -> LearnedFoodEntry | None:
        return self.entries.get(user_id, {}).get(food_text)

    def upsert_learned_food(
        self, user_id: str, food_text: str, entry: LearnedFoodEntry
    ) -> None:
        self.entries.setdefault(user_id, {})[food_text] = entry


@dataclass
class InMemoryUsageRepository(UsageRepository):
    """In-memory usage repository for tests."""

    counts: dict[tuple[str, str, date], int] = field(default_factory=dict)

    def get_usage(self, user_id: str, feature: str, usage_date: date) -> int:
        return self.counts.get((user_id, feature, usage_date), 0)

    def increment_usage(self, user_id: str, feature: str, usage_date: date) -> None:
        key = (user_id, feature, usage_date)
        self.counts[key] = self.counts.get(key, 0) + 1


@dataclass
class FakeLineClient(LineClient):
    """Fake LINE client that records replies."""

    channel_secret: str = CHANNEL_SECRET
    replies: list[tuple[str, list[dict[str, object]]]] = field(default_factory=list)
    profile: LineProfile | None = None
    content: bytes | None = b"\xff\xd8\xff-fake-jpeg"
    fail_replies: bool = False

    def verify_signature(self, body: bytes, signature: str | None) -> bool:
        return signature == sign(body, self.channel_secret)

    async def get_profile(self, user_id: str) -> LineProfile | None:
        return self.profile

    async def get_message_content(self, message_id: str) -> bytes | None:
        return self.content

    async def reply_message(
        self, reply_token: str, messages: list[dict[str, object]]
    ) -> None:
        if self.fail_replies:
            raise RuntimeError("LINE reply failed")
        self.replies.append((reply_token, messages))

    def reply_texts(self) -> list[str]:
        return [
            str(message.get("text") or message.get("altText"))
            for _, messages in self.replies
            for message in messages
        ]


@dataclass
class FakeAnalysisClient(AnalysisClient):
    """Fake analysis client returning a fixed payload or raising."""

    payload: dict[str, object] = field(
        default_factory=lambda: analysis_payload(food_payload("katsu curry", 850))
    )
    error: Exception | None = None
    calls: list[dict[str, object]] = field(default_factory=list)

    async def analyze(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        prompt: str,
        schema: dict[str, object],
        image_data_url: str | None = None,
    ) -> dict[str, object]:
        self.calls.append({"prompt": prompt, "image_data_url": image_data_url})
        if self.error is not None:
            raise self.error
        return self.payload


@pytest.fixture
def settings() -> Settings:
    return Settings(
        line_channel_secret=CHANNEL_SECRET,
        line_channel_access_token="access-token",
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        openai_api_key="openai-key",
        ai_daily_limit=3,
        app_url="https://app.example.com",
    )


@pytest.fixture
def line_client() -> FakeLineClient:
    return FakeLineClient()


@pytest.fixture
def analysis_client() -> FakeAnalysisClient:
    return FakeAnalysisClient()


@pytest.fixture
def analysis_service(analysis_client: FakeAnalysisClient) -> MealAnalysisService:
    return MealAnalysisService(
        client=analysis_client,
        model="gpt-5.2",
        reasoning_effort=None,
        store=False,
    )


@pytest.fixture
def user_repository() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def counseling_repository() -> InMemoryCounselingRepository:
    return InMemoryCounselingRepository()


@pytest.fixture
def record_repository() -> InMemoryDailyRecordRepository:
    return InMemoryDailyRecordRepository()


@pytest.fixture
def learned_food_repository() -> InMemoryLearnedFoodRepository:
    return InMemoryLearnedFoodRepository()


@pytest.fixture
def usage_repository() -> InMemoryUsageRepository:
    return InMemoryUsageRepository()


@pytest.fixture
def container(  # noqa: PLR0913
    settings: Settings,
    line_client: FakeLineClient,
    analysis_service: MealAnalysisService,
    user_repository: InMemoryUserRepository,
    counseling_repository: InMemoryCounselingRepository,
    record_repository: InMemoryDailyRecordRepository,
    learned_food_repository: InMemoryLearnedFoodRepository,
    usage_repository: InMemoryUsageRepository,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return assemble_container(
        settings=settings,
        line_client=line_client,
        analysis_service=analysis_service,
        user_repository=user_repository,
        counseling_repository=counseling_repository,
        record_repository=record_repository,
        learned_food_repository=learned_food_repository,
        usage_repository=usage_repository,
        close_resources=close_resources,
    )
