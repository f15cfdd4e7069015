"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from line_meal_bot.adapters.line_client import HttpxLineClient, LineClient
from line_meal_bot.adapters.openai_analysis_client import OpenAIAnalysisClient
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
from line_meal_bot.config import Settings
from line_meal_bot.services.analysis import MealAnalysisService
from line_meal_bot.services.dispatcher import EventDispatcher
from line_meal_bot.services.food_index import FoodIndex, StaticFoodIndex
from line_meal_bot.services.guard import UserProcessingGuard
from line_meal_bot.services.learned_foods import LearnedFoodCache, LearnedFoodRepository
from line_meal_bot.services.onboarding import CounselingRepository, OnboardingGate
from line_meal_bot.services.quota import QuotaLedger, UsageRepository
from line_meal_bot.services.records import DailyRecordRepository, DailyRecordService
from line_meal_bot.services.resolver import MealResolver, build_text_tiers
from line_meal_bot.services.users import UserRepository, UserService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    line_client: LineClient
    processing_guard: UserProcessingGuard
    onboarding_gate: OnboardingGate
    quota_ledger: QuotaLedger
    learned_food_cache: LearnedFoodCache
    meal_resolver: MealResolver
    record_service: DailyRecordService
    user_service: UserService
    event_dispatcher: EventDispatcher
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    line_client = HttpxLineClient.create(
        channel_secret=resolved_settings.line_channel_secret,
        access_token=resolved_settings.line_channel_access_token,
    )
    analysis_service = MealAnalysisService(
        client=OpenAIAnalysisClient.create(resolved_settings.openai_api_key),
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
    )

    async def close_resources() -> None:
        await line_client.close()

    return assemble_container(
        settings=resolved_settings,
        line_client=line_client,
        analysis_service=analysis_service,
        user_repository=SupabaseUserRepository(supabase_client),
        counseling_repository=SupabaseCounselingRepository(supabase_client),
        record_repository=SupabaseDailyRecordRepository(supabase_client),
        learned_food_repository=SupabaseLearnedFoodRepository(supabase_client),
        usage_repository=SupabaseUsageRepository(supabase_client),
        close_resources=close_resources,
    )


def assemble_container(  # noqa: PLR0913
    *,
    settings: Settings,
    line_client: LineClient,
    analysis_service: MealAnalysisService,
    user_repository: UserRepository,
    counseling_repository: CounselingRepository,
    record_repository: DailyRecordRepository,
    learned_food_repository: LearnedFoodRepository,
    usage_repository: UsageRepository,
    close_resources: Callable[[], Awaitable[None]],
    food_index: FoodIndex | None = None,
) -> AppContainer:
    """Wire services around the given adapters."""
    guard = UserProcessingGuard()
    onboarding_gate = OnboardingGate(counseling_repository)
    quota_ledger = QuotaLedger(
        repository=usage_repository,
        limits=settings.quota_limits(),
        timezone=settings.timezone,
    )
    learned_food_cache = LearnedFoodCache(learned_food_repository)
    meal_resolver = MealResolver(
        text_tiers=build_text_tiers(
            learned_food_cache, food_index or StaticFoodIndex(), analysis_service
        ),
        analysis_service=analysis_service,
        learned_food_cache=learned_food_cache,
    )
    record_service = DailyRecordService(record_repository, timezone=settings.timezone)
    user_service = UserService(user_repository)
    dispatcher = EventDispatcher(
        line_client=line_client,
        guard=guard,
        onboarding_gate=onboarding_gate,
        quota_ledger=quota_ledger,
        meal_resolver=meal_resolver,
        record_service=record_service,
        user_service=user_service,
        counseling_url=settings.counseling_url,
    )
    return AppContainer(
        settings=settings,
        line_client=line_client,
        processing_guard=guard,
        onboarding_gate=onboarding_gate,
        quota_ledger=quota_ledger,
        learned_food_cache=learned_food_cache,
        meal_resolver=meal_resolver,
        record_service=record_service,
        user_service=user_service,
        event_dispatcher=dispatcher,
        close_resources=close_resources,
    )
