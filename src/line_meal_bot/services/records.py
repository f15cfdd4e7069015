"""Daily meal and weight records."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from typing import Protocol
from uuid import uuid4
from zoneinfo import ZoneInfo

from line_meal_bot.domain.models import MealRecord
from line_meal_bot.domain.nutrition import ResolutionResult


class DailyRecordRepository(Protocol):
    """Persistence interface for daily records."""

    def append_meal_record(self, record: MealRecord) -> None:
        """Add a meal to the user's record for the record date."""

    def set_weight_record(
        self, user_id: str, record_date: date, weight: float, recorded_at: datetime
    ) -> None:
        """Store the user's weight for the record date."""


@dataclass
class DailyRecordService:
    """Stores meals and weights against the service-local date."""

    repository: DailyRecordRepository
    timezone: str = "UTC"
    clock: Callable[[], datetime] = field(default=lambda: datetime.now(tz=UTC))

    def save_meal(
        self, user_id: str, result: ResolutionResult, record_id: str | None = None
    ) -> MealRecord:
        """Persist a resolved meal; a known record id makes redelivery a no-op."""
        now = self.clock()
        record = MealRecord(
            id=record_id or uuid4().hex,
            user_id=user_id,
            record_date=self._local_date(now),
            recorded_at=now,
            result=result,
        )
        self.repository.append_meal_record(record)
        return record

    def save_weight(self, user_id: str, weight: float) -> date:
        """Persist today's weight and return the record date."""
        now = self.clock()
        record_date = self._local_date(now)
        self.repository.set_weight_record(user_id, record_date, weight, now)
        return record_date

    def _local_date(self, moment: datetime) -> date:
        return moment.astimezone(ZoneInfo(self.timezone)).date()
