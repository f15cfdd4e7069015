"""Daily usage quota ledger."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from typing import Protocol
from zoneinfo import ZoneInfo

from line_meal_bot.domain.models import QuotaDecision


class UsageRepository(Protocol):
    """Persistence interface for daily usage counters."""

    def get_usage(self, user_id: str, feature: str, usage_date: date) -> int:
        """Return the recorded count for the user, feature and date."""

    def increment_usage(self, user_id: str, feature: str, usage_date: date) -> None:
        """Add one to the counter for the user, feature and date."""


@dataclass
class QuotaLedger:
    """Tracks per-user daily usage against configured ceilings.

    Counters are keyed by calendar date in the service time zone, so a new
    day starts from a fresh key. `check` never writes; callers `record`
    only after a successful resolution.
    """

    repository: UsageRepository
    limits: dict[str, int]
    timezone: str = "UTC"
    clock: Callable[[], datetime] = field(default=lambda: datetime.now(tz=UTC))

    def today(self) -> date:
        """Return the current date in the service time zone."""
        return self.clock().astimezone(ZoneInfo(self.timezone)).date()

    def check(
        self, user_id: str, feature: str, on: date | None = None
    ) -> QuotaDecision:
        """Return whether another use of the feature is allowed today."""
        limit = self.limits[feature]
        used = self.repository.get_usage(user_id, feature, on or self.today())
        return QuotaDecision(allowed=used < limit, limit=limit, used=used)

    def record(self, user_id: str, feature: str, on: date | None = None) -> None:
        """Count one use of the feature."""
        self.repository.increment_usage(user_id, feature, on or self.today())
