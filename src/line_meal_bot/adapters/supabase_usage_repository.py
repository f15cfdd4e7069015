"""Supabase repository for daily usage counters."""

from dataclasses import dataclass
from datetime import UTC, date, datetime

from supabase import Client

from line_meal_bot.services.quota import UsageRepository


@dataclass
class SupabaseUsageRepository(UsageRepository):
    """Supabase implementation for usage counters."""

    client: Client

    def get_usage(self, user_id: str, feature: str, usage_date: date) -> int:
        """Return the recorded count for the user, feature and date."""
        response = (
            self.client.table("usage_counters")
            .select("count")
            .eq("line_user_id", user_id)
            .eq("feature", feature)
            .eq("usage_date", usage_date.isoformat())
            .limit(1)
            .execute()
        )
        if not response.data:
            return 0
        return int(response.data[0].get("count") or 0)

    def increment_usage(self, user_id: str, feature: str, usage_date: date) -> None:
        """Read the counter and write it back incremented by one."""
        current = self.get_usage(user_id, feature, usage_date)
        now = datetime.now(tz=UTC).isoformat()
        self.client.table("usage_counters").upsert(
            {
                "line_user_id": user_id,
                "feature": feature,
                "usage_date": usage_date.isoformat(),
                "count": current + 1,
                "last_used_at": now,
            },
            on_conflict="line_user_id,feature,usage_date",
        ).execute()
