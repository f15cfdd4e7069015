"""Supabase-backed user repository."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from line_meal_bot.domain.models import LineProfile
from line_meal_bot.services.users import UserRepository


@dataclass
class SupabaseUserRepository(UserRepository):
    """Supabase implementation for user persistence."""

    client: Client

    def save_profile(self, profile: LineProfile, followed_at: datetime) -> None:
        """Upsert the user's display profile keyed by LINE user id."""
        self.client.table("line_users").upsert(
            {
                "line_user_id": profile.user_id,
                "display_name": profile.display_name,
                "picture_url": profile.picture_url or "",
                "followed_at": followed_at.isoformat(),
                "updated_at": datetime.now(tz=UTC).isoformat(),
            },
            on_conflict="line_user_id",
        ).execute()
