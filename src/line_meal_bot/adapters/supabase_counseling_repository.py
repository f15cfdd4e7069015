"""Supabase repository for counseling results."""

from dataclasses import dataclass

from supabase import Client

from line_meal_bot.services.onboarding import CounselingRepository


@dataclass
class SupabaseCounselingRepository(CounselingRepository):
    """Supabase implementation for counseling results."""

    client: Client

    def get_counseling(self, user_id: str) -> dict[str, object] | None:
        """Return the stored counseling result for a user."""
        response = (
            self.client.table("counseling_results")
            .select("answers, ai_analysis")
            .eq("line_user_id", user_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return response.data[0]
