"""Counseling completion gate."""

from dataclasses import dataclass
from typing import Protocol


class CounselingRepository(Protocol):
    """Persistence interface for counseling results."""

    def get_counseling(self, user_id: str) -> dict[str, object] | None:
        """Return the stored counseling result for a user, if any."""


@dataclass
class OnboardingGate:
    """Checks that a user finished counseling before using meal features."""

    repository: CounselingRepository

    def is_complete(self, user_id: str) -> bool:
        """Return True when answers and a daily calorie target are stored."""
        counseling = self.repository.get_counseling(user_id)
        if not counseling:
            return False
        answers = counseling.get("answers")
        return bool(answers) and bool(_daily_calories(counseling))


def _daily_calories(counseling: dict[str, object]) -> object:
    analysis = counseling.get("ai_analysis")
    if not isinstance(analysis, dict):
        return None
    plan = analysis.get("nutrition_plan")
    if not isinstance(plan, dict):
        return None
    return plan.get("daily_calories")
