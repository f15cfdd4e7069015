"""User-related business logic."""

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol

from line_meal_bot.domain.models import LineProfile


class UserRepository(Protocol):
    """Persistence interface for user data."""

    def save_profile(self, profile: LineProfile, followed_at: datetime) -> None:
        """Create or update the user's display profile."""


@dataclass
class UserService:
    """Application service for user lifecycle actions."""

    repository: UserRepository

    def register_follower(self, profile: LineProfile) -> None:
        """Persist the profile of a user who just added the bot."""
        self.repository.save_profile(profile, followed_at=datetime.now(tz=UTC))
