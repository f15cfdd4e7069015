"""Tests for user service."""

from line_meal_bot.domain.models import LineProfile
from line_meal_bot.services.users import UserService
from tests.conftest import InMemoryUserRepository


def test_register_follower_stores_profile() -> None:
    repository = InMemoryUserRepository()
    service = UserService(repository)

    service.register_follower(LineProfile(user_id="U1", display_name="Hanako"))

    assert repository.profiles["U1"].display_name == "Hanako"


def test_register_follower_overwrites_existing_profile() -> None:
    repository = InMemoryUserRepository()
    service = UserService(repository)

    service.register_follower(LineProfile(user_id="U1", display_name="Old"))
    service.register_follower(
        LineProfile(user_id="U1", display_name="New", picture_url="https://p")
    )

    assert repository.profiles["U1"] == LineProfile(
        user_id="U1", display_name="New", picture_url="https://p"
    )
