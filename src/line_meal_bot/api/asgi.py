"""ASGI entrypoint for the LINE meal bot."""

from line_meal_bot.api.app import create_app
from line_meal_bot.containers import build_container

app = create_app(build_container())
