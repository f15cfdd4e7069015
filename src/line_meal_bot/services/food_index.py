"""Static food-name lookup table."""

import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol

from line_meal_bot.domain.nutrition import NutritionFacts
from line_meal_bot.services.learned_foods import normalize_food_text


@dataclass(frozen=True)
class StaticFood:
    """Reference nutrition for a typical serving of a food."""

    name: str
    facts: NutritionFacts
    aliases: tuple[str, ...] = ()


@dataclass(frozen=True)
class FoodMatch:
    """A static index hit with its match quality."""

    name: str
    facts: NutritionFacts
    quality: str


class FoodIndex(Protocol):
    """Read-only food lookup."""

    def lookup(self, text: str) -> FoodMatch | None:
        """Return the best match for the text, if any."""


DEFAULT_FOODS: tuple[StaticFood, ...] = (
    StaticFood(
        "rice", NutritionFacts(252, 3.8, 0.5, 55.7), ("white rice", "ご飯", "ごはん")
    ),
    StaticFood("brown rice", NutritionFacts(228, 4.2, 1.5, 53.4), ("玄米",)),
    StaticFood(
        "onigiri", NutritionFacts(179, 3.1, 0.4, 39.4), ("rice ball", "おにぎり")
    ),
    StaticFood(
        "miso soup", NutritionFacts(40, 2.6, 1.4, 4.2), ("味噌汁", "みそ汁")
    ),
    StaticFood("natto", NutritionFacts(100, 8.3, 5.0, 6.1), ("納豆",)),
    StaticFood("tofu", NutritionFacts(72, 6.6, 4.2, 1.6), ("豆腐",)),
    StaticFood("boiled egg", NutritionFacts(76, 6.5, 5.2, 0.2), ("ゆで卵", "egg")),
    StaticFood(
        "chicken breast", NutritionFacts(165, 31.0, 3.6, 0.0), ("鶏むね肉",)
    ),
    StaticFood(
        "chicken salad", NutritionFacts(210, 18.5, 11.0, 8.0), ("サラダチキン",)
    ),
    StaticFood(
        "green salad", NutritionFacts(35, 1.5, 0.3, 6.5), ("salad", "サラダ")
    ),
    StaticFood(
        "grilled salmon", NutritionFacts(180, 22.3, 9.7, 0.1), ("焼き鮭", "salmon")
    ),
    StaticFood(
        "karaage", NutritionFacts(290, 16.6, 18.1, 13.3), ("唐揚げ", "fried chicken")
    ),
    StaticFood("ramen", NutritionFacts(480, 19.0, 16.0, 65.0), ("ラーメン",)),
    StaticFood("udon", NutritionFacts(250, 6.5, 1.0, 52.0), ("うどん",)),
    StaticFood("soba", NutritionFacts(300, 12.0, 2.0, 58.0), ("そば", "蕎麦")),
    StaticFood(
        "curry rice", NutritionFacts(650, 15.0, 20.0, 95.0), ("カレーライス", "curry")
    ),
    StaticFood(
        "gyudon", NutritionFacts(700, 22.0, 24.0, 95.0), ("牛丼", "beef bowl")
    ),
    StaticFood("toast", NutritionFacts(158, 5.6, 2.5, 28.0), ("トースト", "bread")),
    StaticFood("banana", NutritionFacts(86, 1.1, 0.2, 22.5), ("バナナ",)),
    StaticFood("apple", NutritionFacts(95, 0.5, 0.3, 25.0), ("りんご",)),
    StaticFood("yogurt", NutritionFacts(62, 3.6, 3.0, 4.9), ("ヨーグルト",)),
    StaticFood("milk", NutritionFacts(134, 6.6, 7.6, 9.6), ("牛乳",)),
)


@dataclass
class StaticFoodIndex(FoodIndex):
    """In-memory index built once from a food table.

    Quality is `high` when the text equals a name or alias and `medium` when
    exactly one food is mentioned inside a longer text. Latin names only
    match on word boundaries; Japanese names match anywhere. Text that
    mentions several foods is left to other resolvers.
    """

    _by_name: dict[str, StaticFood]
    _patterns: list[tuple[re.Pattern[str], StaticFood]]

    def __init__(self, foods: Iterable[StaticFood] = DEFAULT_FOODS) -> None:
        self._by_name = {}
        self._patterns = []
        for food in foods:
            for name in (food.name, *food.aliases):
                key = normalize_food_text(name)
                if not key or key in self._by_name:
                    continue
                self._by_name[key] = food
                self._patterns.append((_name_pattern(name), food))

    def lookup(self, text: str) -> FoodMatch | None:
        """Return the best match for the text, if any."""
        query = normalize_food_text(text)
        if not query:
            return None
        exact = self._by_name.get(query)
        if exact:
            return _match(exact, "high")
        mentioned = _outermost(self._mentions(text.lower()))
        foods = {food.name: food for _, _, food in mentioned}
        if len(foods) != 1:
            return None
        return _match(next(iter(foods.values())), "medium")

    def _mentions(self, text: str) -> list[tuple[int, int, StaticFood]]:
        spans = []
        for pattern, food in self._patterns:
            found = pattern.search(text)
            if found:
                spans.append((found.start(), found.end(), food))
        return spans


def _name_pattern(name: str) -> re.Pattern[str]:
    words = name.lower().split()
    if not name.isascii():
        return re.compile(re.escape("".join(words)))
    body = r"\s*".join(re.escape(word) for word in words)
    return re.compile(rf"(?<![a-z0-9]){body}(?![a-z0-9])")


def _outermost(
    spans: list[tuple[int, int, StaticFood]],
) -> list[tuple[int, int, StaticFood]]:
    """Drop mentions that sit inside a longer one, like "salad" in "chicken salad"."""
    return [
        span
        for span in spans
        if not any(
            other[0] <= span[0]
            and span[1] <= other[1]
            and (other[1] - other[0]) > (span[1] - span[0])
            for other in spans
        )
    ]


def _match(food: StaticFood, quality: str) -> FoodMatch:
    return FoodMatch(name=food.name, facts=food.facts, quality=quality)
