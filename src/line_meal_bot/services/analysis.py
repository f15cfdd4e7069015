"""Meal analysis service using LLMs."""

import base64
from dataclasses import dataclass
from typing import Protocol

from line_meal_bot.domain.analysis import MealAnalysis

_NUMBER_OR_NULL = {"anyOf": [{"type": "integer", "minimum": 0}, {"type": "null"}]}

MEAL_ANALYSIS_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "foods": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "calories": {"type": "integer", "minimum": 0},
                    "protein": {"type": "number", "minimum": 0.0},
                    "fat": {"type": "number", "minimum": 0.0},
                    "carbs": {"type": "number", "minimum": 0.0},
                    "weight": _NUMBER_OR_NULL,
                    "confidence": {"type": "number", "minimum": 0.0, "maximum": 1.0},
                },
                "required": [
                    "name",
                    "calories",
                    "protein",
                    "fat",
                    "carbs",
                    "weight",
                    "confidence",
                ],
                "additionalProperties": False,
            },
        },
        "meal_time": {
            "anyOf": [
                {"type": "string", "enum": ["breakfast", "lunch", "dinner", "snack"]},
                {"type": "null"},
            ]
        },
        "description": {"type": "string"},
    },
    "required": ["foods", "meal_time", "description"],
    "additionalProperties": False,
}

_GUIDELINES = (
    "Use standard food composition tables. "
    "Report calories as whole kcal and protein, fat and carbs in grams "
    "with one decimal place. Estimate the weight of each food in grams, "
    "a confidence between 0 and 1, the meal time and a short description."
)

IMAGE_PROMPT = (
    "You are a nutrition analyst. Identify every food in the photo, "
    "estimate realistic portions from what is visible and return the "
    "nutrition of each food. " + _GUIDELINES
)

TEXT_PROMPT_TEMPLATE = (
    "You are a nutrition analyst. The user described a meal as: "
    '"{text}". Assume typical portions and return the nutrition of each '
    "food. " + _GUIDELINES
)


class AnalysisClient(Protocol):
    """Interface for structured LLM meal analysis."""

    async def analyze(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        prompt: str,
        schema: dict[str, object],
        image_data_url: str | None = None,
    ) -> dict[str, object]:
        """Return structured analysis data."""


@dataclass
class MealAnalysisService:
    """Service that prepares analysis prompts and validates results."""

    client: AnalysisClient
    model: str
    reasoning_effort: str | None
    store: bool

    async def analyze_image(self, image_bytes: bytes) -> MealAnalysis:
        """Analyze a meal photo via the configured client."""
        raw = await self.client.analyze(
            model=self.model,
            reasoning_effort=self.reasoning_effort,
            store=self.store,
            prompt=IMAGE_PROMPT,
            schema=MEAL_ANALYSIS_SCHEMA,
            image_data_url=_to_data_url(image_bytes),
        )
        return MealAnalysis.model_validate(raw)

    async def analyze_text(self, text: str) -> MealAnalysis:
        """Analyze a meal description via the configured client."""
        raw = await self.client.analyze(
            model=self.model,
            reasoning_effort=self.reasoning_effort,
            store=self.store,
            prompt=TEXT_PROMPT_TEMPLATE.format(text=text),
            schema=MEAL_ANALYSIS_SCHEMA,
        )
        return MealAnalysis.model_validate(raw)


def _to_data_url(image_bytes: bytes) -> str:
    """Convert bytes to a base64 data URL for image input."""
    mime_type = _detect_mime_type(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def _detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"
