"""LINE webhook event dispatching."""

import logging
import re
from dataclasses import dataclass

from line_meal_bot.adapters.line_client import LineClient
from line_meal_bot.api.line_models import LineEvent
from line_meal_bot.domain.nutrition import (
    ImageInput,
    MealInput,
    ResolutionMethod,
    TextInput,
)
from line_meal_bot.services import replies
from line_meal_bot.services.guard import UserProcessingGuard
from line_meal_bot.services.onboarding import OnboardingGate
from line_meal_bot.services.quota import QuotaLedger
from line_meal_bot.services.records import DailyRecordService
from line_meal_bot.services.resolver import MealResolver
from line_meal_bot.services.users import UserService

_logger = logging.getLogger(__name__)

WEIGHT_PATTERN = re.compile(r"^(\d+(?:\.\d+)?)(kg|キロ)?$")
AI_FEATURE = "ai"


def parse_weight(text: str) -> float | None:
    """Return the weight in a standalone weight message, if it is one."""
    match = WEIGHT_PATTERN.match(text.strip())
    if match is None:
        return None
    return float(match.group(1))


@dataclass
class EventDispatcher:
    """Routes each webhook event through the gates and the meal pipeline.

    Events are handled one after another. A user with an event already in
    flight has the new event dropped, and a failing event never stops the
    rest of the batch.
    """

    line_client: LineClient
    guard: UserProcessingGuard
    onboarding_gate: OnboardingGate
    quota_ledger: QuotaLedger
    meal_resolver: MealResolver
    record_service: DailyRecordService
    user_service: UserService
    counseling_url: str

    def verify(self, body: bytes, signature: str | None) -> bool:
        """Return True when the batch signature is valid."""
        return self.line_client.verify_signature(body, signature)

    async def handle_events(self, events: list[LineEvent]) -> None:
        """Handle every event in delivery order."""
        _logger.info("Received %s webhook events", len(events))
        for event in events:
            user_id = event.source.user_id if event.source else None
            if not user_id:
                _logger.warning("Skipping %s event without a user id", event.type)
                continue
            with self.guard.hold(user_id) as acquired:
                if not acquired:
                    _logger.info(
                        "Skipping %s event while user is busy",
                        event.type,
                        extra={"user_id": user_id},
                    )
                    continue
                try:
                    await self._handle_event(event, user_id)
                except Exception:
                    _logger.exception(
                        "Failed to handle %s event",
                        event.type,
                        extra={"user_id": user_id},
                    )
                    await self._apologize(event)

    async def _handle_event(self, event: LineEvent, user_id: str) -> None:
        if event.type == "message" and event.message is not None:
            if event.message.type == "image":
                await self._handle_image(event, user_id)
            elif event.message.type == "text":
                await self._handle_text(event, user_id, event.message.text or "")
            else:
                _logger.info("Ignoring %s message", event.message.type)
        elif event.type == "follow":
            await self._handle_follow(event, user_id)
        elif event.type == "unfollow":
            _logger.info("User unfollowed", extra={"user_id": user_id})
        else:
            _logger.info("Ignoring %s event", event.type)

    async def _handle_image(self, event: LineEvent, user_id: str) -> None:
        if not await self._passes_gates(event, user_id, "photo meal logging"):
            return
        content = await self.line_client.get_message_content(event.message.id)
        if not content:
            await self._reply(
                event, replies.text_message(replies.IMAGE_FETCH_FAILED_TEXT)
            )
            return
        await self._record_meal(event, user_id, ImageInput(content))

    async def _handle_text(self, event: LineEvent, user_id: str, text: str) -> None:
        weight = parse_weight(text)
        if weight is not None:
            self.record_service.save_weight(user_id, weight)
            await self._reply(event, replies.weight_recorded(weight))
            return
        if len(text) > 1:
            if not await self._passes_gates(event, user_id, "text meal logging"):
                return
            await self._record_meal(event, user_id, TextInput(text))
            return
        await self._reply(event, replies.text_message(replies.HELP_TEXT))

    async def _handle_follow(self, event: LineEvent, user_id: str) -> None:
        profile = await self.line_client.get_profile(user_id)
        if profile is not None:
            self.user_service.register_follower(profile)
        await self._reply(event, replies.welcome_message(self.counseling_url))

    async def _passes_gates(
        self, event: LineEvent, user_id: str, action_name: str
    ) -> bool:
        if not self.onboarding_gate.is_complete(user_id):
            await self._reply(
                event, replies.counseling_prompt(action_name, self.counseling_url)
            )
            return False
        decision = self.quota_ledger.check(user_id, AI_FEATURE)
        if not decision.allowed:
            await self._reply(
                event, replies.quota_exceeded("meal analysis", decision.limit)
            )
            return False
        return True

    async def _record_meal(
        self, event: LineEvent, user_id: str, meal_input: MealInput
    ) -> None:
        result = await self.meal_resolver.resolve(user_id, meal_input)
        self.record_service.save_meal(
            user_id, result, record_id=event.webhook_event_id
        )
        if result.method is not ResolutionMethod.FALLBACK:
            self.quota_ledger.record(user_id, AI_FEATURE)
        await self._reply(event, replies.meal_recorded(result))
        _logger.info(
            "Recorded meal via %s", result.method.value, extra={"user_id": user_id}
        )

    async def _reply(self, event: LineEvent, message: dict[str, object]) -> None:
        if not event.reply_token:
            _logger.warning("Event has no reply token; reply dropped")
            return
        await self.line_client.reply_message(event.reply_token, [message])

    async def _apologize(self, event: LineEvent) -> None:
        try:
            await self._reply(event, replies.text_message(replies.APOLOGY_TEXT))
        except Exception:
            _logger.exception("Failed to send apology reply")
