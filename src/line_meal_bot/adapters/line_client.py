"""LINE Messaging API client adapter."""

import base64
import hashlib
import hmac
import logging
from dataclasses import dataclass
from typing import Protocol

import httpx

from line_meal_bot.domain.models import LineProfile

_logger = logging.getLogger(__name__)

API_BASE_URL = "https://api.line.me/v2/bot"
DATA_API_BASE_URL = "https://api-data.line.me/v2/bot"


class LineClient(Protocol):
    """Interface for LINE Messaging API interactions."""

    def verify_signature(self, body: bytes, signature: str | None) -> bool:
        """Return True when the signature matches the raw request body."""

    async def get_profile(self, user_id: str) -> LineProfile | None:
        """Return the user's display profile, or None if unavailable."""

    async def get_message_content(self, message_id: str) -> bytes | None:
        """Return the binary content of a message, or None if unavailable."""

    async def reply_message(
        self, reply_token: str, messages: list[dict[str, object]]
    ) -> None:
        """Reply to an event with up to five messages."""


@dataclass
class HttpxLineClient:
    """LINE client implemented with httpx."""

    channel_secret: str
    access_token: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, channel_secret: str, access_token: str) -> "HttpxLineClient":
        """Create a LINE client with a managed httpx session."""
        return cls(
            channel_secret=channel_secret,
            access_token=access_token,
            http_client=httpx.AsyncClient(),
        )

    def verify_signature(self, body: bytes, signature: str | None) -> bool:
        """Check the base64 HMAC-SHA256 of the body against the header."""
        if not signature:
            return False
        digest = hmac.new(
            self.channel_secret.encode("utf-8"), body, hashlib.sha256
        ).digest()
        expected = base64.b64encode(digest).decode("utf-8")
        return hmac.compare_digest(expected, signature)

    async def get_profile(self, user_id: str) -> LineProfile | None:
        """Fetch the user's profile via the profile API."""
        try:
            response = await self.http_client.get(
                f"{API_BASE_URL}/profile/{user_id}",
                headers=self._headers(),
                timeout=10,
            )
            response.raise_for_status()
        except httpx.HTTPError:
            _logger.exception(
                "Failed to fetch LINE profile", extra={"user_id": user_id}
            )
            return None
        payload = response.json()
        return LineProfile(
            user_id=str(payload.get("userId") or user_id),
            display_name=str(payload.get("displayName") or "LINE User"),
            picture_url=payload.get("pictureUrl"),
        )

    async def get_message_content(self, message_id: str) -> bytes | None:
        """Download message content such as an image."""
        try:
            response = await self.http_client.get(
                f"{DATA_API_BASE_URL}/message/{message_id}/content",
                headers=self._headers(),
                timeout=20,
            )
            response.raise_for_status()
        except httpx.HTTPError:
            _logger.exception(
                "Failed to fetch LINE message content",
                extra={"message_id": message_id},
            )
            return None
        return response.content

    async def reply_message(
        self, reply_token: str, messages: list[dict[str, object]]
    ) -> None:
        """Send a reply using the reply API."""
        response = await self.http_client.post(
            f"{API_BASE_URL}/message/reply",
            headers=self._headers(),
            json={"replyToken": reply_token, "messages": messages},
            timeout=10,
        )
        response.raise_for_status()

    async def close(self) -> None:
        """Close the underlying HTTP client session."""
        await self.http_client.aclose()

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.access_token}"}
