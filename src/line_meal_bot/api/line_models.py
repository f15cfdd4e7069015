"""Pydantic models for LINE webhook payloads."""

from pydantic import BaseModel, ConfigDict, Field


class LineSource(BaseModel):
    """Event source payload."""

    model_config = ConfigDict(populate_by_name=True)

    type: str
    user_id: str | None = Field(default=None, alias="userId")
    group_id: str | None = Field(default=None, alias="groupId")
    room_id: str | None = Field(default=None, alias="roomId")


class LineMessage(BaseModel):
    """Message payload of a message event."""

    id: str
    type: str
    text: str | None = None


class LineEvent(BaseModel):
    """Webhook event payload."""

    model_config = ConfigDict(populate_by_name=True)

    type: str
    timestamp: int | None = None
    source: LineSource | None = None
    reply_token: str | None = Field(default=None, alias="replyToken")
    webhook_event_id: str | None = Field(default=None, alias="webhookEventId")
    message: LineMessage | None = None


class LineWebhookPayload(BaseModel):
    """Webhook request body."""

    destination: str | None = None
    events: list[LineEvent] = Field(default_factory=list)
