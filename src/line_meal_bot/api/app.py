"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Header, HTTPException, Request, status
from pydantic import ValidationError

from line_meal_bot.api.line_models import LineWebhookPayload
from line_meal_bot.app_logging import configure_logging
from line_meal_bot.containers import AppContainer


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/line/webhook")
    async def line_webhook(
        request: Request,
        x_line_signature: str | None = Header(default=None),
    ) -> dict[str, str]:
        """Handle a LINE webhook batch."""
        state_container: AppContainer = request.app.state.container
        body = await request.body()
        if not state_container.event_dispatcher.verify(body, x_line_signature):
            logger.warning("Rejected webhook batch with an invalid signature")
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
        try:
            payload = LineWebhookPayload.model_validate_json(body)
        except ValidationError as exc:
            logger.exception("Failed to parse webhook payload")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
            ) from exc
        await state_container.event_dispatcher.handle_events(payload.events)
        return {"status": "ok"}

    return app
