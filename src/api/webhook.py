"""
FastAPI application exposing the WhatsApp webhook.

GET  /api/webhook  verification handshake (hub.mode / hub.verify_token / hub.challenge)
POST /api/webhook  inbound events, one conversation step per customer message
GET  /health       liveness probe

Meta retries deliveries that do not get a 2xx, so every POST is answered
with 200 EVENT_RECEIVED, including payloads the bot cannot use.
"""

import logging
import secrets
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import FastAPI, Query, Request
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError

from src.config import AppConfig
from src.conversation.flow import BookingConversation, ConversationContext
from src.logging_context import set_sender_id
from src.messaging.dispatcher import MessageDispatcher
from src.messaging.whatsapp import WhatsAppTransport
from src.schemas.webhook_schema import WhatsAppPayload
from src.store.kv_store import build_store
from src.store.session_store import SessionStore
from src.tools.locations import PricingCatalog

logger = logging.getLogger(__name__)

EVENT_RECEIVED = "EVENT_RECEIVED"


def build_conversation(config: AppConfig) -> BookingConversation:
    """Wire store, transport and catalog into a conversation engine."""
    store = SessionStore(
        build_store(config.store),
        session_ttl_seconds=config.store.session_ttl_seconds,
        booking_prefix=config.store.booking_key_prefix,
    )
    dispatcher = MessageDispatcher(WhatsAppTransport(config.whatsapp))
    context = ConversationContext(
        store=store,
        dispatcher=dispatcher,
        driver=config.driver,
        conversation=config.conversation,
        catalog=PricingCatalog(),
    )
    return BookingConversation(context)


def verify_subscription(mode: Optional[str], token: Optional[str], expected: str) -> bool:
    if mode != "subscribe" or not token or not expected:
        return False
    return secrets.compare_digest(token, expected)


def create_app(conversation: BookingConversation, verify_token: str, title: str = "ride-booking-bot") -> FastAPI:
    """Build the FastAPI app around an already-wired conversation engine."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await conversation.ctx.dispatcher.close()
        await conversation.ctx.store.close()

    app = FastAPI(title=title, lifespan=lifespan)
    app.state.conversation = conversation

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/api/webhook", response_class=PlainTextResponse)
    async def verify_webhook(
        hub_mode: Optional[str] = Query(None, alias="hub.mode"),
        hub_verify_token: Optional[str] = Query(None, alias="hub.verify_token"),
        hub_challenge: Optional[str] = Query(None, alias="hub.challenge"),
    ) -> PlainTextResponse:
        if verify_subscription(hub_mode, hub_verify_token, verify_token):
            logger.info("Webhook verified")
            return PlainTextResponse(content=hub_challenge or "", status_code=200)
        logger.warning("Webhook verification failed (mode=%r)", hub_mode)
        return PlainTextResponse(content="Forbidden", status_code=403)

    @app.post("/api/webhook", response_class=PlainTextResponse)
    async def receive_webhook(request: Request) -> PlainTextResponse:
        try:
            body: Any = await request.json()
        except ValueError:
            logger.warning("Webhook body is not valid JSON; ignoring")
            return PlainTextResponse(content=EVENT_RECEIVED)

        try:
            payload = WhatsAppPayload.model_validate(body)
        except ValidationError as exc:
            logger.warning("Unrecognized webhook payload ignored: %s", exc.error_count())
            return PlainTextResponse(content=EVENT_RECEIVED)

        for event in payload.inbound_events():
            set_sender_id(event.sender_id)
            logger.info("Message from %s (%s): %r", event.sender_id, event.kind.value, event.value)
            await conversation.handle_event(event)
        return PlainTextResponse(content=EVENT_RECEIVED)

    return app
