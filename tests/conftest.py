"""Shared test fixtures and helpers."""

from datetime import datetime, timezone
from typing import Optional

import pytest

from src.config import ConversationConfig, DriverConfig
from src.conversation.flow import BookingConversation, ConversationContext
from src.conversation.state_machine import ConversationStateMachine
from src.messaging.dispatcher import MessageDispatcher
from src.messaging.whatsapp import TransportError
from src.schemas.message_schema import (
    ButtonMessage,
    InboundEvent,
    InputKind,
    ListMessage,
    OutboundMessage,
    TextMessage,
)
from src.store.kv_store import InMemoryKeyValueStore
from src.store.session_store import SessionStore
from src.tools.locations import PricingCatalog

SENDER = "5565999990000"
DRIVER_NUMBER = "5582996518468"
FIXED_NOW = datetime(2025, 3, 15, 13, 30, 0, tzinfo=timezone.utc)


class RecordingTransport:
    """Keeps every message it is asked to send. Optionally fails for some recipients."""

    def __init__(self, fail_for: Optional[set[str]] = None) -> None:
        self.sent: list[tuple[str, OutboundMessage]] = []
        self.fail_for = fail_for or set()
        self.closed = False

    async def send(self, recipient: str, message: OutboundMessage) -> Optional[str]:
        if recipient in self.fail_for:
            raise TransportError("HTTP 500: simulated outage")
        self.sent.append((recipient, message))
        return f"wamid.{len(self.sent)}"

    def to(self, recipient: str) -> list[OutboundMessage]:
        return [message for r, message in self.sent if r == recipient]

    def last(self, recipient: str = SENDER) -> OutboundMessage:
        return self.to(recipient)[-1]

    def clear(self) -> None:
        self.sent.clear()

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def driver_config():
    return DriverConfig(
        name="Ismael",
        phone="(82) 99651-8468",
        pix="609.950.773-63",
        vehicle_model="Sandero Branco",
        vehicle_plate="QBI9I82",
        city="Planalto da Serra - MT",
        country_code="55",
    )


@pytest.fixture
def conversation_config():
    return ConversationConfig(
        cancel_keywords=("cancelar", "cancel"),
        max_text_length=300,
        display_utc_offset_hours=-4,
    )


@pytest.fixture
def kv():
    return InMemoryKeyValueStore()


@pytest.fixture
def store(kv):
    return SessionStore(kv, session_ttl_seconds=0, booking_prefix="booking:")


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def catalog():
    return PricingCatalog()


@pytest.fixture
def conversation(store, transport, driver_config, conversation_config, catalog):
    return BookingConversation(
        ConversationContext(
            store=store,
            dispatcher=MessageDispatcher(transport),
            driver=driver_config,
            conversation=conversation_config,
            catalog=catalog,
            clock=lambda: FIXED_NOW,
        )
    )


@pytest.fixture
def state_machine():
    return ConversationStateMachine()


def text(value: str, sender: str = SENDER) -> InboundEvent:
    return InboundEvent(sender_id=sender, kind=InputKind.TEXT, value=value)


def select(value: str, sender: str = SENDER) -> InboundEvent:
    return InboundEvent(sender_id=sender, kind=InputKind.SELECTION, value=value)


def body_of(message: OutboundMessage) -> str:
    if isinstance(message, (TextMessage, ButtonMessage, ListMessage)):
        return message.body
    raise TypeError(type(message))
