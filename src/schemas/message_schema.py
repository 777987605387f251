"""Inbound event and outbound message models.

Outbound messages are transport-neutral descriptors; the WhatsApp
transport turns them into Cloud API payloads.
"""

from enum import Enum
from typing import Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator

MAX_BUTTONS = 3


class InputKind(str, Enum):
    """How the customer answered: typed text or a button/list pick."""
    TEXT = "text"
    SELECTION = "selection"


class InboundEvent(BaseModel):
    """One normalized message from a customer."""
    sender_id: str
    kind: InputKind
    value: str


class ButtonOption(BaseModel):
    id: str
    title: str


class ListRow(BaseModel):
    id: str
    title: str


class ListSection(BaseModel):
    title: str
    rows: list[ListRow]


class TextMessage(BaseModel):
    type: Literal["text"] = "text"
    body: str


class ButtonMessage(BaseModel):
    """Body text with up to three reply buttons."""
    type: Literal["button"] = "button"
    body: str
    options: list[ButtonOption]

    @field_validator("options")
    @classmethod
    def check_option_count(cls, value: list[ButtonOption]) -> list[ButtonOption]:
        if not 1 <= len(value) <= MAX_BUTTONS:
            raise ValueError(f"Button prompts take 1 to {MAX_BUTTONS} options, got {len(value)}")
        return value


class ListMessage(BaseModel):
    """Categorized picker with named sections of selectable rows."""
    type: Literal["list"] = "list"
    header: str
    body: str
    footer: Optional[str] = None
    button: str
    sections: list[ListSection] = Field(min_length=1)

    def row_ids(self) -> list[str]:
        return [row.id for section in self.sections for row in section.rows]


OutboundMessage = Union[TextMessage, ButtonMessage, ListMessage]


class DeliveryResult(BaseModel):
    """Outcome of handing one message to the transport."""
    recipient: str
    delivered: bool
    reason: Optional[str] = None
    message_id: Optional[str] = None
