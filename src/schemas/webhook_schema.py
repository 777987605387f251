"""WhatsApp Cloud API webhook payload models.

Only the fields the bot reads are modelled; everything else is ignored.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from src.schemas.message_schema import InboundEvent, InputKind

WHATSAPP_OBJECT = "whatsapp_business_account"


class WhatsAppText(BaseModel):
    body: str


class WhatsAppReply(BaseModel):
    id: str
    title: Optional[str] = None


class WhatsAppInteractive(BaseModel):
    type: Optional[str] = None
    button_reply: Optional[WhatsAppReply] = None
    list_reply: Optional[WhatsAppReply] = None


class WhatsAppMessage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_number: str = Field(..., alias="from")
    id: Optional[str] = None
    type: str
    text: Optional[WhatsAppText] = None
    interactive: Optional[WhatsAppInteractive] = None

    def to_event(self) -> Optional[InboundEvent]:
        """Normalize into an InboundEvent, or None for unsupported types."""
        if self.type == "text" and self.text is not None:
            return InboundEvent(sender_id=self.from_number, kind=InputKind.TEXT, value=self.text.body)
        if self.type == "interactive" and self.interactive is not None:
            reply = self.interactive.button_reply or self.interactive.list_reply
            if reply is not None:
                return InboundEvent(sender_id=self.from_number, kind=InputKind.SELECTION, value=reply.id)
        return None


class WhatsAppValue(BaseModel):
    messages: list[WhatsAppMessage] = Field(default_factory=list)


class WhatsAppChange(BaseModel):
    field: str
    value: WhatsAppValue


class WhatsAppEntry(BaseModel):
    id: Optional[str] = None
    changes: list[WhatsAppChange] = Field(default_factory=list)


class WhatsAppPayload(BaseModel):
    object: str
    entry: list[WhatsAppEntry] = Field(default_factory=list)

    def inbound_events(self) -> list[InboundEvent]:
        """All customer messages in the payload that the bot can handle."""
        if self.object != WHATSAPP_OBJECT:
            return []
        events = []
        for entry in self.entry:
            for change in entry.changes:
                if change.field != "messages":
                    continue
                for message in change.value.messages:
                    event = message.to_event()
                    if event is not None:
                        events.append(event)
        return events
