"""
Outbound message dispatch.

The dispatcher stands between the conversation engine and the transport:
delivery problems come back as a DeliveryResult instead of an exception,
so a failed send never rolls back or aborts a step that already happened.
"""

import logging
from typing import Optional, Protocol

import httpx

from src.messaging.whatsapp import TransportError
from src.schemas.message_schema import DeliveryResult, OutboundMessage

logger = logging.getLogger(__name__)


class MessageTransport(Protocol):
    async def send(self, recipient: str, message: OutboundMessage) -> Optional[str]: ...

    async def close(self) -> None: ...


class MessageDispatcher:
    """Sends structured messages and reports the outcome."""

    def __init__(self, transport: MessageTransport) -> None:
        self.transport = transport

    async def send(self, recipient: str, message: OutboundMessage) -> DeliveryResult:
        try:
            message_id = await self.transport.send(recipient, message)
        except (TransportError, httpx.HTTPError) as exc:
            logger.warning("Failed to send %s message to %s: %s", message.type, recipient, exc)
            return DeliveryResult(recipient=recipient, delivered=False, reason=str(exc))
        logger.debug("Sent %s message to %s", message.type, recipient)
        return DeliveryResult(recipient=recipient, delivered=True, message_id=message_id)

    async def close(self) -> None:
        await self.transport.close()
