"""
WhatsApp Cloud API transport.

Turns outbound message descriptors into Graph API payloads and posts them
with a shared httpx.AsyncClient.
"""

import logging
from typing import Any, Optional

import httpx

from src.config import WhatsAppConfig
from src.schemas.message_schema import ButtonMessage, ListMessage, OutboundMessage, TextMessage

logger = logging.getLogger(__name__)

# Cloud API limits for interactive elements.
MAX_BUTTON_TITLE = 20
MAX_ROW_TITLE = 24
MAX_SECTION_TITLE = 24
MAX_HEADER = 60
MAX_FOOTER = 60
MAX_REPLY_ID = 200


class TransportError(Exception):
    """Raised when the messaging API rejects or cannot take a message."""


def to_whatsapp_payload(recipient: str, message: OutboundMessage) -> dict[str, Any]:
    """Build the Cloud API request body for one message."""
    payload: dict[str, Any] = {
        "messaging_product": "whatsapp",
        "recipient_type": "individual",
        "to": recipient,
    }
    if isinstance(message, TextMessage):
        payload["type"] = "text"
        payload["text"] = {"body": message.body}
    elif isinstance(message, ButtonMessage):
        payload["type"] = "interactive"
        payload["interactive"] = {
            "type": "button",
            "body": {"text": message.body},
            "action": {
                "buttons": [
                    {
                        "type": "reply",
                        "reply": {
                            "id": option.id[:MAX_REPLY_ID],
                            "title": option.title[:MAX_BUTTON_TITLE],
                        },
                    }
                    for option in message.options
                ]
            },
        }
    elif isinstance(message, ListMessage):
        interactive: dict[str, Any] = {
            "type": "list",
            "header": {"type": "text", "text": message.header[:MAX_HEADER]},
            "body": {"text": message.body},
            "action": {
                "button": message.button[:MAX_BUTTON_TITLE],
                "sections": [
                    {
                        "title": section.title[:MAX_SECTION_TITLE],
                        "rows": [
                            {"id": row.id[:MAX_REPLY_ID], "title": row.title[:MAX_ROW_TITLE]}
                            for row in section.rows
                        ],
                    }
                    for section in message.sections
                ],
            },
        }
        if message.footer:
            interactive["footer"] = {"text": message.footer[:MAX_FOOTER]}
        payload["type"] = "interactive"
        payload["interactive"] = interactive
    else:
        raise TypeError(f"Unsupported message type: {type(message).__name__}")
    return payload


class WhatsAppTransport:
    """Sends messages through ``POST /{phone_number_id}/messages``."""

    def __init__(self, config: WhatsAppConfig, client: Optional[httpx.AsyncClient] = None) -> None:
        self.config = config
        self._client = client or httpx.AsyncClient(
            base_url=f"{config.graph_base_url}/{config.api_version}",
            timeout=config.timeout_seconds,
            headers={"Content-Type": "application/json"},
        )

    async def send(self, recipient: str, message: OutboundMessage) -> Optional[str]:
        """Post one message. Returns the WhatsApp message id when the API gives one.

        Raises:
            TransportError: missing credentials or an error response.
            httpx.HTTPError: network failures.
        """
        if not self.config.access_token or not self.config.phone_number_id:
            raise TransportError("WHATSAPP_TOKEN or WHATSAPP_PHONE_NUMBER_ID not configured")

        response = await self._client.post(
            f"/{self.config.phone_number_id}/messages",
            json=to_whatsapp_payload(recipient, message),
            headers={"Authorization": f"Bearer {self.config.access_token}"},
        )
        if response.status_code >= 400:
            if response.status_code in (401, 403):
                logger.error("WhatsApp API rejected the access token (HTTP %s)", response.status_code)
            raise TransportError(f"HTTP {response.status_code}: {response.text[:500]}")

        # The API accepted the message; a body we cannot read only costs the id.
        try:
            body = response.json()
        except ValueError:
            logger.warning("Unreadable response body from WhatsApp API: %r", response.text[:200])
            return None
        messages = body.get("messages") if isinstance(body, dict) else None
        if not isinstance(messages, list) or not messages or not isinstance(messages[0], dict):
            return None
        return messages[0].get("id")

    async def close(self) -> None:
        await self._client.aclose()
