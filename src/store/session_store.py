"""Session and booking persistence on top of a key-value backend."""

import logging
from typing import Optional

from pydantic import ValidationError

from src.schemas.booking_schema import BookingRecord
from src.schemas.session_schema import Session
from src.store.kv_store import KeyValueStore

logger = logging.getLogger(__name__)


class SessionStore:
    """
    Load, save and delete sessions by sender id; write booking records.

    Sessions live under the bare sender id. Booking records live under
    ``booking_prefix + id`` so the two key spaces never collide.
    """

    def __init__(
        self,
        backend: KeyValueStore,
        session_ttl_seconds: int = 0,
        booking_prefix: str = "booking:",
    ) -> None:
        self.backend = backend
        self.session_ttl_seconds = session_ttl_seconds
        self.booking_prefix = booking_prefix

    async def get_session(self, sender_id: str) -> Optional[Session]:
        raw = await self.backend.get(sender_id)
        if raw is None:
            return None
        try:
            return Session.model_validate_json(raw)
        except ValidationError:
            logger.warning("Discarding unreadable session for %s", sender_id, exc_info=True)
            return None

    async def load_or_create(self, sender_id: str) -> Session:
        """Return the stored session, or a fresh one at the welcome step."""
        session = await self.get_session(sender_id)
        if session is None:
            logger.debug("No session for %s, starting fresh", sender_id)
            return Session()
        return session

    async def save_session(self, sender_id: str, session: Session) -> None:
        await self.backend.set(
            sender_id,
            session.model_dump_json(),
            ttl_seconds=self.session_ttl_seconds or None,
        )

    async def delete_session(self, sender_id: str) -> None:
        await self.backend.delete(sender_id)

    async def close(self) -> None:
        await self.backend.close()

    def booking_key(self, booking_id: int) -> str:
        return f"{self.booking_prefix}{booking_id}"

    async def save_booking(self, record: BookingRecord) -> None:
        await self.backend.set(self.booking_key(record.id), record.model_dump_json())

    async def get_booking(self, booking_id: int) -> Optional[BookingRecord]:
        raw = await self.backend.get(self.booking_key(booking_id))
        if raw is None:
            return None
        return BookingRecord.model_validate_json(raw)
