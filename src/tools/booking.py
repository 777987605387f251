"""
Booking record creation.

A booking is written once, when the customer sends their contact number,
and is never updated by the bot. Back-office tooling reads it from the
store by id.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from src.schemas.booking_schema import BookingCustomer, BookingRecord
from src.schemas.session_schema import TripData
from src.store.session_store import SessionStore

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class BookingIdGenerator:
    """Epoch-millisecond ids that never repeat or go backwards in this process."""

    def __init__(self) -> None:
        self._last_id = 0

    def next_id(self, now: datetime) -> int:
        candidate = int(now.timestamp() * 1000)
        if candidate <= self._last_id:
            candidate = self._last_id + 1
        self._last_id = candidate
        return candidate


def build_booking_record(
    booking_id: int,
    created_at: datetime,
    sender_id: str,
    data: TripData,
) -> BookingRecord:
    """Assemble the booking from collected trip data.

    Raises:
        ValueError: If any field the booking needs was never collected.
    """
    missing = [
        field_name
        for field_name, value in [
            ("origin", data.origin),
            ("destination", data.destination),
            ("passenger_count", data.passenger_count),
            ("customer_name", data.customer_name),
            ("customer_contact", data.customer_contact),
            ("quote", data.quote),
        ]
        if value is None
    ]
    if missing:
        raise ValueError(f"Cannot create booking - missing fields: {', '.join(missing)}")

    return BookingRecord(
        id=booking_id,
        created_at=created_at,
        customer=BookingCustomer(
            name=data.customer_name,
            contact=data.customer_contact,
            whatsapp=sender_id,
        ),
        origin=data.origin,
        destination=data.destination,
        passenger_count=data.passenger_count,
        total_fare=data.quote.total,
        estimated_time=data.quote.estimated_time,
    )


async def create_booking(
    store: SessionStore,
    sender_id: str,
    data: TripData,
    id_generator: BookingIdGenerator,
    clock: Optional[Clock] = None,
) -> BookingRecord:
    """Build and persist the booking for a finished conversation."""
    now = (clock or utc_now)()
    record = build_booking_record(id_generator.next_id(now), now, sender_id, data)
    await store.save_booking(record)
    logger.info(
        "Booking created: %s for %s (%s -> %s)",
        record.id, record.customer.name, record.origin, record.destination,
    )
    return record
