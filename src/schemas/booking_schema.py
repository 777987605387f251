"""Booking record models."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel


class BookingCustomer(BaseModel):
    """Who booked the trip."""
    name: str
    contact: str
    whatsapp: str


class BookingRecord(BaseModel):
    """Durable, write-once record of a confirmed trip."""
    id: int
    created_at: datetime
    customer: BookingCustomer
    origin: str
    destination: str
    passenger_count: int
    total_fare: float
    estimated_time: int
    status: Literal["confirmed"] = "confirmed"
