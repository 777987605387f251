"""Per-sender conversation session models."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from src.conversation.state_machine import Step


class Quote(BaseModel):
    """Fare and time estimate for a trip.

    Values keep full float precision; rounding is a display concern.
    """
    base_fare: float
    surcharge: float
    total: float
    estimated_time: int


class TripData(BaseModel):
    """Fields accumulated while the customer walks through the flow.

    Each field is written only by the step that collects it.
    """
    origin: Optional[str] = None
    destination: Optional[str] = None
    passenger_count: Optional[int] = None
    customer_name: Optional[str] = None
    customer_contact: Optional[str] = None
    quote: Optional[Quote] = None


class Session(BaseModel):
    """Ephemeral conversation state, keyed by sender id in the store."""
    step: Step = Step.WELCOME
    data: TripData = Field(default_factory=TripData)
    updated_at: Optional[datetime] = None

    def reset(self) -> None:
        """Drop everything collected so far and go back to the greeting."""
        self.step = Step.WELCOME
        self.data = TripData()
