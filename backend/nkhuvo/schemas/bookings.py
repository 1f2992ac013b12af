# backend/nkhuvo/schemas/bookings.py

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, field_validator

from .slots import SlotSelectionRequest


class BookingCreate(SlotSelectionRequest):
    amount: Optional[float] = None
    location: str
    event_id: Optional[str] = None

    @field_validator("location")
    @classmethod
    def validate_location(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError("Event location is required.")
        return normalized


class BookingRead(BaseModel):
    id: int

    service_id: int
    event_id: Optional[str] = None

    date_start: datetime
    date_end: Optional[datetime] = None

    status: str
    amount: Optional[float] = None
    location: Optional[str] = None

    created_at: datetime

    model_config = {"from_attributes": True}
