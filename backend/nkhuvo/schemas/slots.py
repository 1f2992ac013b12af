# backend/nkhuvo/schemas/slots.py
"""
Pydantic schemas for slots API.
"""

from datetime import date
from typing import Optional
from pydantic import BaseModel, Field


class SlotsDayStatus(BaseModel):
    """Status of a single day in calendar."""
    date: date
    is_bookable: bool

    model_config = {"from_attributes": True}


class SlotsCalendarResponse(BaseModel):
    """Month grid of bookable days."""
    service_id: int
    year: int
    month: int
    days: list[SlotsDayStatus]

    model_config = {"from_attributes": True}


class BusinessHoursInfo(BaseModel):
    type: str = Field(description="'24h' or 'custom'")
    start: str  # "HH:00"
    end: str    # "HH:00", last bookable boundary

    model_config = {"from_attributes": True}


class SlotInfo(BaseModel):
    """Information about a single start time."""
    hour: int
    time: str  # "HH:00"
    is_bookable: bool

    model_config = {"from_attributes": True}


class SlotsDayResponse(BaseModel):
    """Start time options for a day. Non-bookable entries are kept."""
    service_id: int
    date: date
    booking_type: str = Field(description="'time_bound' (start + end) or 'delivery_bound' (single time)")
    is_bookable: bool
    business_hours: BusinessHoursInfo
    slots: list[SlotInfo]

    model_config = {"from_attributes": True}


class EndTimesResponse(BaseModel):
    """End time options for a start time. Empty = no extension possible."""
    service_id: int
    date: date
    start_time: str
    end_times: list[str]

    model_config = {"from_attributes": True}


class SlotSelectionRequest(BaseModel):
    service_id: int
    date: date
    start_time: str  # "HH:00"
    end_time: Optional[str] = None  # required for time_bound services

    model_config = {"from_attributes": True}


class SlotSelectionResponse(BaseModel):
    service_id: int
    date: date
    start_time: str
    end_time: str  # equals start_time for delivery_bound services

    model_config = {"from_attributes": True}
