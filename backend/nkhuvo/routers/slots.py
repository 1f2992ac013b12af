# backend/nkhuvo/routers/slots.py
"""
Slots API endpoints.

GET  /slots/calendar  - Month grid of bookable days for a service
GET  /slots/day       - Start time options for a day
GET  /slots/end-times - End time options for a start time (time_bound only)
POST /slots/validate  - Re-check a selection right before booking
"""

import logging
from datetime import date
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.slots import (
    BusinessHoursInfo,
    EndTimesResponse,
    SlotInfo,
    SlotsCalendarResponse,
    SlotsDayResponse,
    SlotsDayStatus,
    SlotSelectionRequest,
    SlotSelectionResponse,
)
from ..services.slots import (
    AvailabilityCalculator,
    ConfigurationError,
    InvalidSelectionError,
    SelectionError,
    SlotSelection,
    StaleAvailabilityError,
    load_service_calculator,
)
from ..services.slots.config import hour_to_time_str, selection_time_to_hour
from ..services.slots.window import end_of_day_limit


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/slots", tags=["slots"])


def get_service_calculator(db: Session, service_id: int) -> AvailabilityCalculator:
    """Calculator for service_id, or the matching HTTP error."""
    try:
        calculator = load_service_calculator(db, service_id)
    except ConfigurationError as exc:
        logger.error(f"Service {service_id} availability misconfigured: {exc}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service availability is misconfigured",
        ) from exc

    if calculator is None:
        raise HTTPException(status_code=404, detail="Service not found")
    return calculator


def selection_http_error(exc: SelectionError) -> HTTPException:
    """409 when someone else took the slot, 400 when it was never valid."""
    if isinstance(exc, StaleAvailabilityError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


def parse_selection(data: SlotSelectionRequest) -> SlotSelection:
    try:
        return SlotSelection.from_times(data.date, data.start_time, data.end_time)
    except InvalidSelectionError as exc:
        raise selection_http_error(exc) from exc


@router.get("/calendar", response_model=SlotsCalendarResponse)
def get_slots_calendar(
    service_id: int,
    year: int | None = Query(None, ge=1, le=9999),
    month: int | None = Query(None, ge=1, le=12),
    db: Session = Depends(get_db),
):
    """Get bookable days of a month (defaults to the current month)."""
    calculator = get_service_calculator(db, service_id)

    today = date.today()
    year = year or today.year
    month = month or today.month

    days = [
        SlotsDayStatus(date=day, is_bookable=bookable)
        for day, bookable in calculator.month_days(year, month)
    ]

    return SlotsCalendarResponse(
        service_id=service_id,
        year=year,
        month=month,
        days=days,
    )


@router.get("/day", response_model=SlotsDayResponse)
def get_slots_day(
    service_id: int,
    target_date: date = Query(..., alias="date"),
    db: Session = Depends(get_db),
):
    """Get start time options for a day, booked hours included as not bookable."""
    calculator = get_service_calculator(db, service_id)
    config = calculator.config
    hours = config.business_hours

    slots = [
        SlotInfo(hour=option.hour, time=option.time, is_bookable=option.bookable)
        for option in calculator.start_time_options(target_date)
    ]

    return SlotsDayResponse(
        service_id=service_id,
        date=target_date,
        booking_type=config.mode.value,
        is_bookable=calculator.is_day_bookable(target_date),
        business_hours=BusinessHoursInfo(
            type=hours.kind,
            start=hour_to_time_str(hours.open_hour),
            end=hour_to_time_str(end_of_day_limit(hours)),
        ),
        slots=slots,
    )


@router.get("/end-times", response_model=EndTimesResponse)
def get_end_times(
    service_id: int,
    start_time: str,
    target_date: date = Query(..., alias="date"),
    db: Session = Depends(get_db),
):
    """Get end time options for a start time (time_bound services only)."""
    calculator = get_service_calculator(db, service_id)

    try:
        start_hour = selection_time_to_hour(start_time)
        end_hours = calculator.end_time_options(target_date, start_hour)
    except SelectionError as exc:
        raise selection_http_error(exc) from exc

    return EndTimesResponse(
        service_id=service_id,
        date=target_date,
        start_time=hour_to_time_str(start_hour),
        end_times=[hour_to_time_str(h) for h in end_hours],
    )


@router.post("/validate", response_model=SlotSelectionResponse)
def validate_slot_selection(
    data: SlotSelectionRequest,
    db: Session = Depends(get_db),
):
    """Re-check a selection against current availability."""
    calculator = get_service_calculator(db, data.service_id)
    selection = parse_selection(data)

    try:
        selection = calculator.validate_selection(selection)
    except SelectionError as exc:
        raise selection_http_error(exc) from exc

    return SlotSelectionResponse(
        service_id=data.service_id,
        date=selection.date,
        start_time=selection.start_time,
        end_time=selection.end_time,
    )
