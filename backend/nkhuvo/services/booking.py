# backend/nkhuvo/services/booking.py
"""
Booking request processing.

Turns a customer's slot selection into a pending booking:

    validate → hold hours in Redis → validate again → insert → release hold

The calculator check catches selections that are already stale; the Redis
hold stops two requests for the same hours from committing at once.
Confirmation / cancellation belong to the provider dashboard.
"""

import logging
from datetime import datetime, time
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..models.generated import Bookings as DBBooking
from .slots import AvailabilityCalculator, SlotHoldStore, SlotSelection
from .slots.config import END_OF_DAY
from .slots.hold_store import selection_hours

logger = logging.getLogger(__name__)


def selection_bounds(selection: SlotSelection) -> tuple[datetime, Optional[datetime]]:
    """
    Start / end datetimes to store for a selection.

    End of day (24:00) is stored as 23:59:59.999999 on the same date so a
    booking never spans midnight. Instant-bound selections store no end.
    """
    start = datetime.combine(selection.date, time(selection.start_hour))
    end_hour = selection.end_hour
    if end_hour is None or end_hour == selection.start_hour:
        return start, None
    if end_hour == END_OF_DAY:
        return start, datetime.combine(selection.date, time.max)
    return start, datetime.combine(selection.date, time(end_hour))


def create_booking(
    db: Session,
    calculator: AvailabilityCalculator,
    hold_store: SlotHoldStore,
    selection: SlotSelection,
    amount: Optional[float] = None,
    location: Optional[str] = None,
    event_id: Optional[str] = None,
) -> DBBooking:
    """
    Validate and persist a pending booking.

    Raises:
        InvalidSelectionError: selection not allowed by the service config.
        StaleAvailabilityError: selection taken by another booking
            (SlotUnavailableError if that booking is still being saved).
    """
    service_id = calculator.service_id
    calculator.validate_selection(selection)

    hours = selection_hours(selection.start_hour, selection.end_hour)
    token = hold_store.acquire(service_id, selection.date, hours)
    try:
        # Bookings committed while we were waiting for the hold
        calculator.validate_selection(selection)

        date_start, date_end = selection_bounds(selection)
        booking = DBBooking(
            service_id=service_id,
            event_id=event_id,
            date_start=date_start,
            date_end=date_end,
            status="pending",
            amount=amount,
            location=location,
        )
        db.add(booking)
        try:
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise
        db.refresh(booking)
    finally:
        hold_store.release(service_id, selection.date, hours, token)

    logger.info(
        f"Pending booking created: id={booking.id} service={service_id} "
        f"date={selection.date} {selection.start_time}-{selection.end_time}"
    )
    return booking
