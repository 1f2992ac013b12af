# backend/nkhuvo/routers/bookings.py
# Bookings are created pending; status changes belong to the provider dashboard.

from fastapi import APIRouter, Depends, HTTPException, status
from redis import Redis
from sqlalchemy.orm import Session

from ..database import get_db
from ..redis_client import get_redis
from ..models.generated import Bookings as DBBookings
from ..schemas.bookings import (
    BookingCreate,
    BookingRead,
)
from ..services.booking import create_booking as create_pending_booking
from ..services.slots import SelectionError, SlotHoldStore
from .slots import get_service_calculator, parse_selection, selection_http_error

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.get("/{id}", response_model=BookingRead)
def get_booking(id: int, db: Session = Depends(get_db)):
    obj = db.get(DBBookings, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")
    return obj


@router.post("/", response_model=BookingRead, status_code=status.HTTP_201_CREATED)
def create_booking(
    data: BookingCreate,
    db: Session = Depends(get_db),
    redis: Redis = Depends(get_redis),
):
    calculator = get_service_calculator(db, data.service_id)
    selection = parse_selection(data)

    try:
        obj = create_pending_booking(
            db,
            calculator,
            SlotHoldStore(redis),
            selection,
            amount=data.amount,
            location=data.location,
            event_id=data.event_id,
        )
    except SelectionError as exc:
        raise selection_http_error(exc) from exc

    return obj
