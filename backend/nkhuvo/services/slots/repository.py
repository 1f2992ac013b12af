# backend/nkhuvo/services/slots/repository.py
"""
Reservation sources for the availability calculator.

The calculator only sees the list a repository returns; it never holds a
reference to the underlying storage.
"""

from datetime import date, datetime, time, timedelta
from typing import Iterable, Protocol

from sqlalchemy.orm import Session

from .reservations import ACTIVE_STATUSES, Reservation


class ReservationRepository(Protocol):
    def list_active_reservations(self, service_id: int, target_date: date) -> list[Reservation]:
        """Pending and confirmed reservations of a service starting on target_date."""
        ...


class InMemoryReservationRepository:
    """List-backed repository (demo data, tests)."""

    def __init__(self, reservations: Iterable[Reservation] = ()):
        self._reservations: list[Reservation] = list(reservations)

    def add(self, reservation: Reservation) -> None:
        self._reservations.append(reservation)

    def list_active_reservations(self, service_id: int, target_date: date) -> list[Reservation]:
        return [
            r for r in self._reservations
            if r.service_id == service_id
            and r.start.date() == target_date
            and r.is_active
        ]


class SqlReservationRepository:
    """Reads active bookings from the database."""

    def __init__(self, db: Session):
        self.db = db

    def list_active_reservations(self, service_id: int, target_date: date) -> list[Reservation]:
        from ...models.generated import Bookings

        day_start = datetime.combine(target_date, time.min)
        day_end = day_start + timedelta(days=1)

        rows = (
            self.db.query(Bookings)
            .filter(
                Bookings.service_id == service_id,
                Bookings.date_start >= day_start,
                Bookings.date_start < day_end,
                Bookings.status.in_(ACTIVE_STATUSES),
            )
            .all()
        )
        return [Reservation.from_booking(row) for row in rows]
