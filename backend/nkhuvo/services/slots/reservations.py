# backend/nkhuvo/services/slots/reservations.py
"""
Reservation index.

Turns existing reservations of a service into half-open occupied hour
intervals [start, end) for one date. Bad rows are normalized, never raised:
the engine is a read-side safety net, not the system of record.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable

from .config import END_OF_DAY


ACTIVE_STATUSES = ("pending", "confirmed")


@dataclass(frozen=True)
class Reservation:
    """A booking against a service. No end → occupies one hour."""
    service_id: int
    start: datetime
    end: datetime | None = None
    status: str = "pending"

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES

    @classmethod
    def from_booking(cls, booking) -> "Reservation":
        """Build from a stored booking row (date_start/date_end may be ISO text)."""
        return cls(
            service_id=booking.service_id,
            start=_as_datetime(booking.date_start),
            end=_as_datetime(booking.date_end) if booking.date_end else None,
            status=booking.status,
        )


def occupied_interval(reservation: Reservation) -> tuple[int, int]:
    """
    Normalize one reservation to [start_hour, end_hour).

    - no end            → start + 1
    - end on a later day → capped at 24 (no cross-midnight occupation)
    - end not after start → one hour
    """
    start_hour = reservation.start.hour
    one_hour = min(start_hour + 1, END_OF_DAY)

    end = reservation.end
    if end is None:
        return start_hour, one_hour

    if end.date() != reservation.start.date():
        end_hour = END_OF_DAY if end > reservation.start else one_hour
    else:
        end_hour = end.hour + (1 if end.minute or end.second else 0)

    if end_hour <= start_hour:
        end_hour = one_hour
    return start_hour, end_hour


def occupied_intervals(
    reservations: Iterable[Reservation],
    target_date: date,
    service_id: int | None = None,
) -> list[tuple[int, int]]:
    """
    Occupied intervals for reservations starting on target_date.

    Not sorted, not merged. Overlaps are the caller's business
    (see blocked_hours).
    """
    return [
        occupied_interval(r)
        for r in reservations
        if r.start.date() == target_date
        and (service_id is None or r.service_id == service_id)
    ]


def blocked_hours(intervals: Iterable[tuple[int, int]]) -> set[int]:
    """Union of hours covered by the intervals."""
    hours: set[int] = set()
    for start, end in intervals:
        hours.update(range(start, end))
    return hours


def _as_datetime(value) -> datetime:
    if isinstance(value, str):
        return datetime.fromisoformat(value)
    return value
