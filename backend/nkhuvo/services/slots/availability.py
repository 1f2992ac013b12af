# backend/nkhuvo/services/slots/availability.py
"""
Service availability calculation.

Combines:
- Operating window (candidate start hours from business hours)
- Blocked dates and past-date exclusion
- Active reservations (from a repository, re-read on every call)

Every operation is computed on demand: same inputs, same result,
regardless of call history.
"""

import calendar
import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable

from sqlalchemy.orm import Session

from .config import ServiceAvailabilityConfig, hour_to_time_str, BookingConfig, selection_time_to_hour
from .errors import InvalidSelectionError, SelectionError, StaleAvailabilityError
from .repository import ReservationRepository, SqlReservationRepository
from .reservations import blocked_hours, occupied_intervals
from .window import end_of_day_limit, resolve_candidate_hours


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StartTimeOption:
    hour: int
    bookable: bool

    @property
    def time(self) -> str:
        return hour_to_time_str(self.hour)


@dataclass(frozen=True)
class SlotSelection:
    """
    A customer's (date, start, end) choice.

    end_hour is None or equal to start_hour for instant-bound services.
    """
    date: date
    start_hour: int
    end_hour: int | None = None

    @classmethod
    def from_times(cls, day: date, start_time: str, end_time: str | None = None) -> "SlotSelection":
        """
        Build from "HH:00" strings. "24:00" is accepted as an end time.

        Raises:
            InvalidSelectionError: a time is not a whole hour.
        """
        start_hour = selection_time_to_hour(start_time)
        end_hour = None
        if end_time:
            end_hour = selection_time_to_hour(end_time, allow_end_of_day=True)
        return cls(date=day, start_hour=start_hour, end_hour=end_hour)

    @property
    def start_time(self) -> str:
        return hour_to_time_str(self.start_hour)

    @property
    def end_time(self) -> str:
        return hour_to_time_str(self.start_hour if self.end_hour is None else self.end_hour)


class AvailabilityCalculator:
    """Slot options and selection validation for one service."""

    def __init__(
        self,
        config: ServiceAvailabilityConfig,
        repository: ReservationRepository,
        service_id: int,
        today: Callable[[], date] | None = None,
    ):
        self.config = config
        self.repository = repository
        self.service_id = service_id
        self._today = today or date.today

    # ── Days ─────────────────────────────────────────────────────────────

    def is_day_bookable(self, target_date: date) -> bool:
        """False for past dates and blocked dates."""
        if target_date < self._today():
            return False
        return target_date not in self.config.blocked_dates

    def month_days(self, year: int, month: int) -> list[tuple[date, bool]]:
        """Every day of the month with its bookable flag."""
        _, days_in_month = calendar.monthrange(year, month)
        return [
            (day, self.is_day_bookable(day))
            for day in (date(year, month, n) for n in range(1, days_in_month + 1))
        ]

    # ── Start / end times ────────────────────────────────────────────────

    def start_time_options(self, target_date: date) -> list[StartTimeOption]:
        """
        Every candidate hour of the day with a bookable flag.

        Hours inside an occupied interval are not bookable. On a day that is
        not bookable (past or blocked) every entry is returned not bookable.
        """
        return self._start_options(target_date, self._intervals(target_date))

    def end_time_options(self, target_date: date, start_hour: int) -> list[int]:
        """
        Valid end hours for a duration-bound booking starting at start_hour.

        Runs from start_hour + 1 up to the closing hour, or up to the start of
        the next reservation if that comes first. Empty means no extension
        is possible.

        Raises:
            InvalidSelectionError: instant-bound service, or start_hour is
                not a bookable start option.
        """
        if not self.config.is_duration_bound:
            raise InvalidSelectionError("End times do not apply to instant-bound services")

        intervals = self._intervals(target_date)
        options = self._start_options(target_date, intervals)
        if not any(o.hour == start_hour and o.bookable for o in options):
            raise InvalidSelectionError(
                f"{hour_to_time_str(start_hour)} is not an available start time on {target_date}"
            )

        limit = self._end_limit(start_hour, intervals)
        return list(range(start_hour + 1, limit + 1))

    # ── Validation ───────────────────────────────────────────────────────

    def validate_selection(self, selection: SlotSelection) -> SlotSelection:
        """
        Re-check a selection against current configuration and reservations.

        Returns the selection unchanged.

        Raises:
            InvalidSelectionError: never valid for the current configuration.
            StaleAvailabilityError: valid for the configuration, but a
                reservation now occupies part of it.
        """
        try:
            self._check_against_config(selection)
            self._check_against_reservations(selection)
        except SelectionError as exc:
            logger.info(
                f"Selection rejected: service={self.service_id} date={selection.date} "
                f"{selection.start_time}-{selection.end_time} ({type(exc).__name__}: {exc})"
            )
            raise
        return selection

    def _check_against_config(self, selection: SlotSelection) -> None:
        hours = self.config.business_hours
        start, end = selection.start_hour, selection.end_hour

        if not self.is_day_bookable(selection.date):
            raise InvalidSelectionError(f"{selection.date} is not bookable")

        if start not in resolve_candidate_hours(hours):
            raise InvalidSelectionError(f"{selection.start_time} is outside business hours")

        if self.config.is_duration_bound:
            if end is None:
                raise InvalidSelectionError("An end time is required for this service")
            if end <= start:
                raise InvalidSelectionError("End time must be after start time")
            if end > end_of_day_limit(hours):
                raise InvalidSelectionError(f"{selection.end_time} is after closing time")
        elif end is not None and end != start:
            raise InvalidSelectionError("Instant-bound services take a single time")

    def _check_against_reservations(self, selection: SlotSelection) -> None:
        intervals = self._intervals(selection.date)

        if selection.start_hour in blocked_hours(intervals):
            raise StaleAvailabilityError(f"{selection.start_time} has just been booked")

        if self.config.is_duration_bound:
            if selection.end_hour > self._end_limit(selection.start_hour, intervals):
                raise StaleAvailabilityError(
                    f"{selection.start_time}-{selection.end_time} overlaps another booking"
                )

    # ── Helpers ──────────────────────────────────────────────────────────

    def _intervals(self, target_date: date) -> list[tuple[int, int]]:
        reservations = self.repository.list_active_reservations(self.service_id, target_date)
        return occupied_intervals(reservations, target_date, self.service_id)

    def _start_options(
        self,
        target_date: date,
        intervals: list[tuple[int, int]],
    ) -> list[StartTimeOption]:
        candidates = resolve_candidate_hours(self.config.business_hours)
        if not self.is_day_bookable(target_date):
            return [StartTimeOption(hour=h, bookable=False) for h in candidates]

        taken = blocked_hours(intervals)
        return [StartTimeOption(hour=h, bookable=h not in taken) for h in candidates]

    def _end_limit(self, start_hour: int, intervals: list[tuple[int, int]]) -> int:
        """Closing limit, narrowed to the nearest reservation starting after start_hour."""
        limit = end_of_day_limit(self.config.business_hours)
        for interval_start, _ in intervals:
            if start_hour < interval_start < limit:
                limit = interval_start
        return limit


# ── Loading ──────────────────────────────────────────────────────────────


def load_service_calculator(
    db: Session,
    service_id: int,
    booking_config: BookingConfig | None = None,
    today: Callable[[], date] | None = None,
) -> AvailabilityCalculator | None:
    """
    Calculator for a stored service backed by the bookings table.

    Returns None if the service does not exist or is inactive.

    Raises:
        ConfigurationError: stored business hours or blocked dates are malformed.
    """
    service = _get_service(db, service_id)
    if not service:
        return None

    config = ServiceAvailabilityConfig.from_service(service, booking_config)
    return AvailabilityCalculator(
        config=config,
        repository=SqlReservationRepository(db),
        service_id=service_id,
        today=today,
    )


def _get_service(db: Session, service_id: int):
    """Get active service by ID."""
    from ...models.generated import Services
    return db.query(Services).filter(
        Services.id == service_id,
        Services.is_active == 1
    ).first()
