# backend/nkhuvo/services/slots/config.py
"""
Availability configuration for slots calculation.

All times are whole hours. Hour 24 means "end of day" and is only
ever used as an end boundary.
"""

import json
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from functools import lru_cache

from .errors import ConfigurationError, InvalidSelectionError


ALL_DAY = "24h"
CUSTOM = "custom"
END_OF_DAY = 24


class BookingMode(str, Enum):
    """How a service is booked."""
    DURATION_BOUND = "time_bound"      # start and end (DJ 18:00-23:00)
    INSTANT_BOUND = "delivery_bound"   # single point (cake at 10:00)


@dataclass(frozen=True)
class BookingConfig:
    """
    Marketplace-wide defaults for the slots engine.

    Attributes:
        default_open_hour: Opening hour for services without configured hours
        default_close_hour: Closing hour for services without configured hours
        hold_ttl_seconds: Lifetime of a Redis slot hold while a booking is saved
    """
    default_open_hour: int = 8
    default_close_hour: int = 20
    hold_ttl_seconds: int = 300

    def __post_init__(self):
        """Validate configuration."""
        _check_hours(self.default_open_hour, self.default_close_hour)
        if self.hold_ttl_seconds <= 0:
            raise ConfigurationError(
                f"hold_ttl_seconds must be positive, got {self.hold_ttl_seconds}"
            )

    @property
    def default_business_hours(self) -> "BusinessHours":
        return BusinessHours.fixed(self.default_open_hour, self.default_close_hour)


@lru_cache
def get_booking_config() -> BookingConfig:
    """Get booking configuration (singleton), built from application settings."""
    from ...config import settings

    return BookingConfig(
        default_open_hour=settings.default_open_hour,
        default_close_hour=settings.default_close_hour,
        hold_ttl_seconds=settings.slot_hold_ttl_seconds,
    )


@dataclass(frozen=True)
class BusinessHours:
    """
    Daily window in which bookings may start.

    kind == "24h":    every hour 0..23 is a candidate, end-of-day limit is 24
    kind == "custom": open_hour..close_hour inclusive, close_hour is the last
                      bookable boundary
    """
    kind: str = CUSTOM
    open_hour: int = 8
    close_hour: int = 20

    def __post_init__(self):
        if self.kind == ALL_DAY:
            object.__setattr__(self, "open_hour", 0)
            object.__setattr__(self, "close_hour", END_OF_DAY - 1)
            return
        if self.kind != CUSTOM:
            raise ConfigurationError(f"Unknown business hours type: {self.kind!r}")
        _check_hours(self.open_hour, self.close_hour)

    @classmethod
    def all_day(cls) -> "BusinessHours":
        return cls(kind=ALL_DAY)

    @classmethod
    def fixed(cls, open_hour: int, close_hour: int) -> "BusinessHours":
        return cls(kind=CUSTOM, open_hour=open_hour, close_hour=close_hour)

    @classmethod
    def parse(
        cls,
        kind: str | None,
        start: str | None = None,
        end: str | None = None,
        default: "BusinessHours | None" = None,
    ) -> "BusinessHours":
        """
        Build business hours from their stored form.

        ("24h", ..)             → all day
        ("custom", "09:00", "17:00") → fixed 9..17
        anything incomplete     → default (marketplace 08:00-20:00)
        """
        if kind == ALL_DAY:
            return cls.all_day()
        if kind == CUSTOM and start and end:
            return cls.fixed(time_str_to_hour(start), time_str_to_hour(end))
        if kind not in (None, "", CUSTOM):
            raise ConfigurationError(f"Unknown business hours type: {kind!r}")
        return default or get_booking_config().default_business_hours

    @property
    def is_all_day(self) -> bool:
        return self.kind == ALL_DAY


@dataclass(frozen=True)
class ServiceAvailabilityConfig:
    """Per-service configuration consumed by the engine."""
    mode: BookingMode = BookingMode.DURATION_BOUND
    business_hours: BusinessHours = field(default_factory=BusinessHours)
    blocked_dates: frozenset[date] = frozenset()

    def __post_init__(self):
        try:
            object.__setattr__(self, "mode", BookingMode(self.mode))
        except ValueError as exc:
            raise ConfigurationError(f"Unknown booking mode: {self.mode!r}") from exc
        object.__setattr__(self, "blocked_dates", frozenset(self.blocked_dates))

    @property
    def is_duration_bound(self) -> bool:
        return self.mode is BookingMode.DURATION_BOUND

    @classmethod
    def from_service(
        cls,
        service,
        booking_config: BookingConfig | None = None,
    ) -> "ServiceAvailabilityConfig":
        """
        Build config from a stored service row.

        Expects attributes: booking_type, hours_type, hours_start,
        hours_end, unavailable_dates (JSON list of "YYYY-MM-DD").
        """
        booking_config = booking_config or get_booking_config()
        hours = BusinessHours.parse(
            service.hours_type,
            service.hours_start,
            service.hours_end,
            default=booking_config.default_business_hours,
        )
        return cls(
            mode=service.booking_type or BookingMode.DURATION_BOUND,
            business_hours=hours,
            blocked_dates=parse_blocked_dates(service.unavailable_dates),
        )


# ── Helpers ──────────────────────────────────────────────────────────────


def _check_hours(open_hour: int, close_hour: int) -> None:
    for name, value in (("open_hour", open_hour), ("close_hour", close_hour)):
        if not isinstance(value, int) or not 0 <= value < END_OF_DAY:
            raise ConfigurationError(f"{name} must be an hour 0-23, got {value!r}")
    if open_hour >= close_hour:
        raise ConfigurationError(
            f"open_hour must be before close_hour, got {open_hour}-{close_hour}"
        )


def time_str_to_hour(value: str) -> int:
    """Convert "HH:MM" to an hour. Minutes are dropped."""
    try:
        hour = int(value.strip().split(":")[0])
    except (ValueError, AttributeError) as exc:
        raise ConfigurationError(f"Invalid time string: {value!r}") from exc
    if not 0 <= hour < END_OF_DAY:
        raise ConfigurationError(f"Invalid time string: {value!r}")
    return hour


def selection_time_to_hour(value: str, allow_end_of_day: bool = False) -> int:
    """
    Convert a customer-submitted "HH:00" to an hour.

    Unlike time_str_to_hour nothing is dropped: any other minute value is
    rejected. "24:00" is accepted only with allow_end_of_day.
    """
    parts = value.strip().split(":") if isinstance(value, str) else []
    if len(parts) != 2 or parts[1] != "00" or not parts[0].isdigit():
        raise InvalidSelectionError(f"Times must be whole hours (HH:00), got {value!r}")

    hour = int(parts[0])
    limit = END_OF_DAY if allow_end_of_day else END_OF_DAY - 1
    if hour > limit:
        raise InvalidSelectionError(f"Invalid time: {value!r}")
    return hour


def hour_to_time_str(hour: int) -> str:
    """Convert hour to "HH:00". 24 renders as "24:00" (end of day)."""
    return f"{hour:02d}:00"


def parse_blocked_dates(raw: str | list | None) -> frozenset[date]:
    """Parse blocked dates from a JSON list (or list) of ISO date strings."""
    if not raw:
        return frozenset()
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"unavailable_dates is not valid JSON: {raw!r}") from exc
    try:
        return frozenset(
            d if isinstance(d, date) else date.fromisoformat(d) for d in raw
        )
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid blocked date in {raw!r}") from exc
