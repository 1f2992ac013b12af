# backend/nkhuvo/services/slots/__init__.py
"""
Slots calculation module.

Operating window → candidate start hours (pure, cached)
Reservation index → occupied hour intervals per day
Availability calculator → bookable days, start/end options, validation
Hold store → Redis holds that stop two bookings committing the same hours
"""

from .config import (
    BookingConfig,
    BookingMode,
    BusinessHours,
    ServiceAvailabilityConfig,
    get_booking_config,
)
from .errors import (
    ConfigurationError,
    InvalidSelectionError,
    SelectionError,
    SlotEngineError,
    SlotUnavailableError,
    StaleAvailabilityError,
)
from .window import resolve_candidate_hours
from .reservations import Reservation, occupied_intervals
from .repository import InMemoryReservationRepository, SqlReservationRepository
from .availability import (
    AvailabilityCalculator,
    SlotSelection,
    StartTimeOption,
    load_service_calculator,
)
from .hold_store import SlotHoldStore

__all__ = [
    "BookingConfig",
    "BookingMode",
    "BusinessHours",
    "ServiceAvailabilityConfig",
    "get_booking_config",
    "ConfigurationError",
    "InvalidSelectionError",
    "SelectionError",
    "SlotEngineError",
    "SlotUnavailableError",
    "StaleAvailabilityError",
    "resolve_candidate_hours",
    "Reservation",
    "occupied_intervals",
    "InMemoryReservationRepository",
    "SqlReservationRepository",
    "AvailabilityCalculator",
    "SlotSelection",
    "StartTimeOption",
    "load_service_calculator",
    "SlotHoldStore",
]
