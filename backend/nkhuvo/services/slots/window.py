# backend/nkhuvo/services/slots/window.py
"""
Operating window: business hours → candidate start hours.

Hours are the same for every open day (no per-weekday schedule).
"""

from functools import lru_cache

from .config import END_OF_DAY, BusinessHours


@lru_cache(maxsize=256)
def resolve_candidate_hours(business_hours: BusinessHours) -> tuple[int, ...]:
    """
    Ordered candidate start hours for a day.

    - 24h    → 0..23
    - custom → open_hour..close_hour (closing hour included)

    Misconfigured hours never get here: BusinessHours raises
    ConfigurationError when it is built.
    """
    if business_hours.is_all_day:
        return tuple(range(END_OF_DAY))
    return tuple(range(business_hours.open_hour, business_hours.close_hour + 1))


def end_of_day_limit(business_hours: BusinessHours) -> int:
    """Latest end hour a booking may have (close hour, or 24 for all-day)."""
    if business_hours.is_all_day:
        return END_OF_DAY
    return business_hours.close_hour
