# backend/nkhuvo/services/slots/hold_store.py
"""
Redis slot holds.

Key format: slot_hold:{service_id}:{date}:{HH:00}
Value: hold token (uuid4)

SET NX EX per hour: the first writer wins, everybody else gets
SlotUnavailableError until the hold is released or expires.
"""

import logging
from datetime import date
from typing import Iterable
from uuid import uuid4

from redis import Redis

from .config import BookingConfig, get_booking_config, hour_to_time_str
from .errors import SlotUnavailableError


logger = logging.getLogger(__name__)

# Delete KEYS whose value is still ARGV[1]. Runs atomically on the server,
# so a hold that expired and was re-taken by another token survives.
RELEASE_SCRIPT = """
local deleted = 0
for _, key in ipairs(KEYS) do
  if redis.call("GET", key) == ARGV[1] then
    deleted = deleted + redis.call("DEL", key)
  end
end
return deleted
"""


def selection_hours(start_hour: int, end_hour: int | None) -> list[int]:
    """Hours a selection occupies: [start, end), or just start when there is no end."""
    if end_hour is None or end_hour <= start_hour:
        return [start_hour]
    return list(range(start_hour, end_hour))


class SlotHoldStore:
    """Short-lived per-hour holds taken while a booking is being saved."""

    KEY_PREFIX = "slot_hold"

    def __init__(self, redis: Redis, config: BookingConfig | None = None):
        self.redis = redis
        self.config = config or get_booking_config()

    def _key(self, service_id: int, dt: date, hour: int) -> str:
        return f"{self.KEY_PREFIX}:{service_id}:{dt.isoformat()}:{hour_to_time_str(hour)}"

    def acquire(self, service_id: int, dt: date, hours: Iterable[int]) -> str:
        """
        Hold every hour or none.

        Returns:
            Hold token, needed for release().

        Raises:
            SlotUnavailableError: one of the hours is already held.
        """
        token = str(uuid4())
        acquired: list[str] = []

        for hour in hours:
            key = self._key(service_id, dt, hour)
            if self.redis.set(key, token, nx=True, ex=self.config.hold_ttl_seconds):
                acquired.append(key)
                continue

            # Roll back the partial hold
            if acquired:
                self.redis.delete(*acquired)
            logger.warning(f"Slot hold conflict: {key}")
            raise SlotUnavailableError(
                f"{hour_to_time_str(hour)} on {dt} is being booked by someone else"
            )

        logger.info(f"Slot hold acquired: service={service_id} date={dt} hours={len(acquired)}")
        return token

    def release(self, service_id: int, dt: date, hours: Iterable[int], token: str) -> int:
        """
        Release hours held with token. Holds owned by others are left alone.

        Returns:
            Number of deleted keys.
        """
        keys = [self._key(service_id, dt, hour) for hour in hours]
        if not keys:
            return 0
        return int(self.redis.eval(RELEASE_SCRIPT, len(keys), *keys, token))
