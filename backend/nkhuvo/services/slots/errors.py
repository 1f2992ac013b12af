# backend/nkhuvo/services/slots/errors.py
"""
Errors raised by the slots engine.

ConfigurationError      → bad business hours, fatal at load time
InvalidSelectionError   → selection never valid for current config
StaleAvailabilityError  → selection was valid, a reservation took it since
"""


class SlotEngineError(Exception):
    """Base class for slots engine errors."""


class ConfigurationError(SlotEngineError):
    """Malformed service availability configuration."""


class SelectionError(SlotEngineError):
    """A (date, start, end) selection was rejected."""


class InvalidSelectionError(SelectionError):
    """Selection is not among the options the configuration allows."""


class StaleAvailabilityError(SelectionError):
    """Selection collides with a reservation accepted after it was offered."""


class SlotUnavailableError(StaleAvailabilityError):
    """Another booking currently holds one of the requested hours."""
