"""
Domain-specific exception hierarchy for the slot scheduling core.
"""


class SlotError(Exception):
    """Base class for all application-level errors."""


class FormatError(SlotError, ValueError):
    """Raised when an "HH:mm" string or minute-of-day value is malformed."""


class ValidationError(SlotError, ValueError):
    """Raised when a request is well-formed but not acceptable (e.g. duration <= 0)."""


class AvailabilityAPIError(SlotError):
    """Raised when availability data cannot be fetched or parsed."""
