"""
Domain layer - Pure scheduling logic without external dependencies.
"""

from .exceptions import AvailabilityAPIError, FormatError, SlotError, ValidationError
from .fixed_slots import FixedDurationSlotGenerator
from .models import (
    AvailabilityRange,
    BookingWindow,
    CandidateSlot,
    ServiceRequest,
    SittingAvailability,
)
from .past_filter import PastSlotFilter
from .sitting import MultiDaySittingResolver, SittingCheckState, SittingResolution
from .time_parser import format_time, parse_time
from .variable_slots import VariableDurationSlotGenerator

__all__ = [
    "AvailabilityAPIError",
    "AvailabilityRange",
    "BookingWindow",
    "CandidateSlot",
    "FixedDurationSlotGenerator",
    "FormatError",
    "MultiDaySittingResolver",
    "PastSlotFilter",
    "ServiceRequest",
    "SittingAvailability",
    "SittingCheckState",
    "SittingResolution",
    "SlotError",
    "ValidationError",
    "VariableDurationSlotGenerator",
    "format_time",
    "parse_time",
]
