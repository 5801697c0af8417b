"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .booking_planner import (
    AvailabilityClientProtocol,
    AvailabilityResult,
    AvailabilityStatus,
    BookingPlannerService,
    RequestSequencer,
    group_by_period,
)

__all__ = [
    "AvailabilityClientProtocol",
    "AvailabilityResult",
    "AvailabilityStatus",
    "BookingPlannerService",
    "RequestSequencer",
    "group_by_period",
]
