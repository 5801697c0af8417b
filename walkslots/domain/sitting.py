"""
Multi-day dog sitting feasibility.

Multi-day bookings are not slot-quantized: start and end times are picked
freely from a 24-hour list and only need ``end_instant > start_instant``.
The resolver turns the availability API's day-by-day conflict report into a
feasibility flag plus the list of blocked days.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import List

from .exceptions import ValidationError
from .models import SittingAvailability
from .time_parser import MINUTES_PER_DAY


class SittingCheckState(str, Enum):
    """Lifecycle of one date-range availability query."""
    IDLE = "idle"
    CHECKING = "checking"
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"


@dataclass
class SittingResolution:
    """Outcome of a multi-day feasibility check."""
    feasible: bool
    conflicts: List[str] = field(default_factory=list)
    conflict_details: List[str] = field(default_factory=list)
    message: str = ""
    load_failed: bool = False  # availability could not be checked

    @property
    def state(self) -> SittingCheckState:
        return SittingCheckState.AVAILABLE if self.feasible else SittingCheckState.UNAVAILABLE


def is_multi_day(start_date: date, end_date: date) -> bool:
    """Branch condition between single-day (slot based) and multi-day sitting."""
    return start_date != end_date


def day_time_options(step_minutes: int = 30) -> List[int]:
    """Full-day pick list used for free-form multi-day start/end times."""
    if step_minutes <= 0:
        raise ValidationError(f"Step must be greater than zero, got {step_minutes}")
    return list(range(0, MINUTES_PER_DAY, step_minutes))


class MultiDaySittingResolver:
    """
    Resolves a multi-day sitting request against a conflict report.
    """

    def resolve(
        self,
        start_date: date,
        end_date: date,
        report: SittingAvailability,
    ) -> SittingResolution:
        """
        Decide feasibility for ``start_date``..``end_date``.

        Raises:
            ValidationError: If the end date is not after the start date. Equal
                dates are single-day sitting and must be handled by the
                variable-duration generator instead.
        """
        if not is_multi_day(start_date, end_date):
            raise ValidationError(
                "Start and end date are the same day; use single-day sitting instead"
            )
        if end_date < start_date:
            raise ValidationError(f"End date {end_date} must be after start date {start_date}")

        conflicts = list(report.conflicts)
        feasible = report.available and not conflicts

        message = report.message
        if not message:
            message = (
                f"Available for all {(end_date - start_date).days + 1} days"
                if feasible
                else f"Unavailable on: {', '.join(conflicts) or 'requested dates'}"
            )

        return SittingResolution(
            feasible=feasible,
            conflicts=conflicts,
            conflict_details=list(report.conflict_details),
            message=message,
        )
