"""
Domain models for availability ranges, slots and booking windows.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional

import pendulum
from pendulum import DateTime

from .exceptions import FormatError, ValidationError
from .time_parser import MINUTES_PER_DAY, format_time, parse_time


@dataclass(frozen=True)
class AvailabilityRange:
    """
    An open interval on one calendar day, in minutes since local midnight.

    ``end <= start`` is legal and means the range wraps past midnight into
    the following day (e.g. 22:00 -> 02:00).
    """
    start: int
    end: int

    def __post_init__(self):
        for value in (self.start, self.end):
            if not 0 <= value < MINUTES_PER_DAY:
                raise FormatError(f"Minute of day must be in [0, {MINUTES_PER_DAY}), got {value}")

    @classmethod
    def from_strings(cls, start: str, end: str) -> "AvailabilityRange":
        """Build a range from two "HH:mm" strings."""
        return cls(start=parse_time(start), end=parse_time(end))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AvailabilityRange":
        """Build a range from an API payload entry ``{"start": "HH:mm", "end": "HH:mm"}``."""
        try:
            return cls.from_strings(data["start"], data["end"])
        except (KeyError, TypeError) as exc:
            raise FormatError(f"Invalid availability range payload: {data!r}") from exc

    @property
    def wraps(self) -> bool:
        """True if the range crosses midnight."""
        return self.end <= self.start

    def end_offset(self) -> int:
        """End of the range in the start day's minute space (past 1440 when wrapping)."""
        return self.end + MINUTES_PER_DAY if self.wraps else self.end

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return self.end_offset() - self.start

    def contains(self, minute: int) -> bool:
        """Check if a start minute falls inside the range (wrap aware, end exclusive)."""
        if self.wraps:
            return minute >= self.start or minute < self.end
        return self.start <= minute < self.end

    def __str__(self) -> str:
        suffix = " (+1 day)" if self.wraps else ""
        return f"{format_time(self.start)} - {format_time(self.end)}{suffix}"


@dataclass(frozen=True)
class ServiceRequest:
    """
    Slot parameters for one service.

    Exactly one of ``fixed_duration_minutes`` (walks) or
    ``min_duration_minutes`` (sitting) is set.
    """
    fixed_duration_minutes: Optional[int]
    min_duration_minutes: Optional[int]
    step_minutes: int

    def __post_init__(self):
        if (self.fixed_duration_minutes is None) == (self.min_duration_minutes is None):
            raise ValidationError(
                "Exactly one of fixed_duration_minutes or min_duration_minutes must be set"
            )
        duration = self.required_duration_minutes
        if duration <= 0:
            raise ValidationError(f"Duration must be greater than zero, got {duration}")
        if self.step_minutes <= 0:
            raise ValidationError(f"Step must be greater than zero, got {self.step_minutes}")

    @property
    def is_fixed(self) -> bool:
        return self.fixed_duration_minutes is not None

    @property
    def required_duration_minutes(self) -> int:
        """The duration every slot must at least cover."""
        if self.fixed_duration_minutes is not None:
            return self.fixed_duration_minutes
        return self.min_duration_minutes


@dataclass(frozen=True)
class CandidateSlot:
    """
    A bookable start time and, once known, its end time.

    For variable-duration services ``end`` stays ``None`` until the caller
    picks a start and asks for compatible ends.
    """
    start: int
    end: Optional[int] = None

    @property
    def crosses_midnight(self) -> bool:
        return self.end is not None and self.end <= self.start

    def format_display(self) -> str:
        """
        Format the slot for display.
        Format: HH:mm or HH:mm - HH:mm (+1 day when the end is on the next day)
        """
        if self.end is None:
            return format_time(self.start)
        suffix = " (+1 day)" if self.crosses_midnight else ""
        return f"{format_time(self.start)} - {format_time(self.end)}{suffix}"


def local_instant(day: date, minute_of_day: int, timezone: str) -> DateTime:
    """Combine a calendar day and a minute-of-day into an absolute instant."""
    if not 0 <= minute_of_day < MINUTES_PER_DAY:
        raise FormatError(f"Minute of day must be in [0, {MINUTES_PER_DAY}), got {minute_of_day}")
    return pendulum.datetime(
        day.year,
        day.month,
        day.day,
        minute_of_day // 60,
        minute_of_day % 60,
        tz=timezone,
    )


@dataclass(frozen=True)
class BookingWindow:
    """
    The resolved booking: an absolute start/end pair in the local timezone.

    Invariant: start_instant must be before end_instant.
    """
    start_instant: DateTime
    end_instant: DateTime

    def __post_init__(self):
        if self.end_instant <= self.start_instant:
            raise ValidationError(
                f"End time {self.end_instant} must be after start time {self.start_instant}"
            )

    @classmethod
    def from_slot(cls, day: date, slot: CandidateSlot, timezone: str) -> "BookingWindow":
        """
        Build a window for a slot on a single calendar day.

        An end that is not after the start lies on the following day.
        """
        if slot.end is None:
            raise ValidationError("An end time must be chosen before booking")
        start = local_instant(day, slot.start, timezone)
        end_day = pendulum.Date(day.year, day.month, day.day)
        if slot.crosses_midnight:
            end_day = end_day.add(days=1)
        end = local_instant(end_day, slot.end, timezone)
        return cls(start_instant=start, end_instant=end)

    @classmethod
    def from_days(
        cls,
        start_day: date,
        start_minute: int,
        end_day: date,
        end_minute: int,
        timezone: str,
    ) -> "BookingWindow":
        """Build a window from free-form multi-day picks."""
        return cls(
            start_instant=local_instant(start_day, start_minute, timezone),
            end_instant=local_instant(end_day, end_minute, timezone),
        )

    def duration_minutes(self) -> int:
        return int((self.end_instant - self.start_instant).total_seconds() / 60)

    def to_payload(self, service_id: str) -> Dict[str, str]:
        """Serialize for the booking-creation endpoint (ISO-8601 instants)."""
        return {
            "service_type": service_id,
            "start_time": self.start_instant.to_iso8601_string(),
            "end_time": self.end_instant.to_iso8601_string(),
        }

    def __str__(self) -> str:
        return f"{self.start_instant.format('DD.MM.YYYY HH:mm')} - {self.end_instant.format('DD.MM.YYYY HH:mm')}"


@dataclass
class SittingAvailability:
    """
    Day-by-day report returned by the sitting availability endpoint.
    """
    available: bool
    type: str  # "single" or "multi"
    available_ranges: List[AvailabilityRange] = field(default_factory=list)
    conflicts: List[str] = field(default_factory=list)
    conflict_details: List[str] = field(default_factory=list)
    message: str = ""
