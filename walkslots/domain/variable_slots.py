"""
Start/end enumeration for variable-duration services (single-day dog sitting).

Unlike walks, sitting ranges may wrap past midnight. A wrapping range
``[start, end)`` with ``end <= start`` covers ``[start, 1440) U [0, end)``.
All arithmetic stays in minute space: an end cursor past 1440 belongs to
the next calendar day and is folded back for membership tests and display.
"""

from typing import List, Optional, Sequence

from .exceptions import ValidationError
from .models import AvailabilityRange
from .time_parser import MINUTES_PER_DAY, fold_minutes

SITTING_STEP_MINUTES = 30
SITTING_MIN_DURATION_MINUTES = 60


class VariableDurationSlotGenerator:
    """
    Enumerates sitting start times on a fixed grid and, for a chosen start,
    the end times that stay inside the same availability range.
    """

    def __init__(
        self,
        min_duration_minutes: int = SITTING_MIN_DURATION_MINUTES,
        step_minutes: int = SITTING_STEP_MINUTES,
    ):
        if min_duration_minutes <= 0:
            raise ValidationError(
                f"Minimum duration must be greater than zero, got {min_duration_minutes}"
            )
        if step_minutes <= 0:
            raise ValidationError(f"Step must be greater than zero, got {step_minutes}")
        self.min_duration_minutes = min_duration_minutes
        self.step_minutes = step_minutes

    def start_times(
        self,
        ranges: Sequence[AvailabilityRange],
        min_duration_minutes: Optional[int] = None,
        step_minutes: Optional[int] = None,
    ) -> List[int]:
        """
        Return every grid minute (00:00, 00:30, ...) at which a booking of at
        least the minimum duration can start.
        """
        min_duration = self._resolve_min_duration(min_duration_minutes)
        step = self._resolve_step(step_minutes)

        return [
            candidate
            for candidate in range(0, MINUTES_PER_DAY, step)
            if any(self._is_valid_start(r, candidate, min_duration) for r in ranges)
        ]

    def end_times(
        self,
        ranges: Sequence[AvailabilityRange],
        chosen_start: int,
        min_duration_minutes: Optional[int] = None,
        step_minutes: Optional[int] = None,
    ) -> List[int]:
        """
        Return the end times compatible with ``chosen_start``.

        The first range containing the start wins. Returned values are
        minute-of-day; a value not after ``chosen_start`` lies on the next
        calendar day. An empty list means the start has no compatible end.
        """
        min_duration = self._resolve_min_duration(min_duration_minutes)
        step = self._resolve_step(step_minutes)

        availability = self.find_range(ranges, chosen_start)
        if availability is None:
            return []

        limit = self._end_limit(availability, chosen_start)
        ends: List[int] = []
        cursor = chosen_start + min_duration

        # Stop before a full day has elapsed so an end never coincides with the start
        while cursor <= limit and cursor < chosen_start + MINUTES_PER_DAY:
            ends.append(fold_minutes(cursor))
            cursor += step

        return ends

    @staticmethod
    def find_range(
        ranges: Sequence[AvailabilityRange],
        minute: int,
    ) -> Optional[AvailabilityRange]:
        """Return the first range containing ``minute``, or None."""
        for availability in ranges:
            if availability.contains(minute):
                return availability
        return None

    @staticmethod
    def _is_valid_start(availability: AvailabilityRange, start: int, min_duration: int) -> bool:
        if not availability.wraps:
            return start >= availability.start and start + min_duration <= availability.end

        # Evening segment: the minimum duration may run into the next day
        if start >= availability.start:
            return True
        # Morning segment
        return start < availability.end and start + min_duration <= availability.end

    @staticmethod
    def _end_limit(availability: AvailabilityRange, start: int) -> int:
        """Latest end for ``start`` in the start day's minute space."""
        if availability.wraps and start >= availability.start:
            return availability.end + MINUTES_PER_DAY
        return availability.end

    def _resolve_min_duration(self, override: Optional[int]) -> int:
        min_duration = self.min_duration_minutes if override is None else override
        if min_duration <= 0:
            raise ValidationError(f"Minimum duration must be greater than zero, got {min_duration}")
        return min_duration

    def _resolve_step(self, override: Optional[int]) -> int:
        step = self.step_minutes if override is None else override
        if step <= 0:
            raise ValidationError(f"Step must be greater than zero, got {step}")
        return step
