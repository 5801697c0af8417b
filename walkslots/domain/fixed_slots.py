"""
Slot enumeration for fixed-duration walk services.
"""

from typing import Iterator, List, Optional, Sequence

from .exceptions import ValidationError
from .models import AvailabilityRange, CandidateSlot

WALK_STEP_MINUTES = 15


class FixedDurationSlotGenerator:
    """
    Enumerates start times for services with a fixed length (Meet & Greet,
    Quick Walk, Solo Walk).

    Algorithm: for each range walk a cursor from ``range.start`` in
    ``step_minutes`` increments and emit every cursor whose slot still ends
    on or before ``range.end``. Ranges that wrap past midnight produce no
    slots; walks are only offered inside a single calendar day.
    """

    def __init__(self, step_minutes: int = WALK_STEP_MINUTES):
        if step_minutes <= 0:
            raise ValidationError(f"Step must be greater than zero, got {step_minutes}")
        self.step_minutes = step_minutes

    def generate(
        self,
        ranges: Sequence[AvailabilityRange],
        duration_minutes: int,
        step_minutes: Optional[int] = None,
    ) -> List[CandidateSlot]:
        """
        Generate all slots of ``duration_minutes`` that fit the ranges.

        ``step_minutes`` overrides the generator's step for this call. Order
        follows the input ranges, then ascending start time. Slots from
        overlapping ranges are not deduplicated.
        """
        return list(self.iter_slots(ranges, duration_minutes, step_minutes))

    def iter_slots(
        self,
        ranges: Sequence[AvailabilityRange],
        duration_minutes: int,
        step_minutes: Optional[int] = None,
    ) -> Iterator[CandidateSlot]:
        if duration_minutes <= 0:
            raise ValidationError(f"Duration must be greater than zero, got {duration_minutes}")
        step = self.step_minutes if step_minutes is None else step_minutes
        if step <= 0:
            raise ValidationError(f"Step must be greater than zero, got {step}")

        for availability in ranges:
            yield from self._slots_in_range(availability, duration_minutes, step)

    @staticmethod
    def _slots_in_range(
        availability: AvailabilityRange,
        duration_minutes: int,
        step_minutes: int,
    ) -> Iterator[CandidateSlot]:
        if availability.wraps:
            return

        cursor = availability.start
        while cursor + duration_minutes <= availability.end:
            yield CandidateSlot(start=cursor, end=cursor + duration_minutes)
            cursor += step_minutes
