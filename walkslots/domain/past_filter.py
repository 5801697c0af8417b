"""
Removal of slots that have already started when the target day is today.
"""

from datetime import date
from typing import List, Sequence

from pendulum import DateTime

from .models import CandidateSlot, local_instant


class PastSlotFilter:
    """
    Drops elapsed slots for today's date.

    "Today" is decided by the local calendar date of ``now`` in the
    configured timezone, not by a 24-hour distance. ``now`` is always
    injected so the filter stays a pure function of its inputs.
    """

    def __init__(self, timezone: str = "Europe/London"):
        self.timezone = timezone

    def is_today(self, day: date, now: DateTime) -> bool:
        local_now = now.in_timezone(self.timezone)
        return (day.year, day.month, day.day) == (local_now.year, local_now.month, local_now.day)

    def filter(
        self,
        slots: Sequence[CandidateSlot],
        day: date,
        now: DateTime,
    ) -> List[CandidateSlot]:
        """Return the slots whose start instant is strictly after ``now`` (today only)."""
        if not self.is_today(day, now):
            return list(slots)

        return [
            slot for slot in slots
            if local_instant(day, slot.start, self.timezone) > now
        ]
