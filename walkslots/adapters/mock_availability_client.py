"""
Mock availability client for offline use and tests.
"""

import json
import logging
from datetime import date, timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..domain.models import AvailabilityRange, SittingAvailability
from ..domain.time_parser import MINUTES_PER_DAY, parse_time

logger = logging.getLogger(__name__)

WALK_DAY_START = 8 * 60
WALK_DAY_END = 20 * 60
SITTING_DAY_END = MINUTES_PER_DAY - 1  # 23:59
TRAVEL_BUFFER_MINUTES = 15


class MockAvailabilityClient:
    """
    Client that derives availability from bundled booking data.

    Loads existing bookings per day from ``mock_availability_data.json`` and
    subtracts them (plus a travel buffer) from the working day, the same way
    the real API computes free ranges. Days without data are fully free.
    """

    def __init__(self, data_file: Path | None = None):
        self.data_file = data_file or Path(__file__).parent / "mock_availability_data.json"
        self._load_bookings()

    def _load_bookings(self):
        """Load mock bookings from JSON file."""
        if self.data_file.exists():
            with open(self.data_file, "r", encoding="utf-8") as f:
                self.bookings: List[Dict[str, Any]] = json.load(f).get("bookings", [])
        else:
            # Fallback to empty if file doesn't exist
            self.bookings = []

    async def get_availability(
        self,
        day: date,
        service_type: str,
        exclude_booking_id: Optional[str] = None,
    ) -> List[AvailabilityRange]:
        """Free walk ranges for ``day``, ignoring the excluded booking's own footprint."""
        busy = self._busy_minutes(day, exclude_booking_id=exclude_booking_id)
        return self._subtract_busy_from_block(WALK_DAY_START, WALK_DAY_END, busy)

    async def get_sitting_availability(
        self,
        start_date: date,
        end_date: Optional[date] = None,
    ) -> SittingAvailability:
        if end_date is None or end_date == start_date:
            busy = self._busy_minutes(start_date, sitting_only=True)
            ranges = self._subtract_busy_from_block(0, SITTING_DAY_END, busy)
            return SittingAvailability(
                available=bool(ranges),
                type="single",
                available_ranges=ranges,
            )

        conflicts: List[str] = []
        details: List[str] = []
        current = start_date
        while current <= end_date:
            if self._busy_minutes(current, sitting_only=True):
                label = f"{current:%b} {current.day}"
                conflicts.append(label)
                details.append(f"{label}: Dog sitting conflict")
            current += timedelta(days=1)

        return SittingAvailability(
            available=not conflicts,
            type="multi",
            conflicts=conflicts,
            conflict_details=details,
        )

    def _busy_minutes(
        self,
        day: date,
        exclude_booking_id: Optional[str] = None,
        sitting_only: bool = False,
    ) -> List[tuple[int, int]]:
        """Busy intervals of ``day`` in minute space, padded by the travel buffer."""
        busy: List[tuple[int, int]] = []
        day_key = day.strftime("%Y-%m-%d")

        for booking in self.bookings:
            if booking.get("date") != day_key:
                continue
            if exclude_booking_id is not None and str(booking.get("id")) == str(exclude_booking_id):
                logger.debug("Excluding booking %s from busy times", exclude_booking_id)
                continue
            if sitting_only and booking.get("service") != "sitting":
                continue

            start = parse_time(booking["start"]) - TRAVEL_BUFFER_MINUTES
            end = parse_time(booking["end"]) + TRAVEL_BUFFER_MINUTES
            busy.append((max(start, 0), min(end, SITTING_DAY_END)))

        return sorted(busy)

    @staticmethod
    def _subtract_busy_from_block(
        block_start: int,
        block_end: int,
        busy: List[tuple[int, int]],
    ) -> List[AvailabilityRange]:
        """
        Subtract busy times from a block, yielding free ranges.

        Example:
        Block: 08:00 - 20:00
        Busy: [09:45-11:15, 13:45-15:15]
        Result: [08:00-09:45, 11:15-13:45, 15:15-20:00]
        """
        free: List[AvailabilityRange] = []
        current_start = block_start

        for busy_start, busy_end in busy:
            clipped_start = max(busy_start, block_start)
            clipped_end = min(busy_end, block_end)

            if current_start < clipped_start:
                free.append(AvailabilityRange(start=current_start, end=clipped_start))

            current_start = max(current_start, clipped_end)

        if current_start < block_end:
            free.append(AvailabilityRange(start=current_start, end=block_end))

        return free
