"""
Application services for planning a booking from live availability.

The service coordinates fetching availability ranges via a client adapter and
delegates slot enumeration to the domain generators. Each fetch is stamped
with a monotonically increasing request id; a response that arrives after a
newer request was issued is discarded (last request wins).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Callable, Dict, List, Optional, Protocol, Sequence

import pendulum
from pendulum import DateTime

from ..config import AppConfig
from ..domain.exceptions import AvailabilityAPIError, ValidationError
from ..domain.fixed_slots import FixedDurationSlotGenerator
from ..domain.models import (
    AvailabilityRange,
    BookingWindow,
    CandidateSlot,
    ServiceRequest,
    SittingAvailability,
)
from ..domain.past_filter import PastSlotFilter
from ..domain.sitting import (
    MultiDaySittingResolver,
    SittingCheckState,
    SittingResolution,
    is_multi_day,
)
from ..domain.variable_slots import VariableDurationSlotGenerator

logger = logging.getLogger(__name__)

NO_AVAILABILITY_MESSAGE = "No availability for this day."
NO_SLOTS_MESSAGE = "No time slots available."
LOAD_ERROR_MESSAGE = "Could not load availability, please try again."


class AvailabilityClientProtocol(Protocol):
    """Protocol describing the availability client behaviour needed by the service."""

    async def get_availability(
        self,
        day: date,
        service_type: str,
        exclude_booking_id: Optional[str] = None,
    ) -> List[AvailabilityRange]:
        """Return open ranges for one day."""

    async def get_sitting_availability(
        self,
        start_date: date,
        end_date: Optional[date] = None,
    ) -> SittingAvailability:
        """Return a single- or multi-day sitting report."""


class AvailabilityStatus(str, Enum):
    OK = "ok"
    NO_AVAILABILITY = "no_availability"  # API returned no ranges
    NO_SLOTS = "no_slots"  # ranges exist but nothing fits
    ERROR = "error"  # availability could not be checked


_STATUS_MESSAGES = {
    AvailabilityStatus.OK: "",
    AvailabilityStatus.NO_AVAILABILITY: NO_AVAILABILITY_MESSAGE,
    AvailabilityStatus.NO_SLOTS: NO_SLOTS_MESSAGE,
    AvailabilityStatus.ERROR: LOAD_ERROR_MESSAGE,
}


@dataclass
class AvailabilityResult:
    """Slots offered for one day and service."""
    day: date
    service_id: str
    request: ServiceRequest
    status: AvailabilityStatus
    request_id: int
    ranges: List[AvailabilityRange] = field(default_factory=list)
    slots: List[CandidateSlot] = field(default_factory=list)

    @property
    def message(self) -> str:
        return _STATUS_MESSAGES[self.status]

    @property
    def load_failed(self) -> bool:
        return self.status is AvailabilityStatus.ERROR


class RequestSequencer:
    """Hands out increasing request ids and tells whether one is still the latest."""

    def __init__(self) -> None:
        self._latest = 0

    def next(self) -> int:
        self._latest += 1
        return self._latest

    def is_current(self, request_id: int) -> bool:
        return request_id == self._latest


def group_by_period(slots: Sequence[CandidateSlot]) -> Dict[str, List[CandidateSlot]]:
    """Bucket slots into Morning (< 12:00), Afternoon (12:00-16:59) and Evening."""
    groups: Dict[str, List[CandidateSlot]] = {"Morning": [], "Afternoon": [], "Evening": []}

    for slot in slots:
        if slot.start < 12 * 60:
            groups["Morning"].append(slot)
        elif slot.start < 17 * 60:
            groups["Afternoon"].append(slot)
        else:
            groups["Evening"].append(slot)

    return groups


class BookingPlannerService:
    """
    Orchestrates availability retrieval, slot generation and booking windows.

    Dependency inversion toward a protocol makes it easy to plug in the real
    HTTP adapter or the mock implementation in tests.
    """

    def __init__(
        self,
        availability_client: AvailabilityClientProtocol,
        config: AppConfig,
        clock: Callable[[], DateTime] | None = None,
    ) -> None:
        self._client = availability_client
        self._config = config
        self._clock = clock or (lambda: pendulum.now(config.timezone))
        self._past_filter = PastSlotFilter(timezone=config.timezone)
        self._resolver = MultiDaySittingResolver()
        self._day_requests = RequestSequencer()
        self._sitting_requests = RequestSequencer()
        self.sitting_state = SittingCheckState.IDLE

    async def load_day(
        self,
        *,
        day: date,
        service_id: str,
        exclude_booking_id: Optional[str] = None,
        now: DateTime | None = None,
    ) -> AvailabilityResult | None:
        """
        Fetch availability for ``day`` and compute the slots for a service.

        ``exclude_booking_id`` must be passed when moving an existing booking
        so its own calendar footprint does not block the new slot.

        Returns None when a newer ``load_day`` call was issued while this one
        was in flight.
        """
        service = self._config.get_service(service_id)
        request = self._config.service_request(service.id)
        request_id = self._day_requests.next()

        try:
            if service.is_sitting:
                report = await self._client.get_sitting_availability(day, None)
                ranges = report.available_ranges
            else:
                ranges = await self._client.get_availability(
                    day,
                    service.id,
                    exclude_booking_id=exclude_booking_id,
                )
        except AvailabilityAPIError as exc:
            if not self._day_requests.is_current(request_id):
                logger.warning("Discarding stale failed availability request %d", request_id)
                return None
            logger.error("Could not load availability for %s on %s: %s", service.id, day, exc)
            return AvailabilityResult(
                day=day,
                service_id=service.id,
                request=request,
                status=AvailabilityStatus.ERROR,
                request_id=request_id,
            )

        if not self._day_requests.is_current(request_id):
            logger.warning("Discarding stale availability response %d for %s", request_id, day)
            return None

        logger.debug(
            "%d open range(s), %d free minutes on %s",
            len(ranges),
            sum(r.duration_minutes() for r in ranges),
            day,
        )
        slots = self.calculate_slots(ranges, request)
        slots = self._past_filter.filter(slots, day, now or self._clock())

        if not ranges:
            status = AvailabilityStatus.NO_AVAILABILITY
        elif not slots:
            status = AvailabilityStatus.NO_SLOTS
        else:
            status = AvailabilityStatus.OK

        return AvailabilityResult(
            day=day,
            service_id=service.id,
            request=request,
            status=status,
            request_id=request_id,
            ranges=ranges,
            slots=slots,
        )

    @staticmethod
    def calculate_slots(
        ranges: Sequence[AvailabilityRange],
        request: ServiceRequest,
    ) -> List[CandidateSlot]:
        """Enumerate candidate slots; sitting slots carry no end until a start is chosen."""
        if request.is_fixed:
            generator = FixedDurationSlotGenerator(step_minutes=request.step_minutes)
            return generator.generate(ranges, request.fixed_duration_minutes)

        generator = VariableDurationSlotGenerator(
            min_duration_minutes=request.min_duration_minutes,
            step_minutes=request.step_minutes,
        )
        return [CandidateSlot(start=start) for start in generator.start_times(ranges)]

    def sitting_end_slots(self, result: AvailabilityResult, chosen_start: int) -> List[CandidateSlot]:
        """Complete slots (start + end) for a chosen sitting start; empty if none fit."""
        if result.request.is_fixed:
            raise ValidationError(f"Service '{result.service_id}' has a fixed duration")

        generator = VariableDurationSlotGenerator(
            min_duration_minutes=result.request.min_duration_minutes,
            step_minutes=result.request.step_minutes,
        )
        return [
            CandidateSlot(start=chosen_start, end=end)
            for end in generator.end_times(result.ranges, chosen_start)
        ]

    def book_slot(self, result: AvailabilityResult, slot: CandidateSlot) -> BookingWindow:
        """Turn a chosen slot into absolute instants on the result's day."""
        return BookingWindow.from_slot(result.day, slot, self._config.timezone)

    def book_multi_day(
        self,
        *,
        start_day: date,
        start_minute: int,
        end_day: date,
        end_minute: int,
    ) -> BookingWindow:
        """
        Build a multi-day sitting window from free-form picks.

        Raises:
            ValidationError: If the end instant is not after the start instant
        """
        return BookingWindow.from_days(
            start_day,
            start_minute,
            end_day,
            end_minute,
            self._config.timezone,
        )

    async def check_sitting(
        self,
        *,
        start_date: date,
        end_date: date,
        now: DateTime | None = None,
    ) -> AvailabilityResult | SittingResolution | None:
        """
        Check sitting for ``start_date``..``end_date``.

        Equal dates are single-day sitting: the day's start times are loaded
        as an ``AvailabilityResult``. Any other range goes through the
        multi-day check and yields a ``SittingResolution``.

        Raises:
            ValueError: If no sitting service is configured
            ValidationError: If the end date is before the start date
        """
        if is_multi_day(start_date, end_date):
            return await self.check_multi_day_sitting(start_date=start_date, end_date=end_date)

        sitting = self._config.sitting_service()
        logger.debug("Same-day sitting on %s, loading start times", start_date)
        return await self.load_day(day=start_date, service_id=sitting.id, now=now)

    async def check_multi_day_sitting(
        self,
        *,
        start_date: date,
        end_date: date,
    ) -> SittingResolution | None:
        """
        Check multi-day sitting feasibility.

        Every call moves the state machine back to CHECKING and discards the
        previous result. Returns None for a response superseded by a newer
        call.

        Raises:
            ValidationError: If the dates are equal (single-day sitting) or the
                end date is before the start date
        """
        if not is_multi_day(start_date, end_date):
            raise ValidationError(
                "Start and end date are the same day; use single-day sitting instead"
            )
        if end_date < start_date:
            raise ValidationError(f"End date {end_date} must be after start date {start_date}")

        request_id = self._sitting_requests.next()
        self.sitting_state = SittingCheckState.CHECKING

        try:
            report = await self._client.get_sitting_availability(start_date, end_date)
        except AvailabilityAPIError as exc:
            if not self._sitting_requests.is_current(request_id):
                logger.warning("Discarding stale failed sitting request %d", request_id)
                return None
            logger.error("Could not check sitting for %s - %s: %s", start_date, end_date, exc)
            self.sitting_state = SittingCheckState.UNAVAILABLE
            return SittingResolution(feasible=False, message=LOAD_ERROR_MESSAGE, load_failed=True)

        if not self._sitting_requests.is_current(request_id):
            logger.warning("Discarding stale sitting response %d", request_id)
            return None

        resolution = self._resolver.resolve(start_date, end_date, report)
        self.sitting_state = resolution.state
        return resolution
