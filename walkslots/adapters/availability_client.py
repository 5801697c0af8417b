"""
HTTP client for the booking site's availability API.
"""

import asyncio
import logging
from datetime import date
from typing import Any, Dict, List, Optional

import requests

from ..domain.exceptions import AvailabilityAPIError, FormatError
from ..domain.models import AvailabilityRange, SittingAvailability

logger = logging.getLogger(__name__)


def parse_ranges(raw_ranges: Optional[List[Dict[str, Any]]]) -> List[AvailabilityRange]:
    """
    Decode ``[{"start": "HH:mm", "end": "HH:mm"}, ...]``.

    A malformed entry is logged and skipped; it never fails the whole response.
    """
    ranges: List[AvailabilityRange] = []

    for raw in raw_ranges or []:
        try:
            ranges.append(AvailabilityRange.from_dict(raw))
        except FormatError as exc:
            logger.warning("Skipping malformed availability range %r: %s", raw, exc)
            continue

    return ranges


def parse_sitting_response(data: Dict[str, Any]) -> SittingAvailability:
    """Decode a sitting availability response into the domain model."""
    # Multi-day responses carry start/end day ranges instead of availableRanges
    raw_ranges = data.get("availableRanges")
    if raw_ranges is None:
        raw_ranges = data.get("startDayRanges")

    return SittingAvailability(
        available=bool(data.get("available", False)),
        type=data.get("type", "single"),
        available_ranges=parse_ranges(raw_ranges),
        conflicts=list(data.get("conflicts") or []),
        conflict_details=list(data.get("conflictDetails") or []),
        message=data.get("message") or "",
    )


class AvailabilityClient:
    """
    Client for the availability endpoints of the booking site.

    ``GET /availability`` returns open ranges for walks on one day,
    ``GET /sitting-availability`` returns single- or multi-day sitting
    reports. The blocking ``requests`` calls run in a worker thread so the
    service layer can await them.
    """

    def __init__(self, base_url: str, timeout: float = 30.0, session: requests.Session | None = None):
        """
        Initialize the availability client.

        Args:
            base_url: API root, e.g. ``https://example.com/api/dog-walking``
            timeout: Request timeout in seconds
            session: Optional pre-configured requests session
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.headers = {"Accept": "application/json"}

    async def get_availability(
        self,
        day: date,
        service_type: str,
        exclude_booking_id: Optional[str] = None,
    ) -> List[AvailabilityRange]:
        """
        Fetch open ranges for a day and service.

        When rescheduling, ``exclude_booking_id`` tells the API to leave the
        booking's own calendar event out of the conflict set.

        Raises:
            AvailabilityAPIError: If the API call fails
        """
        params = {
            "date": day.strftime("%Y-%m-%d"),
            "service_type": service_type,
        }
        if exclude_booking_id is not None:
            params["exclude_booking_id"] = str(exclude_booking_id)

        data = await asyncio.to_thread(self._get_json, "availability", params)
        return parse_ranges(data.get("availableRanges"))

    async def get_sitting_availability(
        self,
        start_date: date,
        end_date: Optional[date] = None,
    ) -> SittingAvailability:
        """
        Fetch a sitting report: single-day when ``end_date`` is None or equal
        to ``start_date``, multi-day otherwise.

        Raises:
            AvailabilityAPIError: If the API call fails
        """
        if end_date is None or end_date == start_date:
            params = {"type": "single", "date": start_date.strftime("%Y-%m-%d")}
        else:
            params = {
                "type": "multi",
                "start_date": start_date.strftime("%Y-%m-%d"),
                "end_date": end_date.strftime("%Y-%m-%d"),
            }

        data = await asyncio.to_thread(self._get_json, "sitting-availability", params)
        return parse_sitting_response(data)

    def _get_json(self, endpoint: str, params: Dict[str, str]) -> Dict[str, Any]:
        url = f"{self.base_url}/{endpoint}"
        logger.debug("GET %s params=%s", url, params)

        try:
            response = self.session.get(
                url,
                headers=self.headers,
                params=params,
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()

        except requests.exceptions.RequestException as e:
            logger.error("Availability request to %s failed: %s", url, e)
            raise AvailabilityAPIError(f"Failed to fetch availability: {e}") from e
        except ValueError as e:
            raise AvailabilityAPIError(f"Invalid JSON from {url}: {e}") from e

        if not isinstance(data, dict):
            raise AvailabilityAPIError(f"Unexpected response from {url}: {data!r}")

        return data
