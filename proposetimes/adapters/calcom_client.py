"""
Cal.com API client for fetching public event-type slots.
"""

import logging
from typing import Any, Dict, List, Optional

import pendulum
import requests
from pendulum import DateTime

from ..domain.exceptions import ProviderAPIError, ProviderConfigError
from ..domain.models import FetchSlotsResult, LinkInfo, TimeSlot

logger = logging.getLogger(__name__)

DEFAULT_DURATIONS = [15, 30, 45, 60]
DEFAULT_DURATION = 30


class CalComClient:
    """
    Client for the public Cal.com v2 API.

    No authentication is needed: the event type and its slots are looked up
    by username and event slug.
    """

    name = "Cal.com"
    API_ENDPOINT = "https://api.cal.com/v2"
    EVENT_TYPES_API_VERSION = "2024-06-14"
    SLOTS_API_VERSION = "2024-09-04"

    def __init__(
        self,
        username: str,
        event_slug: str,
        session: Optional[requests.Session] = None,
        timeout: int = 30
    ):
        self.username = username
        self.event_slug = event_slug
        self.session = session or requests.Session()
        self.timeout = timeout

    def fetch_slots(self, start_date: DateTime, end_date: DateTime) -> FetchSlotsResult:
        """
        Fetch open slots for the event type between two dates (inclusive).

        Slot end times are derived from the event type's default length.

        Raises:
            ProviderConfigError: If username or event slug is missing
            ProviderAPIError: If the slots call fails or returns invalid JSON
        """
        if not self.username or not self.event_slug:
            raise ProviderConfigError("Cal.com username and event slug are required")

        link_info = self.fetch_link_info()

        params = {
            "eventTypeSlug": self.event_slug,
            "username": self.username,
            "start": start_date.format("YYYY-MM-DD"),
            "end": end_date.format("YYYY-MM-DD"),
            "timeZone": "UTC",
        }

        try:
            response = self.session.get(
                f"{self.API_ENDPOINT}/slots",
                headers=self._headers(self.SLOTS_API_VERSION),
                params=params,
                timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            raise ProviderAPIError(f"Failed to fetch slots from Cal.com: {e}") from e

        logger.debug("Cal.com slots response: %s", response.status_code)

        if not response.ok:
            raise ProviderAPIError(f"Cal.com API error: {response.status_code} - {response.text}")

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderAPIError(f"Invalid JSON from Cal.com: {response.text}") from e

        if not isinstance(data, dict):
            raise ProviderAPIError(f"Unexpected Cal.com slots response: {response.text}")

        slots = self._parse_slots(data, link_info.default_duration)
        logger.info("Cal.com returned %d slot(s) for %s/%s", len(slots), self.username, self.event_slug)

        return FetchSlotsResult(slots=slots, link_info=link_info)

    def fetch_link_info(self) -> LinkInfo:
        """
        Look up the event type to learn its id and meeting lengths.

        Falls back to default durations when the lookup fails, since the
        slots endpoint works without it.
        """
        fallback = LinkInfo(
            id=f"{self.username}/{self.event_slug}",
            slug=self.event_slug,
            durations=list(DEFAULT_DURATIONS),
            default_duration=DEFAULT_DURATION
        )

        try:
            response = self.session.get(
                f"{self.API_ENDPOINT}/event-types",
                headers=self._headers(self.EVENT_TYPES_API_VERSION),
                params={"username": self.username, "eventSlug": self.event_slug},
                timeout=self.timeout
            )
            if not response.ok:
                logger.warning("Cal.com event type lookup failed: %s", response.status_code)
                return fallback
            data = response.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.warning("Cal.com event type lookup failed: %s", e)
            return fallback

        event_types = data.get("data") if isinstance(data, dict) else None
        if not isinstance(event_types, list):
            return fallback

        event_types = [et for et in event_types if isinstance(et, dict)]
        if not event_types:
            logger.warning("Cal.com returned no usable event types for %s", self.event_slug)
            return fallback

        event_type = next(
            (et for et in event_types if et.get("slug") == self.event_slug),
            event_types[0]
        )

        length = event_type.get("lengthInMinutes") or DEFAULT_DURATION
        durations = event_type.get("lengthInMinutesOptions") or [length]

        return LinkInfo(
            id=str(event_type.get("id", fallback.id)),
            slug=event_type.get("slug", self.event_slug),
            durations=list(durations),
            default_duration=length
        )

    def _parse_slots(self, data: Dict[str, Any], duration_minutes: int) -> List[TimeSlot]:
        """
        Flatten Cal.com's date-grouped slots.

        Response format:
        {
            "status": "success",
            "data": {
                "2026-01-07": [{"start": "2026-01-07T10:00:00Z"}]
            }
        }

        Older API versions nest the mapping under ``data.slots`` and use
        ``time`` instead of ``start``.
        """
        grouped = data.get("data") or {}
        if not isinstance(grouped, dict):
            return []
        if isinstance(grouped.get("slots"), dict):
            grouped = grouped["slots"]

        slots: List[TimeSlot] = []

        for day_key in sorted(grouped):
            day_slots = grouped[day_key]
            if not isinstance(day_slots, list):
                logger.warning("Skipping malformed Cal.com slots for %s: %r", day_key, day_slots)
                continue

            for item in day_slots:
                if not isinstance(item, dict):
                    logger.warning("Skipping malformed Cal.com slot %r", item)
                    continue

                start_at = item.get("start") or item.get("time")
                if not start_at:
                    continue

                try:
                    start = pendulum.parse(start_at)
                    if not isinstance(start, DateTime):
                        raise ValueError(f"Could not parse datetime: {start_at}")
                    start = start.in_timezone("UTC")
                    slots.append(TimeSlot(start=start, end=start.add(minutes=duration_minutes)))
                except (TypeError, ValueError) as e:
                    logger.warning("Skipping malformed Cal.com slot %s: %s", item, e)

        return slots

    @staticmethod
    def _headers(api_version: str) -> Dict[str, str]:
        return {
            "cal-api-version": api_version,
            "Content-Type": "application/json"
        }
