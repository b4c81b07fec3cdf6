"""
SavvyCal API client for fetching open scheduling-link slots.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

import requests
from pendulum import DateTime

from ..domain.exceptions import ProviderAPIError, ProviderConfigError
from ..domain.models import FetchSlotsResult, LinkInfo, TimeSlot

logger = logging.getLogger(__name__)


class SavvyCalClient:
    """
    Client for the SavvyCal REST API.

    Resolves the configured scheduling link by slug, then reads its open
    slots for the requested window.
    """

    name = "SavvyCal"
    API_ENDPOINT = "https://api.savvycal.com/v1"

    def __init__(
        self,
        token: str,
        link_slug: str,
        session: Optional[requests.Session] = None,
        timeout: int = 30
    ):
        """
        Initialize the SavvyCal client.

        Args:
            token: Personal access token
            link_slug: Slug of the scheduling link to read availability from
            session: Optional pre-configured requests session
            timeout: Request timeout in seconds
        """
        self.token = token
        self.link_slug = link_slug
        self.session = session or requests.Session()
        self.timeout = timeout
        self.headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json"
        }

    def fetch_slots(self, start_date: DateTime, end_date: DateTime) -> FetchSlotsResult:
        """
        Fetch open slots for the scheduling link.

        The window is widened to whole days: from the start of start_date to
        the end of end_date.

        Raises:
            ProviderConfigError: If token or link slug is missing
            ProviderAPIError: If an API call fails or returns invalid data
        """
        if not self.token or not self.link_slug:
            raise ProviderConfigError("SavvyCal token and link slug are required")

        link_info = self.fetch_link_info()

        from_str = start_date.start_of("day").in_timezone("UTC").to_iso8601_string()
        to_str = end_date.end_of("day").in_timezone("UTC").to_iso8601_string()

        data = self._get_json(
            f"{self.API_ENDPOINT}/links/{link_info.id}/slots",
            params={"from": from_str, "to": to_str},
            what="slots"
        )

        raw_slots = self._extract_entries(data, ("data", "entries"), what="slots")
        slots = self._parse_slots(raw_slots)
        logger.info("SavvyCal returned %d slot(s) for link %s", len(slots), link_info.slug)

        return FetchSlotsResult(slots=slots, link_info=link_info)

    def fetch_link_info(self) -> LinkInfo:
        """
        Look up the configured scheduling link.

        Raises:
            ProviderAPIError: If the request fails or no link has the slug
        """
        data = self._get_json(f"{self.API_ENDPOINT}/links", what="links")
        links = self._extract_entries(data, ("entries", "data"), what="links")

        link = next((l for l in links if l.get("slug") == self.link_slug), None)

        if link is None:
            available = ", ".join(str(l.get("slug", "")) for l in links)
            raise ProviderAPIError(
                f'No scheduling link found with slug "{self.link_slug}". '
                f"Available: {available or 'none'}"
            )

        if link.get("id") is None:
            raise ProviderAPIError(f'SavvyCal link "{self.link_slug}" has no id')

        return LinkInfo(
            id=str(link["id"]),
            slug=link["slug"],
            durations=link.get("durations") or [30],
            default_duration=link.get("default_duration") or 30
        )

    def _get_json(self, url: str, what: str, params: Optional[Dict[str, str]] = None) -> Any:
        """GET a SavvyCal endpoint and decode its JSON body."""
        try:
            response = self.session.get(
                url,
                headers=self.headers,
                params=params,
                timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            raise ProviderAPIError(f"Failed to fetch {what} from SavvyCal: {e}") from e

        logger.debug("SavvyCal %s response: %s", what, response.status_code)

        if not response.ok:
            raise ProviderAPIError(f"SavvyCal API error fetching {what}: {response.status_code}")

        try:
            return response.json()
        except ValueError as e:
            raise ProviderAPIError(f"Invalid JSON from SavvyCal {what}") from e

    @staticmethod
    def _extract_entries(data: Any, keys: Sequence[str], what: str) -> List[Dict[str, Any]]:
        """
        Pull the list of entries out of a SavvyCal response.

        The API returns either a bare list or a mapping holding the list under
        one of ``keys``. Entries that are not objects are skipped.

        Raises:
            ProviderAPIError: If the body has neither shape
        """
        if isinstance(data, dict):
            entries = next((data[key] for key in keys if data.get(key)), [])
        else:
            entries = data

        if not isinstance(entries, list):
            raise ProviderAPIError(f"Unexpected SavvyCal {what} response: {data!r}")

        valid = [entry for entry in entries if isinstance(entry, dict)]
        if len(valid) != len(entries):
            logger.warning("Skipping %d malformed SavvyCal %s entries", len(entries) - len(valid), what)

        return valid

    def _parse_slots(self, raw_slots: List[Dict[str, Any]]) -> List[TimeSlot]:
        """Normalize SavvyCal slot entries, dropping malformed ones."""
        slots: List[TimeSlot] = []

        for item in raw_slots:
            start_at = item.get("start_at")
            end_at = item.get("end_at")

            if not start_at or not end_at:
                continue

            try:
                slots.append(TimeSlot.from_iso(start_at, end_at))
            except (TypeError, ValueError) as e:
                logger.warning("Skipping malformed SavvyCal slot %s: %s", item, e)

        return slots
