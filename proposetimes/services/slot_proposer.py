"""
Application services for proposing meeting slots.

The service coordinates fetching availability via a provider client adapter
and delegates the choice of slots to the domain-level ``SlotSelector``. This
keeps the CLI thin and improves testability by allowing the provider
dependency to be replaced via a simple protocol.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Protocol

from pendulum import DateTime

from ..domain.models import FetchSlotsResult, LinkInfo, TimeSlot
from ..domain.slot_selector import SlotSelector

logger = logging.getLogger(__name__)

# Offered first whenever the link supports it
PREFERRED_DURATION = 25


class ProviderClientProtocol(Protocol):
    """Protocol describing the provider client behaviour needed by the service."""

    name: str

    def fetch_slots(self, start_date: DateTime, end_date: DateTime) -> FetchSlotsResult:
        """Return raw open slots and link metadata."""


@dataclass
class ProposalResult:
    """Slots chosen per local day, plus what they were chosen from."""
    days: Dict[str, List[TimeSlot]]
    link_info: Optional[LinkInfo] = None
    total_available: int = 0
    timezone: str = "UTC"
    duration: Optional[int] = None  # Meeting length in minutes

    @property
    def slot_count(self) -> int:
        return sum(len(slots) for slots in self.days.values())


def choose_duration(link_info: LinkInfo, requested: Optional[int] = None) -> int:
    """
    Pick the meeting length to propose.

    An explicit request must be one of the link's durations. Otherwise 25
    minutes is used when offered, then the link's default.

    Raises:
        ValueError: If the requested duration is not offered by the link
    """
    if requested is not None:
        if requested not in link_info.durations:
            offered = ", ".join(str(d) for d in link_info.durations)
            raise ValueError(
                f"Duration {requested} min is not offered by {link_info.slug} (available: {offered})"
            )
        return requested

    if PREFERRED_DURATION in link_info.durations:
        return PREFERRED_DURATION
    return link_info.default_duration


class SlotProposerService:
    """
    Orchestrates availability retrieval and per-day slot selection.

    Dependency inversion toward a protocol makes it easy to plug in the real
    SavvyCal or Cal.com adapter, or the mock implementation in tests.
    """

    def __init__(
        self,
        provider_client: ProviderClientProtocol,
        slot_selector: SlotSelector,
    ) -> None:
        self._provider_client = provider_client
        self._slot_selector = slot_selector

    def propose(
        self,
        *,
        start_date: DateTime,
        end_date: DateTime,
        duration: Optional[int] = None,
    ) -> ProposalResult:
        """
        Fetch availability and pick the slots worth proposing for each day.

        ``duration`` is checked against the link's offered lengths; when
        omitted one is chosen with ``choose_duration``.
        """
        result = self.fetch_slots(start_date=start_date, end_date=end_date)
        proposal = self.select_by_day(result.slots, link_info=result.link_info)
        proposal.duration = choose_duration(result.link_info, duration)
        return proposal

    def fetch_slots(self, *, start_date: DateTime, end_date: DateTime) -> FetchSlotsResult:
        """Fetch raw open slots from the provider."""
        logger.info(
            "Fetching %s availability %s - %s",
            self._provider_client.name,
            start_date.to_date_string(),
            end_date.to_date_string(),
        )
        return self._provider_client.fetch_slots(start_date, end_date)

    def select_by_day(
        self,
        slots: Iterable[TimeSlot],
        *,
        link_info: Optional[LinkInfo] = None,
    ) -> ProposalResult:
        """Run the selector independently over each local day."""
        return select_by_day(slots, self._slot_selector, link_info=link_info)


def select_by_day(
    slots: Iterable[TimeSlot],
    slot_selector: SlotSelector,
    *,
    link_info: Optional[LinkInfo] = None,
) -> ProposalResult:
    """
    Group slots by the selector's local day and select within each day.
    """
    slot_list = list(slots)
    grouped = group_slots_by_day(slot_list, slot_selector.timezone)

    days = {
        day_key: slot_selector.select(day_slots)
        for day_key, day_slots in grouped.items()
    }

    return ProposalResult(
        days=days,
        link_info=link_info,
        total_available=len(slot_list),
        timezone=slot_selector.timezone,
    )


def group_slots_by_day(slots: Iterable[TimeSlot], timezone: str) -> Dict[str, List[TimeSlot]]:
    """
    Group slots by calendar day in the given timezone.

    Keys are ``YYYY-MM-DD`` strings in ascending order; slots within a day
    are sorted chronologically.
    """
    grouped: Dict[str, List[TimeSlot]] = {}

    for slot in slots:
        day_key = slot.in_timezone(timezone).to_date_string()
        grouped.setdefault(day_key, []).append(slot)

    return {
        day_key: sorted(grouped[day_key], key=lambda s: s.start)
        for day_key in sorted(grouped)
    }
