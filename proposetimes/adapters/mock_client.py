"""
Mock provider client for trying the tool without a scheduling account.
"""

from typing import Dict, List, Tuple

from pendulum import DateTime

from ..domain.models import FetchSlotsResult, LinkInfo, TimeSlot

# Weekday (0=Monday) -> blocked (start_hour, start_minute, end_hour, end_minute)
MOCK_MEETINGS: Dict[int, List[Tuple[int, int, int, int]]] = {
    0: [(10, 0, 11, 30)],
    1: [(9, 0, 10, 0), (13, 0, 14, 30)],
    2: [(11, 0, 13, 0)],
    3: [(14, 0, 16, 0)],
    4: [],
}


class MockProviderClient:
    """
    Mock client that simulates a provider's availability.

    Offers slots every ``increment_minutes`` between ``start_hour`` and
    ``end_hour`` local time on weekdays, except during the fixed meetings in
    MOCK_MEETINGS.
    """

    name = "Mock"

    def __init__(
        self,
        timezone: str = "America/New_York",
        start_hour: int = 9,
        end_hour: int = 17,
        increment_minutes: int = 30,
        duration_minutes: int = 30
    ):
        self.timezone = timezone
        self.start_hour = start_hour
        self.end_hour = end_hour
        self.increment_minutes = increment_minutes
        self.duration_minutes = duration_minutes

    def fetch_slots(self, start_date: DateTime, end_date: DateTime) -> FetchSlotsResult:
        """Generate availability for every weekday between the two dates."""
        slots: List[TimeSlot] = []

        current = start_date.in_timezone(self.timezone).start_of("day")
        last_day = end_date.in_timezone(self.timezone).start_of("day")

        while current <= last_day:
            slots.extend(self._slots_for_day(current))
            current = current.add(days=1)

        link_info = LinkInfo(
            id="mock",
            slug="mock",
            durations=[15, 30, 45, 60],
            default_duration=self.duration_minutes
        )

        return FetchSlotsResult(slots=slots, link_info=link_info)

    def _slots_for_day(self, day: DateTime) -> List[TimeSlot]:
        meetings = MOCK_MEETINGS.get(day.day_of_week)
        if meetings is None:
            # Weekend
            return []

        busy = [
            (day.set(hour=sh, minute=sm), day.set(hour=eh, minute=em))
            for sh, sm, eh, em in meetings
        ]

        slots: List[TimeSlot] = []
        start = day.set(hour=self.start_hour, minute=0)
        day_end = day.set(hour=self.end_hour, minute=0)

        while start.add(minutes=self.duration_minutes) <= day_end:
            end = start.add(minutes=self.duration_minutes)
            if not any(start < busy_end and end > busy_start for busy_start, busy_end in busy):
                slots.append(TimeSlot(start=start.in_timezone("UTC"), end=end.in_timezone("UTC")))
            start = start.add(minutes=self.increment_minutes)

        return slots
