"""
Domain models for available slots and slot selection.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List

import pendulum
from pendulum import DateTime


@dataclass(frozen=True)
class TimeSlot:
    """
    Represents a bookable opening returned by a scheduling provider.

    Invariant: start must be before end. Both are absolute instants; the
    timezone attached to them is irrelevant for comparisons.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Start time {self.start} must be before end time {self.end}")

    @classmethod
    def from_iso(cls, start_at: str, end_at: str) -> "TimeSlot":
        """
        Build a slot from two ISO 8601 timestamps.

        Raises:
            ValueError: If a timestamp is not a full date-time
        """
        return cls(start=_parse_instant(start_at), end=_parse_instant(end_at))

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return int((self.end - self.start).total_seconds() / 60)

    def in_timezone(self, timezone: str) -> DateTime:
        """Return the start instant as wall-clock time in the given timezone."""
        return self.start.in_timezone(timezone)

    def to_dict(self) -> Dict[str, str]:
        """Serialize to the provider-neutral ``start_at``/``end_at`` shape."""
        return {
            "start_at": self.start.in_timezone("UTC").to_iso8601_string(),
            "end_at": self.end.in_timezone("UTC").to_iso8601_string(),
        }

    def __str__(self) -> str:
        return f"{self.start.format('YYYY-MM-DD HH:mm')} - {self.end.format('HH:mm')}"


@dataclass(frozen=True)
class Gap:
    """
    An inferred busy interval between two available slots.

    start is the last free slot before the discontinuity, end is the first
    free slot after it.
    """
    start: DateTime
    end: DateTime


class TimeBucket(str, Enum):
    """Coarse period of the day."""
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"


# Consulted when breaking ties between bucket tallies
BUCKET_ORDER = (TimeBucket.MORNING, TimeBucket.AFTERNOON, TimeBucket.EVENING)


@dataclass(frozen=True)
class ScoredSlot:
    """A slot paired with its desirability score and time bucket."""
    slot: TimeSlot
    score: float
    bucket: TimeBucket


@dataclass
class LinkInfo:
    """
    Booking link (event type) metadata reported by a provider.
    """
    id: str
    slug: str
    durations: List[int] = field(default_factory=lambda: [30])
    default_duration: int = 30


@dataclass
class FetchSlotsResult:
    """Raw availability fetched from a provider."""
    slots: List[TimeSlot]
    link_info: LinkInfo


def _parse_instant(value: str) -> DateTime:
    """Parse an ISO 8601 timestamp into a UTC pendulum DateTime."""
    parsed = pendulum.parse(value)

    if isinstance(parsed, DateTime):
        return parsed.in_timezone("UTC")

    raise ValueError(f"Could not parse datetime: {value}")
