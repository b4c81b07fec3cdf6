"""
Core business logic for choosing which available slots to propose.

This is the heart of the application - pure domain logic without any
external dependencies (no API calls, no configuration, no I/O).
"""

import logging
import math
from typing import Dict, Iterable, List, Optional

from .models import BUCKET_ORDER, Gap, ScoredSlot, TimeBucket, TimeSlot

logger = logging.getLogger(__name__)

DEFAULT_MAX_SLOTS = 4
DEFAULT_INCREMENT_MINUTES = 30

# Consecutive slots further apart than this many increments imply a meeting
GAP_THRESHOLD_FACTOR = 1.5

# Score halves at this distance (minutes) from the nearest gap edge
SCORE_DECAY_MINUTES = 30

NEUTRAL_SCORE = 0.5

MORNING_START_HOUR = 6
AFTERNOON_START_HOUR = 12
EVENING_START_HOUR = 17


def get_time_bucket(slot: TimeSlot, timezone: str) -> TimeBucket:
    """
    Classify a slot by the wall-clock hour of its start in ``timezone``.

    - Morning: 06:00 - 12:00
    - Afternoon: 12:00 - 17:00
    - Evening: everything else, including late night and early morning
    """
    hour = slot.in_timezone(timezone).hour

    if MORNING_START_HOUR <= hour < AFTERNOON_START_HOUR:
        return TimeBucket.MORNING
    if AFTERNOON_START_HOUR <= hour < EVENING_START_HOUR:
        return TimeBucket.AFTERNOON
    return TimeBucket.EVENING


def detect_gaps(
    slots: Iterable[TimeSlot],
    increment_minutes: int = DEFAULT_INCREMENT_MINUTES
) -> List[Gap]:
    """
    Detect discontinuities in availability that likely indicate meetings.

    A gap is reported between two chronologically adjacent slots whose starts
    are more than 1.5x the expected increment apart. Adjacent gaps are not
    merged.

    Args:
        slots: Available slots in any order (duplicates are harmless)
        increment_minutes: Expected spacing between consecutive slots

    Returns:
        Gaps in chronological order
    """
    sorted_slots = sorted(slots, key=lambda s: s.start)

    if len(sorted_slots) < 2:
        return []

    threshold_seconds = increment_minutes * 60 * GAP_THRESHOLD_FACTOR
    gaps: List[Gap] = []

    for current, following in zip(sorted_slots, sorted_slots[1:]):
        diff = following.start.timestamp() - current.start.timestamp()

        if diff > threshold_seconds:
            gaps.append(Gap(start=current.start, end=following.start))

    return gaps


def score_slot_by_proximity(slot: TimeSlot, gaps: List[Gap]) -> float:
    """
    Score a slot by how close it sits to the nearest gap edge.

    score = 1 / (1 + minutes_away / 30), so a slot on a gap edge scores 1.0,
    30 minutes away 0.5 and 60 minutes away about 0.33. Without gaps every
    slot gets the neutral score.
    """
    if not gaps:
        return NEUTRAL_SCORE

    slot_time = slot.start.timestamp()
    min_distance = min(
        min(abs(slot_time - gap.start.timestamp()), abs(slot_time - gap.end.timestamp()))
        for gap in gaps
    )

    minutes_away = min_distance / 60
    return 1 / (1 + minutes_away / SCORE_DECAY_MINUTES)


def deduplicate_slots(slots: Iterable[TimeSlot]) -> List[TimeSlot]:
    """
    Drop slots whose start instant was already seen.

    Providers may return the same opening several times with different
    durations, so only the start is compared.
    """
    seen = set()
    unique: List[TimeSlot] = []

    for slot in slots:
        key = slot.start.timestamp()
        if key in seen:
            continue
        seen.add(key)
        unique.append(slot)

    return unique


def select_smart_slots(
    slots: Iterable[TimeSlot],
    timezone: str,
    max_slots: int = DEFAULT_MAX_SLOTS,
    increment_minutes: int = DEFAULT_INCREMENT_MINUTES
) -> List[TimeSlot]:
    """
    Select a handful of slots worth proposing from one day's availability.

    Algorithm:
    1. Deduplicate by start instant
    2. Return everything if it already fits into max_slots
    3. Detect gaps and score every slot by its proximity to them
    4. Find the majority bucket among the top-scoring half
    5. Reserve the best slot outside the majority bucket (diversity)
    6. Fill the rest by descending score

    Returns:
        At most max_slots slots, sorted chronologically
    """
    if max_slots < 1:
        raise ValueError(f"max_slots must be at least 1, got {max_slots}")

    unique_slots = deduplicate_slots(slots)

    if len(unique_slots) <= max_slots:
        return sorted(unique_slots, key=lambda s: s.start)

    gaps = detect_gaps(unique_slots, increment_minutes=increment_minutes)
    logger.debug("Detected %d gap(s) in %d slots", len(gaps), len(unique_slots))

    scored_slots = [
        ScoredSlot(
            slot=slot,
            score=score_slot_by_proximity(slot, gaps),
            bucket=get_time_bucket(slot, timezone)
        )
        for slot in unique_slots
    ]
    scored_slots.sort(key=lambda s: s.score, reverse=True)

    majority_bucket = _find_majority_bucket(scored_slots)
    diversity_slot = _find_diversity_slot(scored_slots, majority_bucket)
    logger.debug(
        "Majority bucket %s, diversity slot %s",
        majority_bucket.value,
        diversity_slot.slot if diversity_slot else None
    )

    selected: List[ScoredSlot] = []

    if diversity_slot:
        selected.append(diversity_slot)
        diversity_key = diversity_slot.slot.start.timestamp()
    else:
        diversity_key = None

    for scored in scored_slots:
        if len(selected) >= max_slots:
            break
        if scored.slot.start.timestamp() == diversity_key:
            continue
        selected.append(scored)

    return sorted((s.slot for s in selected), key=lambda s: s.start)


def _find_majority_bucket(scored_slots: List[ScoredSlot]) -> TimeBucket:
    """
    Tally buckets among the top half of score-sorted slots.

    Ties go to the bucket listed first in BUCKET_ORDER.
    """
    top_half = scored_slots[:math.ceil(len(scored_slots) / 2)]
    counts: Dict[TimeBucket, int] = {bucket: 0 for bucket in BUCKET_ORDER}

    for scored in top_half:
        counts[scored.bucket] += 1

    majority = BUCKET_ORDER[0]
    for bucket in BUCKET_ORDER:
        if counts[bucket] > counts[majority]:
            majority = bucket

    return majority


def _find_diversity_slot(
    scored_slots: List[ScoredSlot],
    majority_bucket: TimeBucket
) -> Optional[ScoredSlot]:
    """Return the highest-scoring slot outside the majority bucket, if any."""
    for scored in scored_slots:
        if scored.bucket != majority_bucket:
            return scored
    return None


class SlotSelector:
    """
    Applies the slot selection algorithm with fixed settings.

    Keeps the recipient timezone and selection limits together so that the
    service layer can select slots day by day without repeating them.
    """

    def __init__(
        self,
        timezone: str,
        max_slots: int = DEFAULT_MAX_SLOTS,
        increment_minutes: int = DEFAULT_INCREMENT_MINUTES
    ):
        if max_slots < 1:
            raise ValueError(f"max_slots must be at least 1, got {max_slots}")
        self.timezone = timezone
        self.max_slots = max_slots
        self.increment_minutes = increment_minutes

    def select(self, slots: Iterable[TimeSlot]) -> List[TimeSlot]:
        """Select the slots to propose from one day's availability."""
        return select_smart_slots(
            slots,
            self.timezone,
            max_slots=self.max_slots,
            increment_minutes=self.increment_minutes
        )
