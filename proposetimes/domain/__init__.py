"""
Domain layer - Pure business logic without external dependencies.
"""

from .models import BUCKET_ORDER, FetchSlotsResult, Gap, LinkInfo, ScoredSlot, TimeBucket, TimeSlot
from .slot_selector import (
    SlotSelector,
    detect_gaps,
    get_time_bucket,
    score_slot_by_proximity,
    select_smart_slots,
)

__all__ = [
    "BUCKET_ORDER",
    "FetchSlotsResult",
    "Gap",
    "LinkInfo",
    "ScoredSlot",
    "TimeBucket",
    "TimeSlot",
    "SlotSelector",
    "detect_gaps",
    "get_time_bucket",
    "score_slot_by_proximity",
    "select_smart_slots",
]
