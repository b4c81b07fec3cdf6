"""
Tests for slot selection.
"""

import pendulum
import pytest

from proposetimes.domain.models import Gap, TimeBucket, TimeSlot
from proposetimes.domain.slot_selector import (
    SlotSelector,
    detect_gaps,
    get_time_bucket,
    score_slot_by_proximity,
    select_smart_slots,
)


def slot(time: str, date: str = "2026-01-07", minutes: int = 30) -> TimeSlot:
    """Create a UTC slot starting at HH:MM on the given date."""
    start = pendulum.parse(f"{date}T{time}:00Z")
    return TimeSlot(start=start, end=start.add(minutes=minutes))


def times(slots):
    return [s.start.in_timezone("UTC").format("HH:mm") for s in slots]


def gap(start: str, end: str) -> Gap:
    return Gap(
        start=pendulum.parse(f"2026-01-07T{start}:00Z"),
        end=pendulum.parse(f"2026-01-07T{end}:00Z")
    )


class TestGetTimeBucket:
    """Tests for the time-of-day classifier."""

    def test_morning(self):
        assert get_time_bucket(slot("06:00"), "UTC") == TimeBucket.MORNING
        assert get_time_bucket(slot("09:00"), "UTC") == TimeBucket.MORNING
        assert get_time_bucket(slot("11:30"), "UTC") == TimeBucket.MORNING

    def test_afternoon(self):
        assert get_time_bucket(slot("12:00"), "UTC") == TimeBucket.AFTERNOON
        assert get_time_bucket(slot("14:30"), "UTC") == TimeBucket.AFTERNOON
        assert get_time_bucket(slot("16:30"), "UTC") == TimeBucket.AFTERNOON

    def test_evening(self):
        assert get_time_bucket(slot("17:00"), "UTC") == TimeBucket.EVENING
        assert get_time_bucket(slot("19:30"), "UTC") == TimeBucket.EVENING

    def test_night_hours_fold_into_evening(self):
        """There is no night bucket; late and very early hours count as evening."""
        assert get_time_bucket(slot("21:30"), "UTC") == TimeBucket.EVENING
        assert get_time_bucket(slot("02:00"), "UTC") == TimeBucket.EVENING
        assert get_time_bucket(slot("05:30"), "UTC") == TimeBucket.EVENING

    def test_respects_timezone(self):
        """17:00 UTC is noon in New York (EST) but evening in UTC."""
        assert get_time_bucket(slot("17:00"), "America/New_York") == TimeBucket.AFTERNOON
        assert get_time_bucket(slot("17:00"), "UTC") == TimeBucket.EVENING
        assert get_time_bucket(slot("22:00"), "America/New_York") == TimeBucket.EVENING

    def test_respects_daylight_saving(self):
        """16:00 UTC is 12:00 in New York during EDT but 11:00 during EST."""
        summer = slot("16:00", date="2026-07-07")
        winter = slot("16:00", date="2026-01-07")

        assert get_time_bucket(summer, "America/New_York") == TimeBucket.AFTERNOON
        assert get_time_bucket(winter, "America/New_York") == TimeBucket.MORNING


class TestDetectGaps:
    """Tests for gap detection."""

    def test_single_gap(self):
        slots = [slot("09:00"), slot("09:30"), slot("10:00"), slot("14:00"), slot("14:30")]

        gaps = detect_gaps(slots)

        assert gaps == [gap("10:00", "14:00")]

    def test_multiple_gaps(self):
        slots = [slot("09:00"), slot("09:30"), slot("11:00"), slot("11:30"), slot("14:00")]

        gaps = detect_gaps(slots)

        assert gaps == [gap("09:30", "11:00"), gap("11:30", "14:00")]

    def test_no_gaps_in_continuous_availability(self):
        slots = [slot("09:00"), slot("09:30"), slot("10:00"), slot("10:30")]

        assert detect_gaps(slots) == []

    def test_single_and_empty_input(self):
        assert detect_gaps([slot("09:00")]) == []
        assert detect_gaps([]) == []

    def test_unsorted_input(self):
        slots = [slot("14:00"), slot("09:00"), slot("10:00"), slot("09:30")]

        assert detect_gaps(slots) == [gap("10:00", "14:00")]

    def test_duplicates_are_harmless(self):
        slots = [slot("09:00"), slot("09:00", minutes=60), slot("09:30"), slot("10:00")]

        assert detect_gaps(slots) == []

    def test_threshold_is_one_and_a_half_increments(self):
        """45 minutes apart is not a gap at 30-minute increments; 60 is."""
        assert detect_gaps([slot("09:00"), slot("09:45")]) == []
        assert detect_gaps([slot("09:00"), slot("10:00")]) == [gap("09:00", "10:00")]

    def test_custom_increment(self):
        slots = [slot("09:00"), slot("10:00"), slot("11:00")]

        assert detect_gaps(slots, increment_minutes=60) == []
        assert len(detect_gaps(slots, increment_minutes=30)) == 2


class TestScoreSlotByProximity:
    """Tests for proximity scoring."""

    def test_gap_edges_score_highest(self):
        gaps = [gap("10:00", "14:00")]

        assert score_slot_by_proximity(slot("10:00"), gaps) == 1.0
        assert score_slot_by_proximity(slot("14:00"), gaps) == 1.0

    def test_score_decays_with_distance(self):
        gaps = [gap("10:00", "14:00")]

        assert score_slot_by_proximity(slot("09:30"), gaps) == pytest.approx(0.5)
        assert score_slot_by_proximity(slot("14:30"), gaps) == pytest.approx(0.5)
        assert score_slot_by_proximity(slot("09:00"), gaps) == pytest.approx(1 / 3)
        assert score_slot_by_proximity(slot("15:00"), gaps) == pytest.approx(1 / 3)

    def test_neutral_score_without_gaps(self):
        assert score_slot_by_proximity(slot("10:00"), []) == 0.5
        assert score_slot_by_proximity(slot("16:00"), []) == 0.5

    def test_nearest_gap_wins(self):
        """13:30 is 30 min from the second gap and 2.5 hours from the first."""
        gaps = [gap("10:00", "11:00"), gap("14:00", "15:00")]

        assert score_slot_by_proximity(slot("13:30"), gaps) == pytest.approx(0.5)


class TestSelectSmartSlots:
    """Tests for the selection entry point."""

    BUSY_DAY = ["09:00", "09:30", "10:00", "14:00", "14:30", "15:00", "15:30", "16:00"]

    def test_returns_everything_when_below_max(self):
        result = select_smart_slots([slot("10:00"), slot("09:00")], "UTC", 4)

        assert times(result) == ["09:00", "10:00"]

    def test_empty_input(self):
        assert select_smart_slots([], "UTC") == []

    def test_pass_through_deduplicates_before_counting(self):
        first = slot("09:00")
        slots = [slot("10:00"), first, slot("09:00", minutes=60)]

        result = select_smart_slots(slots, "UTC", 2)

        assert times(result) == ["09:00", "10:00"]
        assert result[0] is first

    def test_prefers_gap_edges(self):
        result = select_smart_slots([slot(t) for t in self.BUSY_DAY], "UTC", 4)

        assert times(result) == ["09:30", "10:00", "14:00", "14:30"]

    def test_includes_diversity_slot(self):
        """A 10:30-13:30 meeting still leaves a morning option in the result."""
        day = ["09:00", "09:30", "10:00", "13:30", "14:00", "14:30", "15:00", "15:30", "16:00"]

        result = select_smart_slots([slot(t) for t in day], "UTC", 4)
        buckets = {get_time_bucket(s, "UTC") for s in result}

        assert TimeBucket.MORNING in buckets
        assert TimeBucket.AFTERNOON in buckets

    def test_single_midday_meeting(self):
        """Open 09:00-16:00 except a 10:30-13:30 meeting: both gap edges and a morning option."""
        day = ["09:00", "09:30", "10:00", "10:30", "13:30", "14:00", "14:30", "15:00", "15:30", "16:00"]

        result = select_smart_slots([slot(t) for t in day], "UTC", 4)

        assert times(result) == ["10:00", "10:30", "13:30", "14:00"]
        assert get_time_bucket(result[0], "UTC") == TimeBucket.MORNING

    def test_morning_meeting_block(self):
        """Meetings 9-12 leave 08:30 as the diversity option."""
        day = ["08:30", "12:00", "12:30", "13:00", "13:30", "14:00", "14:30", "15:00"]

        result = select_smart_slots([slot(t) for t in day], "UTC", 4)

        assert times(result) == ["08:30", "12:00", "12:30", "13:00"]

    def test_single_bucket_fills_by_score(self):
        day = ["14:00", "14:30", "15:00", "15:30", "16:00"]

        result = select_smart_slots([slot(t) for t in day], "UTC", 4)

        assert times(result) == ["14:00", "14:30", "15:00", "15:30"]

    def test_free_day_returns_max_slots(self):
        day = ["09:00", "09:30", "10:00", "10:30", "11:00", "11:30"]

        result = select_smart_slots([slot(t) for t in day], "UTC", 4)

        assert len(result) == 4

    def test_timezone_changes_selection(self):
        """The same slots are all evening in UTC but mostly afternoon in New York."""
        day = ["17:00", "17:30", "18:00", "21:00", "21:30", "22:00"]
        slots = [slot(t) for t in day]

        assert times(select_smart_slots(slots, "America/New_York", 4)) == ["17:30", "18:00", "21:00", "22:00"]
        assert times(select_smart_slots(slots, "UTC", 4)) == ["17:30", "18:00", "21:00", "21:30"]

    def test_never_returns_duplicate_times(self):
        slots = [slot("11:00"), slot("12:00"), slot("12:00"), slot("12:30"), slot("13:00")]

        result = select_smart_slots(slots, "UTC", 3)

        assert times(result) == ["11:00", "12:00", "12:30"]

    def test_same_start_different_duration_is_a_duplicate(self):
        slots = [
            slot("11:00", minutes=25),
            slot("12:00", minutes=25),
            slot("12:00", minutes=30),
            slot("12:30", minutes=25),
            slot("13:00", minutes=25),
        ]

        result = select_smart_slots(slots, "UTC", 3)
        starts = [s.start for s in result]

        assert len(set(starts)) == len(result) == 3

    def test_identical_scores_do_not_duplicate(self):
        day = ["09:00", "09:30", "10:00", "10:30", "14:00", "14:30"]

        result = select_smart_slots([slot(t) for t in day], "UTC", 3)

        assert len(set(times(result))) == len(result) == 3

    @pytest.mark.parametrize("max_slots", [1, 2, 3, 4, 5, 8, 10])
    def test_bound_and_chronological_order(self, max_slots):
        slots = [slot(t) for t in reversed(self.BUSY_DAY)] + [slot("14:00", minutes=60)]

        result = select_smart_slots(slots, "UTC", max_slots)

        assert len(result) == min(max_slots, len(self.BUSY_DAY))
        assert all(a.start < b.start for a, b in zip(result, result[1:]))

    def test_deterministic(self):
        slots = [slot(t) for t in self.BUSY_DAY]

        first = select_smart_slots(slots, "America/New_York", 3)
        second = select_smart_slots(list(slots), "America/New_York", 3)

        assert first == second

    def test_rejects_non_positive_max_slots(self):
        with pytest.raises(ValueError, match="max_slots must be at least 1"):
            select_smart_slots([slot("09:00")], "UTC", 0)


class TestSlotSelector:
    """Tests for the SlotSelector wrapper."""

    def test_select_uses_configured_settings(self):
        selector = SlotSelector(timezone="UTC", max_slots=2)

        result = selector.select([slot(t) for t in TestSelectSmartSlots.BUSY_DAY])

        assert times(result) == ["10:00", "14:00"]

    def test_invalid_max_slots(self):
        with pytest.raises(ValueError):
            SlotSelector(timezone="UTC", max_slots=0)
