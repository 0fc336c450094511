"""
Tests for open-slot generation.
"""

from __future__ import annotations

from datetime import datetime, time, timedelta, timezone

from booking_engine.application.utils.slot_engine import (
    align_to_duration,
    build_search_window,
    compute_slots,
    sunday_based_weekday,
)
from booking_engine.domain.entities.slot import BusyInterval, SearchWindow
from booking_engine.domain.entities.tenant import CalendarConfig, WorkingHours

MONDAY_10_07 = datetime(2024, 1, 8, 10, 7, tzinfo=timezone.utc)


def _weekdays(start: time = time(9, 0), end: time = time(17, 0)) -> tuple[WorkingHours, ...]:
    return tuple(WorkingHours(day=day, start=start, end=end) for day in range(1, 6))


def _calendar(**overrides) -> CalendarConfig:
    values = {"enabled": True, "timezone": "UTC", "slot_duration_minutes": 45, "working_hours": _weekdays()}
    values.update(overrides)
    return CalendarConfig(**values)


def _starts(slots) -> list[str]:
    return [slot.start.strftime("%a %H:%M") for slot in slots]


def test_first_slot_aligns_to_duration_boundary_from_range_start():
    """10:07 plus 5 minutes grace rounds up to the 10:30 boundary (09:00, 09:45, 10:30)."""
    calendar = _calendar()
    window = build_search_window(calendar, now=MONDAY_10_07)

    slots = list(compute_slots(calendar, [], window))

    assert _starts(slots) == ["Mon 10:30", "Mon 11:15", "Mon 12:00"]
    assert all(slot.end - slot.start == timedelta(minutes=45) for slot in slots)


def test_search_window_spans_grace_and_days():
    window = build_search_window(_calendar(), now=MONDAY_10_07, grace_minutes=5, window_days=3)

    assert window.start == datetime(2024, 1, 8, 10, 12, tzinfo=timezone.utc)
    assert window.end == datetime(2024, 1, 11, 10, 12, tzinfo=timezone.utc)


def test_working_hours_use_sunday_as_day_zero():
    """A day-0 range opens on Sunday only."""
    calendar = _calendar(working_hours=(WorkingHours(day=0, start=time(10, 0), end=time(12, 0)),))
    saturday_noon = datetime(2024, 1, 13, 12, 0, tzinfo=timezone.utc)

    slots = list(compute_slots(calendar, [], build_search_window(calendar, now=saturday_noon)))

    assert _starts(slots) == ["Sun 10:00", "Sun 10:45"]
    assert sunday_based_weekday(datetime(2024, 1, 14).date()) == 0
    assert sunday_based_weekday(datetime(2024, 1, 13).date()) == 6


def test_busy_interval_drops_whole_candidate():
    calendar = _calendar()
    busy = [BusyInterval(start=datetime(2024, 1, 8, 10, 30, tzinfo=timezone.utc), end=datetime(2024, 1, 8, 10, 31, tzinfo=timezone.utc))]

    slots = list(compute_slots(calendar, busy, build_search_window(calendar, now=MONDAY_10_07)))

    assert _starts(slots) == ["Mon 11:15", "Mon 12:00", "Mon 12:45"]


def test_busy_interval_ending_at_slot_start_does_not_conflict():
    calendar = _calendar()
    busy = [BusyInterval(start=datetime(2024, 1, 8, 10, 0, tzinfo=timezone.utc), end=datetime(2024, 1, 8, 10, 30, tzinfo=timezone.utc))]

    slots = list(compute_slots(calendar, busy, build_search_window(calendar, now=MONDAY_10_07)))

    assert _starts(slots)[0] == "Mon 10:30"


def test_busy_interval_in_other_timezone_is_compared_as_instant():
    calendar = _calendar()
    plus_two = timezone(timedelta(hours=2))
    busy = [BusyInterval(start=datetime(2024, 1, 8, 12, 30, tzinfo=plus_two), end=datetime(2024, 1, 8, 13, 0, tzinfo=plus_two))]

    slots = list(compute_slots(calendar, busy, build_search_window(calendar, now=MONDAY_10_07)))

    assert _starts(slots) == ["Mon 11:15", "Mon 12:00", "Mon 12:45"]


def test_limit_caps_output_and_zero_limit_yields_nothing():
    calendar = _calendar()
    window = build_search_window(calendar, now=MONDAY_10_07)

    assert len(list(compute_slots(calendar, [], window, limit=5))) == 5
    assert list(compute_slots(calendar, [], window, limit=0)) == []


def test_no_working_hours_means_no_slots():
    calendar = _calendar(working_hours=())

    assert list(compute_slots(calendar, [], build_search_window(calendar, now=MONDAY_10_07))) == []


def test_slot_must_fit_inside_window_and_range():
    calendar = _calendar()
    window = SearchWindow(
        start=datetime(2024, 1, 8, 9, 0, tzinfo=timezone.utc),
        end=datetime(2024, 1, 8, 10, 0, tzinfo=timezone.utc),
    )

    slots = list(compute_slots(calendar, [], window, limit=10))

    assert _starts(slots) == ["Mon 09:00"]


def test_multiple_ranges_per_day_each_anchor_their_own_grid():
    calendar = _calendar(
        working_hours=(
            WorkingHours(day=1, start=time(13, 0), end=time(14, 0)),
            WorkingHours(day=1, start=time(9, 0), end=time(10, 0)),
        )
    )
    window = SearchWindow(
        start=datetime(2024, 1, 8, 8, 0, tzinfo=timezone.utc),
        end=datetime(2024, 1, 8, 20, 0, tzinfo=timezone.utc),
    )

    slots = list(compute_slots(calendar, [], window, limit=10))

    assert _starts(slots) == ["Mon 09:00", "Mon 13:00"]


def test_overlapping_ranges_never_produce_overlapping_slots():
    calendar = _calendar(
        working_hours=(
            WorkingHours(day=1, start=time(9, 0), end=time(11, 0)),
            WorkingHours(day=1, start=time(9, 30), end=time(11, 0)),
        )
    )
    window = SearchWindow(
        start=datetime(2024, 1, 8, 8, 0, tzinfo=timezone.utc),
        end=datetime(2024, 1, 8, 20, 0, tzinfo=timezone.utc),
    )

    slots = list(compute_slots(calendar, [], window, limit=10))

    assert _starts(slots) == ["Mon 09:00", "Mon 09:45"]
    for earlier, later in zip(slots, slots[1:]):
        assert earlier.end <= later.start


def test_slots_are_labelled_in_tenant_timezone():
    """09:00 in New York is 14:00 UTC in January."""
    calendar = _calendar(timezone="America/New_York")
    now = datetime(2024, 1, 8, 13, 0, tzinfo=timezone.utc)

    slot = next(compute_slots(calendar, [], build_search_window(calendar, now=now), service_id="haircut"))

    assert slot.start == datetime(2024, 1, 8, 14, 0, tzinfo=timezone.utc)
    assert slot.timezone == "America/New_York"
    assert slot.display_label == "Mon Jan 8 · 09:00"
    assert slot.button_label == "Mon 09:00"
    assert slot.selection_token == "slot::haircut::2024-01-08T14:00:00Z"


def test_slots_continue_on_following_days():
    calendar = _calendar(working_hours=(WorkingHours(day=1, start=time(9, 0), end=time(10, 0)), WorkingHours(day=2, start=time(9, 0), end=time(10, 0))))

    slots = list(compute_slots(calendar, [], build_search_window(calendar, now=MONDAY_10_07)))

    assert _starts(slots) == ["Tue 09:00"]


def test_align_to_duration():
    anchor = datetime(2024, 1, 8, 9, 0, tzinfo=timezone.utc)
    step = timedelta(minutes=45)

    assert align_to_duration(anchor - timedelta(hours=1), anchor, step) == anchor
    assert align_to_duration(anchor + timedelta(minutes=45), anchor, step) == anchor + step
    assert align_to_duration(anchor + timedelta(minutes=46), anchor, step) == anchor + 2 * step
