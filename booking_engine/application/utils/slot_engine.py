from __future__ import annotations

import math
from datetime import date, datetime, timedelta, timezone
from typing import Iterable, Iterator
from zoneinfo import ZoneInfo

from booking_engine.application.utils.commands import encode_slot_selection
from booking_engine.domain.entities.slot import AvailableSlot, BusyInterval, SearchWindow
from booking_engine.domain.entities.tenant import CalendarConfig

DEFAULT_GRACE_MINUTES = 5
DEFAULT_WINDOW_DAYS = 3
DEFAULT_LIMIT = 3


def build_search_window(
    calendar: CalendarConfig,
    now: datetime | None = None,
    grace_minutes: int = DEFAULT_GRACE_MINUTES,
    window_days: int = DEFAULT_WINDOW_DAYS,
) -> SearchWindow:
    """Window starting ``grace_minutes`` after now and spanning ``window_days`` calendar days in the tenant zone."""
    tz = ZoneInfo(calendar.timezone)
    current = (now or datetime.now(timezone.utc)).astimezone(tz)
    start = current + timedelta(minutes=grace_minutes)
    # wall-clock arithmetic on the local datetime keeps calendar days intact across DST
    end = start + timedelta(days=window_days)
    return SearchWindow(start=start, end=end)


def sunday_based_weekday(day: date) -> int:
    """Python counts Monday as 0; working hours count Sunday as 0."""
    return (day.weekday() + 1) % 7


def align_to_duration(candidate: datetime, anchor: datetime, duration: timedelta) -> datetime:
    """Round ``candidate`` up to the next multiple of ``duration`` counted from ``anchor``."""
    if candidate <= anchor:
        return anchor
    steps = math.ceil((candidate - anchor) / duration)
    return anchor + steps * duration


def compute_slots(
    calendar: CalendarConfig,
    busy_intervals: Iterable[BusyInterval],
    window: SearchWindow,
    limit: int = DEFAULT_LIMIT,
    service_id: str | None = None,
    language: str | None = None,
) -> Iterator[AvailableSlot]:
    """
    Yield open slots inside ``window``, earliest first, at most ``limit``.

    Candidates start on slot-duration boundaries measured from the start of
    their working-hour range and are emitted only when they fit entirely in
    that range and in the window. A candidate touching any busy interval is
    dropped whole. Instants are compared in UTC; labels are local.
    """
    if limit <= 0 or not calendar.working_hours:
        return

    tz = ZoneInfo(calendar.timezone)
    step = timedelta(minutes=calendar.slot_duration_minutes)
    busy = [
        BusyInterval(start=b.start.astimezone(timezone.utc), end=b.end.astimezone(timezone.utc))
        for b in busy_intervals
    ]
    window_start = window.start.astimezone(timezone.utc)
    window_end = window.end.astimezone(timezone.utc)

    day = window.start.astimezone(tz).date()
    last_day = window.end.astimezone(tz).date()
    last_end: datetime | None = None
    emitted = 0

    while day <= last_day:
        for hours in calendar.hours_for_day(sunday_based_weekday(day)):
            range_start = datetime.combine(day, hours.start, tzinfo=tz).astimezone(timezone.utc)
            range_end = datetime.combine(day, hours.end, tzinfo=tz).astimezone(timezone.utc)
            if range_end <= window_start:
                continue

            cursor = align_to_duration(max(range_start, window_start), range_start, step)
            while cursor < range_end and cursor < window_end:
                slot_end = cursor + step
                if slot_end > range_end or slot_end > window_end:
                    break
                overlaps_previous = last_end is not None and cursor < last_end
                if not overlaps_previous and not any(b.overlaps(cursor, slot_end) for b in busy):
                    yield _make_slot(cursor, slot_end, calendar.timezone, service_id, language)
                    last_end = slot_end
                    emitted += 1
                    if emitted >= limit:
                        return
                cursor = slot_end
        day += timedelta(days=1)


def format_slot_label(start: datetime, tz_name: str) -> str:
    local = start.astimezone(ZoneInfo(tz_name))
    return f"{local:%a %b} {local.day} · {local:%H:%M}"


def format_button_label(start: datetime, tz_name: str) -> str:
    local = start.astimezone(ZoneInfo(tz_name))
    return f"{local:%a %H:%M}"


def _make_slot(
    start: datetime,
    end: datetime,
    tz_name: str,
    service_id: str | None,
    language: str | None = None,
) -> AvailableSlot:
    return AvailableSlot(
        start=start,
        end=end,
        timezone=tz_name,
        display_label=format_slot_label(start, tz_name),
        button_label=format_button_label(start, tz_name),
        selection_token=encode_slot_selection(service_id, start, language),
    )
