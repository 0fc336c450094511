from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable

from booking_engine.application.ports.calendar import CalendarPort
from booking_engine.application.utils.slot_engine import (
    DEFAULT_GRACE_MINUTES,
    DEFAULT_LIMIT,
    DEFAULT_WINDOW_DAYS,
    build_search_window,
    compute_slots,
)
from booking_engine.domain.entities.slot import AvailableSlot, BusyInterval, SearchWindow
from booking_engine.domain.entities.tenant import Tenant


class AvailabilityUseCase:
    def __init__(
        self,
        calendar: CalendarPort,
        grace_minutes: int = DEFAULT_GRACE_MINUTES,
        window_days: int = DEFAULT_WINDOW_DAYS,
        limit: int = DEFAULT_LIMIT,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._calendar = calendar
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._grace_minutes = grace_minutes
        self._window_days = window_days
        self._limit = limit
        self._logger = logging.getLogger(__name__)

    @property
    def limit(self) -> int:
        return self._limit

    def find_slots(
        self,
        tenant: Tenant,
        service_id: str | None = None,
        limit: int | None = None,
        now: datetime | None = None,
        language: str | None = None,
    ) -> list[AvailableSlot]:
        window = build_search_window(
            tenant.calendar,
            now=now or self._clock(),
            grace_minutes=self._grace_minutes,
            window_days=self._window_days,
        )
        busy = self._busy_intervals(tenant, window)
        return list(
            compute_slots(
                tenant.calendar,
                busy,
                window,
                limit=self._limit if limit is None else limit,
                service_id=service_id,
                language=language,
            )
        )

    def _busy_intervals(self, tenant: Tenant, window: SearchWindow) -> list[BusyInterval]:
        if not tenant.calendar.enabled:
            return []
        try:
            return self._calendar.fetch_busy_intervals(tenant, window.start, window.end)
        except Exception as e:
            # Fail open: an unreachable calendar means no known conflicts.
            self._logger.warning(
                "Failed to fetch busy intervals; falling back to working hours",
                extra={"tenant": tenant.key, "reason": str(e)},
            )
            return []
