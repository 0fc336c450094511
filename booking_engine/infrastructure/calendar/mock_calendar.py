from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from booking_engine.application.ports.calendar import CalendarPort, new_placeholder_event_id
from booking_engine.domain.entities.slot import BusyInterval
from booking_engine.domain.entities.tenant import Tenant


@dataclass
class MockEvent:
    tenant_key: str
    summary: str
    start: datetime
    end: datetime
    status: str
    notes: str = ""


class MockCalendar(CalendarPort):
    def __init__(self) -> None:
        self.events: dict[str, MockEvent] = {}
        self._logger = logging.getLogger(__name__)

    def create_tentative_event(
        self,
        tenant: Tenant,
        summary: str,
        start: datetime,
        end: datetime,
        notes: str = "",
        attendees: list[str] | None = None,
    ) -> str:
        if not tenant.calendar.enabled:
            return new_placeholder_event_id()
        event_id = f"mock_event_{len(self.events) + 1}"
        self.events[event_id] = MockEvent(
            tenant_key=tenant.key, summary=summary, start=start, end=end, status="tentative", notes=notes
        )
        self._logger.info(
            "Mock calendar event created",
            extra={"event_id": event_id, "start": start.isoformat(), "end": end.isoformat(), "summary": summary},
        )
        return event_id

    def confirm_event(self, tenant: Tenant, event_id: str) -> None:
        if tenant.calendar.enabled and event_id in self.events:
            self.events[event_id].status = "confirmed"

    def cancel_event(self, tenant: Tenant, event_id: str) -> None:
        if tenant.calendar.enabled and event_id in self.events:
            self.events[event_id].status = "cancelled"
            self._logger.info("Mock calendar event cancelled", extra={"event_id": event_id})

    def fetch_busy_intervals(self, tenant: Tenant, start: datetime, end: datetime) -> list[BusyInterval]:
        if not tenant.calendar.enabled:
            return []
        return [
            BusyInterval(start=event.start, end=event.end)
            for event in self.events.values()
            if event.tenant_key == tenant.key and event.status != "cancelled" and event.start < end and start < event.end
        ]
