from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from datetime import datetime

from booking_engine.domain.entities.slot import BusyInterval
from booking_engine.domain.entities.tenant import Tenant

PLACEHOLDER_EVENT_PREFIX = "local-"


def new_placeholder_event_id() -> str:
    return f"{PLACEHOLDER_EVENT_PREFIX}{uuid.uuid4().hex[:12]}"


def is_placeholder_event_id(event_id: str | None) -> bool:
    return not event_id or event_id.startswith(PLACEHOLDER_EVENT_PREFIX)


class CalendarPort(ABC):
    """
    Remote calendar of a tenant.

    Every method is a no-op when ``tenant.calendar.enabled`` is false:
    ``create_tentative_event`` then returns a placeholder handle and
    ``fetch_busy_intervals`` returns an empty list.
    Remote failures raise CalendarUnavailableError.
    """

    @abstractmethod
    def create_tentative_event(
        self,
        tenant: Tenant,
        summary: str,
        start: datetime,
        end: datetime,
        notes: str = "",
        attendees: list[str] | None = None,
    ) -> str:
        """Create a tentative event. Returns the event handle."""
        raise NotImplementedError

    @abstractmethod
    def confirm_event(self, tenant: Tenant, event_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def cancel_event(self, tenant: Tenant, event_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def fetch_busy_intervals(self, tenant: Tenant, start: datetime, end: datetime) -> list[BusyInterval]:
        raise NotImplementedError
