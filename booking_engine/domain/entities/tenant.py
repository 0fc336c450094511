from __future__ import annotations

from dataclasses import dataclass, field
from datetime import time

from booking_engine.domain.entities.service import Service


@dataclass(frozen=True)
class WorkingHours:
    day: int  # 0 = Sunday ... 6 = Saturday
    start: time
    end: time


@dataclass(frozen=True)
class CalendarConfig:
    enabled: bool = False
    timezone: str = "UTC"
    calendar_id: str = "primary"
    slot_duration_minutes: int = 45
    working_hours: tuple[WorkingHours, ...] = ()

    def hours_for_day(self, day: int) -> list[WorkingHours]:
        """Working-hour ranges for a Sunday=0 weekday, earliest first."""
        return sorted((wh for wh in self.working_hours if wh.day == day), key=lambda wh: wh.start)


@dataclass(frozen=True)
class Tenant:
    key: str
    display_name: str
    phone_number_id: str
    services: tuple[Service, ...]
    calendar: CalendarConfig = CalendarConfig()
    access_token: str | None = field(default=None, repr=False)
    graph_version: str | None = None
