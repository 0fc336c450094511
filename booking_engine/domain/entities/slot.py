from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class BusyInterval:
    start: datetime
    end: datetime

    def overlaps(self, start: datetime, end: datetime) -> bool:
        return start < self.end and self.start < end


@dataclass(frozen=True)
class SearchWindow:
    start: datetime
    end: datetime


@dataclass(frozen=True)
class AvailableSlot:
    start: datetime  # UTC
    end: datetime  # UTC
    timezone: str
    display_label: str
    button_label: str
    selection_token: str
