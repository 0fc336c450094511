from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


@dataclass(frozen=True)
class PendingBooking:
    tenant_key: str
    remote_event_id: str
    start: datetime
    end: datetime
    service_id: str | None
    service_name: str
    price: float | None
    currency: str
    duration_minutes: int
    timezone: str
    display_label: str
    language: str = "en"
    updated_at: datetime | None = None


class BookingStatus(str, Enum):
    IDLE = "idle"
    AWAITING_APPROVAL = "awaiting_approval"


@dataclass(frozen=True)
class CustomerBookingState:
    status: BookingStatus = BookingStatus.IDLE
    pending: PendingBooking | None = None

    @staticmethod
    def from_pending(pending: PendingBooking | None) -> "CustomerBookingState":
        if pending is None:
            return CustomerBookingState()
        return CustomerBookingState(status=BookingStatus.AWAITING_APPROVAL, pending=pending)

    @property
    def is_awaiting_approval(self) -> bool:
        return self.status is BookingStatus.AWAITING_APPROVAL
