from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime, timezone

from booking_engine.application.ports.booking_store import PendingBookingStorePort
from booking_engine.domain.entities.pending_booking import PendingBooking


class MemoryPendingBookingStore(PendingBookingStorePort):
    def __init__(self) -> None:
        self._bookings: dict[str, PendingBooking] = {}
        self._lock = threading.Lock()

    def get(self, customer_id: str) -> PendingBooking | None:
        with self._lock:
            return self._bookings.get(customer_id)

    def put(self, customer_id: str, booking: PendingBooking) -> None:
        if not customer_id:
            raise ValueError("customer_id is required to save a pending booking")
        with self._lock:
            self._bookings[customer_id] = replace(booking, updated_at=datetime.now(timezone.utc))

    def delete(self, customer_id: str) -> None:
        with self._lock:
            self._bookings.pop(customer_id, None)

    def list_all(self) -> dict[str, PendingBooking]:
        with self._lock:
            return dict(self._bookings)
