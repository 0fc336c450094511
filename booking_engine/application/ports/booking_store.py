from abc import ABC, abstractmethod

from booking_engine.domain.entities.pending_booking import PendingBooking


class PendingBookingStorePort(ABC):
    @abstractmethod
    def get(self, customer_id: str) -> PendingBooking | None:
        raise NotImplementedError

    @abstractmethod
    def put(self, customer_id: str, booking: PendingBooking) -> None:
        """Store the booking for the customer, replacing any previous one and stamping updated_at."""
        raise NotImplementedError

    @abstractmethod
    def delete(self, customer_id: str) -> None:
        """Remove the customer's booking. No-op when absent."""
        raise NotImplementedError

    @abstractmethod
    def list_all(self) -> dict[str, PendingBooking]:
        raise NotImplementedError
