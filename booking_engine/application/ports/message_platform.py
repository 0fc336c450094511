from abc import ABC, abstractmethod

from booking_engine.domain.entities.message import OutboundOption


class MessagePlatformPort(ABC):
    @abstractmethod
    def send_text(self, tenant_key: str, customer_id: str, body: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def send_options(self, tenant_key: str, customer_id: str, prompt: str, options: list[OutboundOption]) -> None:
        raise NotImplementedError
