from __future__ import annotations

import logging
from dataclasses import dataclass, field

from booking_engine.application.ports.message_platform import MessagePlatformPort
from booking_engine.domain.entities.message import OutboundOption


@dataclass(frozen=True)
class SentMessage:
    tenant_key: str
    customer_id: str
    body: str
    options: tuple[OutboundOption, ...] = field(default=())


class MockWhatsAppPlatform(MessagePlatformPort):
    def __init__(self) -> None:
        self.sent: list[SentMessage] = []
        self._logger = logging.getLogger(__name__)

    def send_text(self, tenant_key: str, customer_id: str, body: str) -> None:
        self.sent.append(SentMessage(tenant_key=tenant_key, customer_id=customer_id, body=body))
        self._logger.info("Mock send to WhatsApp", extra={"customer_id": customer_id, "text": body})

    def send_options(self, tenant_key: str, customer_id: str, prompt: str, options: list[OutboundOption]) -> None:
        self.sent.append(
            SentMessage(tenant_key=tenant_key, customer_id=customer_id, body=prompt, options=tuple(options))
        )
        self._logger.info(
            "Mock send options to WhatsApp",
            extra={"customer_id": customer_id, "text": prompt, "options": [o.token for o in options]},
        )

    def bodies(self) -> list[str]:
        return [message.body for message in self.sent]
