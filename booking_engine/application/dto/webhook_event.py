from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from booking_engine.domain.entities.message import InboundMessage

WHATSAPP_OBJECT = "whatsapp_business_account"


class WebhookEventDTO(BaseModel):
    object: str | None = None
    entry: list[dict[str, Any]] = Field(default_factory=list)

    def is_whatsapp(self) -> bool:
        return self.object == WHATSAPP_OBJECT

    def _values(self) -> list[dict[str, Any]]:
        values: list[dict[str, Any]] = []
        for entry in self.entry or []:
            for change in entry.get("changes", []) or []:
                value = change.get("value")
                if isinstance(value, dict):
                    values.append(value)
        return values

    def extract_messages(self) -> list[InboundMessage]:
        messages: list[InboundMessage] = []
        for value in self._values():
            routing_key = str((value.get("metadata") or {}).get("phone_number_id") or "")
            for msg in value.get("messages", []) or []:
                mid = msg.get("id")
                sender = msg.get("from")
                if not (mid and sender):
                    continue

                kind = str(msg.get("type") or "unknown")
                messages.append(
                    InboundMessage(
                        id=str(mid),
                        routing_key=routing_key,
                        customer_id=str(sender),
                        text=_message_text(msg),
                        timestamp=_timestamp(msg.get("timestamp")),
                        kind=kind,
                    )
                )
        return messages

    def extract_statuses(self) -> list[dict[str, Any]]:
        statuses: list[dict[str, Any]] = []
        for value in self._values():
            statuses.extend(s for s in value.get("statuses", []) or [] if isinstance(s, dict))
        return statuses


def _message_text(msg: dict[str, Any]) -> str | None:
    kind = msg.get("type")
    if kind == "text":
        body = ((msg.get("text") or {}).get("body") or "").strip()
        return body or None
    if kind == "interactive":
        interactive = msg.get("interactive") or {}
        reply = interactive.get("button_reply") or interactive.get("list_reply") or {}
        return (reply.get("id") or "").strip() or None
    if kind == "button":
        # template quick-reply buttons
        button = msg.get("button") or {}
        return (button.get("payload") or button.get("text") or "").strip() or None
    return None


def _timestamp(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0
