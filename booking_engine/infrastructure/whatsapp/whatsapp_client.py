from __future__ import annotations

import logging
from typing import Any

import httpx

from booking_engine.domain.entities.message import OutboundOption

MAX_BUTTONS = 3
MAX_LIST_ROWS = 10
BUTTON_TITLE_LIMIT = 20
ROW_TITLE_LIMIT = 24


class WhatsAppClient:
    def __init__(self, base_url: str = "https://graph.facebook.com", timeout: float = 10.0) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = httpx.Client(timeout=timeout)
        self._logger = logging.getLogger(__name__)

    def send_text(self, access_token: str, graph_version: str, phone_number_id: str, to: str, body: str) -> None:
        payload = {
            "messaging_product": "whatsapp",
            "to": to,
            "type": "text",
            "text": {"body": body},
        }
        self._post(access_token, graph_version, phone_number_id, payload)

    def send_options(
        self,
        access_token: str,
        graph_version: str,
        phone_number_id: str,
        to: str,
        prompt: str,
        options: list[OutboundOption],
    ) -> None:
        payload = {
            "messaging_product": "whatsapp",
            "to": to,
            "type": "interactive",
            "interactive": build_interactive(prompt, options),
        }
        self._post(access_token, graph_version, phone_number_id, payload)

    def _post(self, access_token: str, graph_version: str, phone_number_id: str, payload: dict[str, Any]) -> None:
        url = f"{self._base_url}/{graph_version}/{phone_number_id}/messages"
        headers = {"Authorization": f"Bearer {access_token}"}
        resp = self._client.post(url, json=payload, headers=headers)
        if resp.status_code >= 400:
            try:
                error = resp.json().get("error", {})
                error_code = error.get("code")
                error_message = error.get("message")
            except Exception:
                error_code = None
                error_message = resp.text

            self._logger.error(
                "WhatsApp send failed",
                extra={
                    "status": resp.status_code,
                    "error_code": error_code,
                    "error_message": error_message,
                    "customer_id": payload.get("to"),
                    "type": payload.get("type"),
                },
            )
            resp.raise_for_status()


def build_interactive(prompt: str, options: list[OutboundOption]) -> dict[str, Any]:
    """Reply buttons for up to three options, a single-section list otherwise."""
    if len(options) <= MAX_BUTTONS:
        return {
            "type": "button",
            "body": {"text": prompt},
            "action": {
                "buttons": [
                    {"type": "reply", "reply": {"id": option.token, "title": option.label[:BUTTON_TITLE_LIMIT]}}
                    for option in options
                ]
            },
        }
    return {
        "type": "list",
        "body": {"text": prompt},
        "action": {
            "button": "Options",
            "sections": [
                {
                    "title": "Options",
                    "rows": [
                        {"id": option.token, "title": option.label[:ROW_TITLE_LIMIT]}
                        for option in options[:MAX_LIST_ROWS]
                    ],
                }
            ],
        },
    }
