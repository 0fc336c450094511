from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any
from urllib.parse import quote

import httpx

from booking_engine.application.exceptions import CalendarUnavailableError
from booking_engine.application.ports.calendar import CalendarPort, new_placeholder_event_id
from booking_engine.core.config import settings
from booking_engine.domain.entities.slot import BusyInterval
from booking_engine.domain.entities.tenant import Tenant


class GoogleCalendar(CalendarPort):
    """Google Calendar v3 REST adapter authenticated with a bearer access token."""

    def __init__(
        self,
        access_token: str | None = None,
        base_url: str | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self._access_token = access_token or settings.GOOGLE_CALENDAR_ACCESS_TOKEN
        self._base_url = (base_url or settings.GOOGLE_CALENDAR_BASE_URL).rstrip("/")
        self._client = client or httpx.Client(timeout=10.0)
        self._logger = logging.getLogger(__name__)

        if not self._access_token:
            raise ValueError("GOOGLE_CALENDAR_ACCESS_TOKEN is required for Google Calendar")

    def create_tentative_event(
        self,
        tenant: Tenant,
        summary: str,
        start: datetime,
        end: datetime,
        notes: str = "",
        attendees: list[str] | None = None,
    ) -> str:
        if not tenant.calendar.enabled:
            self._logger.info("Calendar disabled; skipping event creation", extra={"tenant": tenant.key})
            return new_placeholder_event_id()

        payload = {
            "summary": summary,
            "description": notes,
            "start": {"dateTime": _iso(start), "timeZone": tenant.calendar.timezone},
            "end": {"dateTime": _iso(end), "timeZone": tenant.calendar.timezone},
            "attendees": [{"email": email} for email in attendees or []],
            "status": "tentative",
        }
        data = self._request("POST", self._events_url(tenant), json=payload)
        event_id = data.get("id")
        if not event_id:
            raise CalendarUnavailableError("No event id returned from Google Calendar")

        self._logger.info("Tentative event created", extra={"tenant": tenant.key, "event_id": event_id})
        return str(event_id)

    def confirm_event(self, tenant: Tenant, event_id: str) -> None:
        if not tenant.calendar.enabled:
            return
        self._request("PATCH", f"{self._events_url(tenant)}/{quote(event_id, safe='')}", json={"status": "confirmed"})
        self._logger.info("Calendar event confirmed", extra={"tenant": tenant.key, "event_id": event_id})

    def cancel_event(self, tenant: Tenant, event_id: str) -> None:
        if not tenant.calendar.enabled:
            return
        self._request("DELETE", f"{self._events_url(tenant)}/{quote(event_id, safe='')}")
        self._logger.info("Calendar event cancelled", extra={"tenant": tenant.key, "event_id": event_id})

    def fetch_busy_intervals(self, tenant: Tenant, start: datetime, end: datetime) -> list[BusyInterval]:
        if not tenant.calendar.enabled:
            return []

        calendar_id = tenant.calendar.calendar_id or "primary"
        payload = {
            "timeMin": _iso(start),
            "timeMax": _iso(end),
            "timeZone": tenant.calendar.timezone,
            "items": [{"id": calendar_id}],
        }
        data = self._request("POST", f"{self._base_url}/freeBusy", json=payload)
        busy = (data.get("calendars") or {}).get(calendar_id, {}).get("busy") or []

        intervals: list[BusyInterval] = []
        for item in busy:
            try:
                intervals.append(
                    BusyInterval(
                        start=datetime.fromisoformat(item["start"].replace("Z", "+00:00")),
                        end=datetime.fromisoformat(item["end"].replace("Z", "+00:00")),
                    )
                )
            except (KeyError, AttributeError, ValueError):
                continue
        return intervals

    def _events_url(self, tenant: Tenant) -> str:
        calendar_id = quote(tenant.calendar.calendar_id or "primary", safe="")
        return f"{self._base_url}/calendars/{calendar_id}/events"

    def _request(self, method: str, url: str, json: dict[str, Any] | None = None) -> dict[str, Any]:
        headers = {"Authorization": f"Bearer {self._access_token}"}
        try:
            response = self._client.request(method, url, json=json, headers=headers)
            response.raise_for_status()
        except httpx.HTTPError as e:
            self._logger.error("Google Calendar request failed", extra={"method": method, "reason": str(e)})
            raise CalendarUnavailableError(f"Google Calendar {method} failed: {e}") from e

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise CalendarUnavailableError("Google Calendar returned invalid JSON") from e


def _iso(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()
