from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class IntentAction(str, Enum):
    SHOW_AVAILABILITY = "SHOW_AVAILABILITY"
    PENDING_STATUS = "PENDING_STATUS"
    CANCEL_BOOKING = "CANCEL_BOOKING"
    ANSWER = "ANSWER"
    ESCALATE = "ESCALATE"
    UNKNOWN = "UNKNOWN"


@dataclass(frozen=True)
class ClassifierOutput:
    action: str
    response_text: str = ""
    service_hint: str | None = None
    preferred_time_hint: str | None = None


@dataclass(frozen=True)
class IntentResolution:
    action: IntentAction
    response_text: str
    language: str
    service_hint: str | None = None
    preferred_time_hint: str | None = None
    source: str = "fallback"  # "classifier" | "fallback"
