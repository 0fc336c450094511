"""
Inbound command decoding.

Every inbound text or button/list reply id is decoded once into one of the
command variants below; the orchestrator dispatches on the variant type.

Tokens sent out as options may end with ``::<language>`` so that a tap on a
button is answered in the language of the conversation that produced it.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
from typing import Union

from booking_engine.application.utils.language import SUPPORTED_LANGUAGES

SLOT_PREFIX = "slot::"
LEGACY_SLOT_PREFIX = "slot_"
SHOW_SERVICE_PREFIX = "showservice::"
APPROVE_TOKEN = "approve_me"
REJECT_TOKEN = "reject_me"
DEFAULT_SERVICE_TOKEN = "default"


@dataclass(frozen=True)
class SlotSelection:
    service_id: str | None
    start: datetime
    language: str | None = None


@dataclass(frozen=True)
class Approve:
    pass


@dataclass(frozen=True)
class Reject:
    pass


@dataclass(frozen=True)
class ShowAvailability:
    service_id: str | None
    language: str | None = None


@dataclass(frozen=True)
class FreeText:
    text: str


@dataclass(frozen=True)
class UnreadableSelection:
    raw: str


@dataclass(frozen=True)
class NoText:
    pass


Command = Union[SlotSelection, Approve, Reject, ShowAvailability, FreeText, UnreadableSelection, NoText]


def decode_command(raw: str | None) -> Command:
    text = (raw or "").strip()
    if not text:
        return NoText()
    if text == APPROVE_TOKEN:
        return Approve()
    if text == REJECT_TOKEN:
        return Reject()
    if text.startswith(SLOT_PREFIX) or text.startswith(LEGACY_SLOT_PREFIX):
        decoded = decode_slot_selection(text)
        if decoded is None:
            return UnreadableSelection(raw=text)
        return decoded
    if text.startswith(SHOW_SERVICE_PREFIX):
        service_id, _, language = text[len(SHOW_SERVICE_PREFIX):].partition("::")
        return ShowAvailability(service_id=_service_or_none(service_id), language=_language_or_none(language))
    return FreeText(text=text)


def encode_slot_selection(service_id: str | None, start: datetime, language: str | None = None) -> str:
    return f"{SLOT_PREFIX}{service_id or DEFAULT_SERVICE_TOKEN}::{format_instant(start)}{_language_suffix(language)}"


def decode_slot_selection(token: str) -> SlotSelection | None:
    """
    Decode ``slot::<service>::<instant>[::<language>]`` or the legacy ``slot_<instant>``.

    Legacy tokens carry no service, so ``service_id`` is None and the caller
    falls back to the default service. Returns None when the instant is
    missing or unparseable.
    """
    language = None
    if token.startswith(SLOT_PREFIX):
        _, _, rest = token.partition(SLOT_PREFIX)
        service_id, sep, instant = rest.partition("::")
        if not sep:
            return None
        instant, _, language = instant.partition("::")
        service = _service_or_none(service_id)
    elif token.startswith(LEGACY_SLOT_PREFIX):
        instant = token[len(LEGACY_SLOT_PREFIX):]
        service = None
    else:
        return None

    start = parse_instant(instant)
    if start is None:
        return None
    return SlotSelection(service_id=service, start=start, language=_language_or_none(language))


def encode_show_availability(service_id: str | None, language: str | None = None) -> str:
    return f"{SHOW_SERVICE_PREFIX}{service_id or DEFAULT_SERVICE_TOKEN}{_language_suffix(language)}"


def format_instant(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def parse_instant(value: str | None, default_tz: tzinfo = timezone.utc) -> datetime | None:
    """Parse an ISO-8601 instant into an aware UTC datetime. Values without an offset are read in ``default_tz``."""
    text = (value or "").strip()
    if not text:
        return None
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=default_tz)
    return parsed.astimezone(timezone.utc)


def _service_or_none(service_id: str) -> str | None:
    service_id = service_id.strip()
    if not service_id or service_id == DEFAULT_SERVICE_TOKEN:
        return None
    return service_id


def _language_suffix(language: str | None) -> str:
    # English is the default and keeps tokens in their short form.
    if not language or language == "en":
        return ""
    return f"::{language}"


def _language_or_none(language: str) -> str | None:
    language = language.strip()
    return language if language in SUPPORTED_LANGUAGES else None
