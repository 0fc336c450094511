"""
Tests for inbound command decoding.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from booking_engine.application.utils.commands import (
    Approve,
    FreeText,
    NoText,
    Reject,
    ShowAvailability,
    SlotSelection,
    UnreadableSelection,
    decode_command,
    encode_show_availability,
    encode_slot_selection,
    format_instant,
    parse_instant,
)

START = datetime(2024, 1, 8, 10, 30, tzinfo=timezone.utc)


def test_slot_selection_token_carries_service_and_instant():
    token = encode_slot_selection("haircut", START)

    assert token == "slot::haircut::2024-01-08T10:30:00Z"
    assert decode_command(token) == SlotSelection(service_id="haircut", start=START)


def test_slot_selection_without_service_uses_default_marker():
    token = encode_slot_selection(None, START)

    assert token == "slot::default::2024-01-08T10:30:00Z"
    assert decode_command(token) == SlotSelection(service_id=None, start=START)


def test_legacy_slot_token_has_no_service():
    assert decode_command("slot_2024-01-08T10:30:00Z") == SlotSelection(service_id=None, start=START)


def test_unparseable_slot_tokens_are_unreadable():
    assert isinstance(decode_command("slot::haircut::not-a-time"), UnreadableSelection)
    assert isinstance(decode_command("slot::haircut"), UnreadableSelection)
    assert isinstance(decode_command("slot_"), UnreadableSelection)


def test_fixed_tokens():
    assert decode_command("approve_me") == Approve()
    assert decode_command(" reject_me ") == Reject()
    assert decode_command("showservice::color") == ShowAvailability(service_id="color")
    assert decode_command(encode_show_availability(None)) == ShowAvailability(service_id=None)


def test_empty_and_free_text():
    assert decode_command(None) == NoText()
    assert decode_command("   ") == NoText()
    assert decode_command("Can I book a haircut?") == FreeText(text="Can I book a haircut?")


def test_instants_are_normalized_to_utc():
    offset = timezone(timedelta(hours=-5))

    assert format_instant(datetime(2024, 1, 8, 5, 30, tzinfo=offset)) == "2024-01-08T10:30:00Z"
    assert parse_instant("2024-01-08T05:30:00-05:00") == START
    assert parse_instant("2024-01-08T10:30:00") == START
    assert parse_instant("tomorrow at ten") is None
    assert parse_instant(None) is None


def test_naive_instant_is_read_in_given_zone():
    assert parse_instant("2024-01-08T05:30:00", ZoneInfo("America/New_York")) == START
    assert parse_instant("2024-01-08T10:30:00Z", ZoneInfo("America/New_York")) == START


def test_tokens_carry_non_english_language():
    token = encode_slot_selection("haircut", START, "he")

    assert token == "slot::haircut::2024-01-08T10:30:00Z::he"
    assert decode_command(token) == SlotSelection(service_id="haircut", start=START, language="he")
    assert encode_slot_selection("haircut", START, "en") == "slot::haircut::2024-01-08T10:30:00Z"
    assert decode_command("showservice::color::ar") == ShowAvailability(service_id="color", language="ar")


def test_unknown_language_suffix_is_ignored():
    assert decode_command("slot::haircut::2024-01-08T10:30:00Z::xx") == SlotSelection(service_id="haircut", start=START)
    assert decode_command("showservice::color::xx") == ShowAvailability(service_id="color")
