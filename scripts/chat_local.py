#!/usr/bin/env python3
"""
Interactive local chat harness (no HTTP, no WhatsApp).

Usage:
  python3 scripts/chat_local.py

What it does:
- Keeps a stable customer id for the session
- Sends your typed messages through the same BookingOrchestrator the webhook uses,
  wired to the mock calendar, mock transport and in-memory store
- Prints every outbound message; type the number of an option to "tap" it
"""

from __future__ import annotations

import logging
import sys
import time
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from booking_engine.application.use_cases.availability import AvailabilityUseCase
from booking_engine.application.use_cases.booking_orchestrator import BookingOrchestrator
from booking_engine.application.use_cases.resolve_intent import IntentResolverUseCase
from booking_engine.core.config import settings
from booking_engine.domain.entities.message import InboundMessage, OutboundOption
from booking_engine.infrastructure.calendar.mock_calendar import MockCalendar
from booking_engine.infrastructure.store.memory_store import MemoryPendingBookingStore
from booking_engine.infrastructure.tenants.tenant_directory import JsonTenantDirectory
from booking_engine.infrastructure.whatsapp.mock_platform import MockWhatsAppPlatform
from booking_engine.wiring.dependencies import get_classifier


def _print_header(customer_id: str) -> None:
    print("\nLocal Booking Chat")
    print("-" * 60)
    print(f"customer_id: {customer_id}")
    print("Type your message and press Enter. Type a number to tap an option.")
    print("Commands: /new (new customer), /pending, /quit, /help")
    print("-" * 60)


def _build() -> tuple[BookingOrchestrator, MockWhatsAppPlatform, MemoryPendingBookingStore]:
    calendar = MockCalendar()
    platform = MockWhatsAppPlatform()
    store = MemoryPendingBookingStore()
    orchestrator = BookingOrchestrator(
        store=store,
        tenants=JsonTenantDirectory(settings.TENANTS_FILE, default_phone_number_id=settings.WHATSAPP_PHONE_NUMBER_ID),
        calendar=calendar,
        platform=platform,
        resolver=IntentResolverUseCase(classifier=get_classifier()),
        availability=AvailabilityUseCase(
            calendar=calendar,
            grace_minutes=settings.SLOT_GRACE_MINUTES,
            window_days=settings.SLOT_WINDOW_DAYS,
            limit=settings.SLOT_LIMIT,
        ),
        owner_email=settings.OWNER_ATTENDEE_EMAIL,
    )
    return orchestrator, platform, store


def main() -> None:
    logging.basicConfig(level=logging.WARNING)
    orchestrator, platform, store = _build()
    customer_id = f"local-{int(time.time())}"
    options: list[OutboundOption] = []
    _print_header(customer_id)

    while True:
        try:
            text = input("\nYou: ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            break

        if text in {"/quit", "/exit"}:
            break
        if text == "/help":
            _print_header(customer_id)
            continue
        if text == "/new":
            customer_id = f"local-{int(time.time())}"
            options = []
            print(f"new customer_id: {customer_id}")
            continue
        if text == "/pending":
            print(store.get(customer_id))
            continue
        if text.isdigit() and options and 1 <= int(text) <= len(options):
            text = options[int(text) - 1].token

        already_sent = len(platform.sent)
        orchestrator.handle(
            InboundMessage(
                id=f"local-{time.time_ns()}",
                routing_key=settings.WHATSAPP_PHONE_NUMBER_ID,
                customer_id=customer_id,
                text=text,
                timestamp=int(time.time()),
            )
        )

        for message in platform.sent[already_sent:]:
            print(f"Bot: {message.body}")
            if message.options:
                options = list(message.options)
                for i, option in enumerate(options, start=1):
                    print(f"  [{i}] {option.label}  ({option.token})")


if __name__ == "__main__":
    main()
