from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from booking_engine.application.ports.booking_store import PendingBookingStorePort
from booking_engine.application.ports.calendar import (
    CalendarPort,
    is_placeholder_event_id,
    new_placeholder_event_id,
)
from booking_engine.application.ports.message_platform import MessagePlatformPort
from booking_engine.application.ports.tenant_directory import TenantDirectoryPort
from booking_engine.application.use_cases.availability import AvailabilityUseCase
from booking_engine.application.use_cases.resolve_intent import IntentResolverUseCase
from booking_engine.application.utils.commands import (
    APPROVE_TOKEN,
    REJECT_TOKEN,
    Approve,
    Command,
    FreeText,
    NoText,
    Reject,
    ShowAvailability,
    SlotSelection,
    UnreadableSelection,
    decode_command,
    encode_show_availability,
    parse_instant,
)
from booking_engine.application.utils.keyed_lock import KeyedLocks
from booking_engine.application.utils.language import detect_language
from booking_engine.application.utils.replies import reply
from booking_engine.application.utils.slot_engine import format_slot_label
from booking_engine.domain.entities.intent import IntentAction, IntentResolution
from booking_engine.domain.entities.message import InboundMessage, OutboundOption
from booking_engine.domain.entities.pending_booking import CustomerBookingState, PendingBooking
from booking_engine.domain.entities.service import Service
from booking_engine.domain.entities.tenant import Tenant

# How many upcoming slots are scanned when checking a concrete requested time.
_REQUESTED_TIME_SCAN_LIMIT = 200


@dataclass(frozen=True)
class _Turn:
    tenant: Tenant
    customer_id: str
    raw_text: str
    language: str
    state: CustomerBookingState


class BookingOrchestrator:
    """
    Per-customer booking state machine.

    A customer is either idle or awaiting owner approval of exactly one
    pending booking. Each inbound message is handled inside that customer's
    lock, so the pending-booking read, the calendar call and the store write
    of two messages from the same customer never interleave.
    """

    def __init__(
        self,
        store: PendingBookingStorePort,
        tenants: TenantDirectoryPort,
        calendar: CalendarPort,
        platform: MessagePlatformPort,
        resolver: IntentResolverUseCase,
        availability: AvailabilityUseCase,
        owner_email: str | None = None,
        locks: KeyedLocks | None = None,
    ) -> None:
        self._store = store
        self._tenants = tenants
        self._calendar = calendar
        self._platform = platform
        self._resolver = resolver
        self._availability = availability
        self._owner_email = owner_email
        self._locks = locks or KeyedLocks()
        self._logger = logging.getLogger(__name__)

    def handle(self, message: InboundMessage) -> None:
        tenant = self._tenants.resolve_tenant_by_routing_key(message.routing_key)
        with self._locks.hold(message.customer_id):
            command = decode_command(message.text)
            pending = self._store.get(message.customer_id)
            turn = _Turn(
                tenant=tenant,
                customer_id=message.customer_id,
                raw_text=(message.text or "").strip(),
                language=turn_language(command, message.text, pending),
                state=CustomerBookingState.from_pending(pending),
            )
            self._logger.info(
                "Inbound message",
                extra={
                    "message_id": message.id,
                    "tenant": tenant.key,
                    "customer_id": message.customer_id,
                    "action": type(command).__name__,
                    "state": turn.state.status.value,
                },
            )

            if isinstance(command, NoText):
                self._send_text(turn, reply("got_it", turn.language))
            elif isinstance(command, UnreadableSelection):
                self._send_text(turn, reply("slot_unreadable", turn.language))
            elif isinstance(command, SlotSelection):
                service = self.resolve_service(tenant, command.service_id, "", turn.state.pending)
                self._select_slot(turn, service, command.start)
            elif isinstance(command, Approve):
                self._approve(turn)
            elif isinstance(command, Reject):
                self._reject(turn)
            elif isinstance(command, ShowAvailability):
                service = self.resolve_service(tenant, command.service_id, "", turn.state.pending)
                self._present_availability(turn, service)
            elif isinstance(command, FreeText):
                self._handle_free_text(turn)
            else:
                raise TypeError(f"Unhandled command: {command!r}")

    def resolve_service(
        self,
        tenant: Tenant,
        hint: str | None,
        raw_text: str,
        pending: PendingBooking | None,
    ) -> Service | None:
        """Explicit hint, then free-text match, then the pending booking's service, then the tenant default."""
        if hint:
            service = self._tenants.resolve_service_by_id(tenant, hint) or self._tenants.resolve_service_by_free_text(
                tenant, hint
            )
            if service:
                return service
        service = self._tenants.resolve_service_by_free_text(tenant, raw_text)
        if service:
            return service
        if pending is not None and pending.service_id:
            service = self._tenants.resolve_service_by_id(tenant, pending.service_id)
            if service:
                return service
        return self._tenants.resolve_default_service(tenant)

    @staticmethod
    def effective_duration_minutes(service: Service | None, tenant: Tenant) -> int:
        slot_minutes = tenant.calendar.slot_duration_minutes
        if service is None:
            return slot_minutes
        return max(service.max_minutes or slot_minutes, slot_minutes)

    # transitions

    def _select_slot(self, turn: _Turn, service: Service | None, start: datetime) -> None:
        tenant = turn.tenant
        start = start.astimezone(timezone.utc)
        duration = self.effective_duration_minutes(service, tenant)
        end = start + timedelta(minutes=duration)
        label = format_slot_label(start, tenant.calendar.timezone)
        summary = service.name if service else "Service Appointment"

        event_id = self._create_tentative_event(tenant, summary, start, end, turn.customer_id)
        booking = PendingBooking(
            tenant_key=tenant.key,
            remote_event_id=event_id,
            start=start,
            end=end,
            service_id=service.id if service else None,
            service_name=service.name if service else "Service",
            price=service.price if service else None,
            currency=service.currency if service else "USD",
            duration_minutes=duration,
            timezone=tenant.calendar.timezone,
            display_label=label,
            language=turn.language,
        )
        self._store.put(turn.customer_id, booking)

        previous = turn.state.pending
        if previous is not None and previous.remote_event_id != event_id:
            # The superseded tentative event would otherwise stay on the calendar.
            self._cancel_remote_event(previous, self._tenants.get_tenant(previous.tenant_key) or tenant)
            self._logger.info(
                "Superseded pending booking",
                extra={"customer_id": turn.customer_id, "event_id": previous.remote_event_id},
            )

        self._logger.info(
            "Pending booking created",
            extra={
                "tenant": tenant.key,
                "customer_id": turn.customer_id,
                "service": booking.service_id,
                "event_id": event_id,
            },
        )
        self._platform.send_options(
            tenant.key,
            turn.customer_id,
            reply("awaiting_approval", turn.language, service=booking.service_name, label=label),
            [
                OutboundOption(token=APPROVE_TOKEN, label=reply("option_approve", turn.language)),
                OutboundOption(token=REJECT_TOKEN, label=reply("option_reject", turn.language)),
            ],
        )

    def _approve(self, turn: _Turn) -> None:
        pending = turn.state.pending
        if pending is None:
            self._send_text(turn, reply("nothing_pending", turn.language))
            return
        tenant = self._tenants.get_tenant(pending.tenant_key) or turn.tenant
        if not is_placeholder_event_id(pending.remote_event_id):
            try:
                self._calendar.confirm_event(tenant, pending.remote_event_id)
            except Exception as e:
                self._logger.warning(
                    "Failed to confirm calendar event",
                    extra={"event_id": pending.remote_event_id, "reason": str(e)},
                )
        self._platform.send_text(
            tenant.key,
            turn.customer_id,
            reply("approved", turn.language, service=pending.service_name, label=pending.display_label),
        )
        self._store.delete(turn.customer_id)
        self._logger.info("Pending booking approved", extra={"customer_id": turn.customer_id})

    def _reject(self, turn: _Turn) -> None:
        pending = turn.state.pending
        if pending is None:
            self._send_text(turn, reply("nothing_pending", turn.language))
            return
        tenant = self._tenants.get_tenant(pending.tenant_key) or turn.tenant
        self._cancel_remote_event(pending, tenant)
        self._platform.send_text(
            tenant.key,
            turn.customer_id,
            reply("rejected", turn.language, service=pending.service_name, label=pending.display_label),
        )
        self._store.delete(turn.customer_id)
        self._logger.info("Pending booking rejected", extra={"customer_id": turn.customer_id})

    # intent-driven, no transition unless a concrete slot is requested

    def _handle_free_text(self, turn: _Turn) -> None:
        resolution = self._resolver.resolve(turn.tenant, turn.raw_text, turn.state.pending)
        turn = _Turn(
            tenant=turn.tenant,
            customer_id=turn.customer_id,
            raw_text=turn.raw_text,
            language=resolution.language,
            state=turn.state,
        )
        self._logger.info(
            "Intent resolved",
            extra={
                "customer_id": turn.customer_id,
                "action": resolution.action.value,
                "language": resolution.language,
                "service": resolution.service_hint,
                "source": resolution.source,
            },
        )

        if resolution.action is IntentAction.SHOW_AVAILABILITY:
            service = self.resolve_service(turn.tenant, resolution.service_hint, turn.raw_text, turn.state.pending)
            requested = self._requested_slot_start(turn.tenant, service, resolution)
            if requested is not None:
                self._select_slot(turn, service, requested)
            else:
                self._present_availability(turn, service, preface=resolution.response_text)
        elif resolution.action is IntentAction.PENDING_STATUS:
            if turn.state.is_awaiting_approval:
                self._send_text(turn, reply("pending_status", turn.language, label=turn.state.pending.display_label))
            else:
                self._send_text(turn, reply("no_pending_invite", turn.language))
        elif resolution.action is IntentAction.CANCEL_BOOKING:
            self._offer_cancellation(turn, resolution)
        else:
            self._send_text(turn, resolution.response_text)

    def _offer_cancellation(self, turn: _Turn, resolution: IntentResolution) -> None:
        pending = turn.state.pending
        if pending is None:
            self._send_text(turn, reply("nothing_to_cancel", turn.language))
            return
        service_id = pending.service_id
        if service_id is None:
            default = self._tenants.resolve_default_service(turn.tenant)
            service_id = default.id if default else None
        self._send_text(turn, resolution.response_text)
        self._platform.send_options(
            turn.tenant.key,
            turn.customer_id,
            reply("cancel_prompt", turn.language),
            [
                OutboundOption(token=REJECT_TOKEN, label=reply("option_reject", turn.language)),
                OutboundOption(
                    token=encode_show_availability(service_id, turn.language),
                    label=reply("option_other_times", turn.language),
                ),
            ],
        )

    def _present_availability(self, turn: _Turn, service: Service | None, preface: str | None = None) -> None:
        tenant = turn.tenant
        if preface:
            self._send_text(turn, preface)

        if service is None:
            self._send_text(turn, f"{reply('choose_service', turn.language)}\n{format_service_catalog(tenant)}")
            return

        slots = self._availability.find_slots(tenant, service_id=service.id, language=turn.language)
        if not slots:
            self._send_text(turn, reply("fully_booked", turn.language))
            return

        if service.price:
            self._send_text(turn, f"{service.name} · {service.formatted_price()}")

        self._platform.send_options(
            tenant.key,
            turn.customer_id,
            reply("pick_time", turn.language, timezone=slots[0].timezone),
            [OutboundOption(token=slot.selection_token, label=slot.button_label) for slot in slots],
        )

    def _requested_slot_start(
        self,
        tenant: Tenant,
        service: Service | None,
        resolution: IntentResolution,
    ) -> datetime | None:
        """The hinted instant when it is concrete and currently open, else None."""
        if service is None or not resolution.preferred_time_hint:
            return None
        requested = parse_instant(resolution.preferred_time_hint, ZoneInfo(tenant.calendar.timezone))
        if requested is None:
            return None
        for slot in self._availability.find_slots(
            tenant, service_id=service.id, limit=_REQUESTED_TIME_SCAN_LIMIT
        ):
            if slot.start == requested:
                return slot.start
            if slot.start > requested:
                break
        return None

    # collaborators

    def _create_tentative_event(
        self,
        tenant: Tenant,
        summary: str,
        start: datetime,
        end: datetime,
        customer_id: str,
    ) -> str:
        try:
            return self._calendar.create_tentative_event(
                tenant,
                summary,
                start,
                end,
                notes=f"Customer {customer_id}",
                attendees=[self._owner_email] if self._owner_email else [],
            )
        except Exception as e:
            self._logger.warning(
                "Failed to create tentative event; using local placeholder",
                extra={"tenant": tenant.key, "customer_id": customer_id, "reason": str(e)},
            )
            return new_placeholder_event_id()

    def _cancel_remote_event(self, pending: PendingBooking, tenant: Tenant) -> None:
        if is_placeholder_event_id(pending.remote_event_id):
            return
        try:
            self._calendar.cancel_event(tenant, pending.remote_event_id)
        except Exception as e:
            self._logger.warning(
                "Failed to cancel calendar event",
                extra={"event_id": pending.remote_event_id, "reason": str(e)},
            )

    def _send_text(self, turn: _Turn, body: str) -> None:
        self._platform.send_text(turn.tenant.key, turn.customer_id, body)


def turn_language(command: Command, text: str | None, pending: PendingBooking | None) -> str:
    """Language to answer in: the one carried by a tapped token, else the pending booking's, else detected."""
    if isinstance(command, (SlotSelection, ShowAvailability)) and command.language:
        return command.language
    if isinstance(command, FreeText) or pending is None:
        return detect_language(text)
    return pending.language


def format_service_catalog(tenant: Tenant) -> str:
    lines = []
    for service in tenant.services:
        price = f" ({service.formatted_price()})" if service.price else ""
        lines.append(f"• {service.name}{price}")
    return "\n".join(lines)
