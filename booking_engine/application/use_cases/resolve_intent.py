from __future__ import annotations

import logging

from booking_engine.application.ports.classifier import ClassifierPort
from booking_engine.application.utils.intent_rules import (
    asks_for_availability,
    asks_pending_status,
    asks_to_cancel,
    is_greeting_or_thanks,
)
from booking_engine.application.utils.language import detect_language
from booking_engine.application.utils.replies import default_reply_for_action, reply
from booking_engine.domain.entities.intent import ClassifierOutput, IntentAction, IntentResolution
from booking_engine.domain.entities.pending_booking import PendingBooking
from booking_engine.domain.entities.tenant import Tenant


class IntentResolverUseCase:
    """
    Turns free-form customer text into one of the fixed booking actions.

    The classifier is tried first when configured. Any failure or unusable
    answer falls through to keyword rules, whose reply language is picked
    from the script of the message (en / he / ar). The returned
    ``response_text`` is never empty.
    """

    def __init__(self, classifier: ClassifierPort | None = None) -> None:
        self._classifier = classifier
        self._logger = logging.getLogger(__name__)

    def resolve(self, tenant: Tenant, message_text: str, pending: PendingBooking | None) -> IntentResolution:
        language = detect_language(message_text)
        if not (message_text or "").strip():
            return IntentResolution(
                action=IntentAction.UNKNOWN,
                response_text=reply("unavailable", language),
                language=language,
            )

        if self._classifier is not None:
            try:
                output = self._classifier.classify(build_classifier_context(tenant, pending), message_text)
                return self._normalize(output, tenant, pending, language)
            except Exception as e:
                self._logger.warning(
                    "Classifier failed; using keyword fallback",
                    extra={"tenant": tenant.key, "reason": str(e)},
                )

        return self.fallback(tenant, message_text, pending)

    def fallback(self, tenant: Tenant, message_text: str, pending: PendingBooking | None) -> IntentResolution:
        language = detect_language(message_text)

        if pending is not None and asks_pending_status(message_text, language):
            return IntentResolution(
                action=IntentAction.PENDING_STATUS,
                response_text=reply("pending_wait", language, label=pending.display_label),
                language=language,
            )
        if asks_to_cancel(message_text, language):
            return IntentResolution(
                action=IntentAction.CANCEL_BOOKING,
                response_text=reply("cancel_hint", language),
                language=language,
            )

        service = next((s for s in tenant.services if s.matches_text(message_text)), None)
        if service is not None or asks_for_availability(message_text, language):
            return IntentResolution(
                action=IntentAction.SHOW_AVAILABILITY,
                response_text=reply("show_availability", language),
                language=language,
                service_hint=service.id if service else None,
            )
        if is_greeting_or_thanks(message_text, language):
            return IntentResolution(
                action=IntentAction.ANSWER,
                response_text=reply("greeting", language, name=tenant.display_name),
                language=language,
            )
        return IntentResolution(
            action=IntentAction.UNKNOWN,
            response_text=reply("unavailable", language),
            language=language,
        )

    def _normalize(
        self,
        output: ClassifierOutput,
        tenant: Tenant,
        pending: PendingBooking | None,
        language: str,
    ) -> IntentResolution:
        action = IntentAction((output.action or "").strip().upper())
        response = (output.response_text or "").strip()
        if not response:
            response = default_reply_for_action(
                action,
                language,
                business_name=tenant.display_name,
                pending_label=pending.display_label if pending else None,
            )
        return IntentResolution(
            action=action,
            response_text=response,
            language=language,
            service_hint=(output.service_hint or "").strip() or None,
            preferred_time_hint=(output.preferred_time_hint or "").strip() or None,
            source="classifier",
        )


def build_classifier_context(tenant: Tenant, pending: PendingBooking | None) -> str:
    services = "\n".join(
        f" - {s.id}: {s.name} ({s.min_minutes}-{s.max_minutes} min{', ' + s.formatted_price() if s.price else ''})"
        for s in tenant.services
    )
    lines = [
        f"You are the booking assistant for {tenant.display_name or 'the salon'}.",
        "Keep the business tone: friendly, concise, helpful.",
        "Always reply in the same language the customer wrote in.",
        "Detect the customer's intent and choose one ACTION from:",
        " - SHOW_AVAILABILITY: the customer wants to book or change an appointment.",
        " - PENDING_STATUS: the customer asks about an existing pending booking or its approval.",
        " - CANCEL_BOOKING: the customer wants to cancel the upcoming booking.",
        " - ANSWER: a general question you can answer directly.",
        " - ESCALATE: the customer asks for a human or has an issue you cannot solve.",
        " - UNKNOWN: you cannot determine the intent.",
        "Always include a short helpful reply.",
        "Services offered (id: name):",
        services,
        "If the customer names a service, return its id as the service.",
        "If the customer names a concrete date and time, return it as an ISO-8601 preferred_time.",
        f"Current timezone: {tenant.calendar.timezone}.",
    ]
    if pending is not None:
        lines.append(f"Pending booking exists: {pending.display_label}, awaiting owner approval.")
    else:
        lines.append("There is no pending booking right now.")
    return "\n".join(lines)
