"""
Tests for classifier-first intent resolution with keyword fallback.
"""

from __future__ import annotations

from datetime import datetime, timezone

from booking_engine.application.exceptions import ClassifierContractError, ClassifierUpstreamError
from booking_engine.application.use_cases.resolve_intent import IntentResolverUseCase, build_classifier_context
from booking_engine.application.utils.replies import reply
from booking_engine.domain.entities.intent import ClassifierOutput, IntentAction
from booking_engine.domain.entities.pending_booking import PendingBooking
from booking_engine.infrastructure.llm.mock_classifier import ScriptedClassifier
from booking_engine.infrastructure.tenants.tenant_directory import DEFAULT_SERVICES
from booking_engine.domain.entities.tenant import CalendarConfig, Tenant

TENANT = Tenant(
    key="salon",
    display_name="Demo Salon",
    phone_number_id="pn-1",
    services=DEFAULT_SERVICES,
    calendar=CalendarConfig(timezone="America/New_York"),
)

PENDING = PendingBooking(
    tenant_key="salon",
    remote_event_id="evt-1",
    start=datetime(2024, 1, 8, 15, 30, tzinfo=timezone.utc),
    end=datetime(2024, 1, 8, 16, 15, tzinfo=timezone.utc),
    service_id="haircut",
    service_name="Haircut",
    price=45,
    currency="USD",
    duration_minutes=45,
    timezone="America/New_York",
    display_label="Mon Jan 8 · 10:30",
)


def test_classifier_answer_is_used_when_valid():
    classifier = ScriptedClassifier(
        [ClassifierOutput(action="show_availability", response_text=" Sure thing! ", service_hint="color")]
    )
    resolver = IntentResolverUseCase(classifier=classifier)

    result = resolver.resolve(TENANT, "can I get my hair dyed", None)

    assert result.action is IntentAction.SHOW_AVAILABILITY
    assert result.response_text == "Sure thing!"
    assert result.service_hint == "color"
    assert result.source == "classifier"
    assert classifier.calls[0][1] == "can I get my hair dyed"


def test_classifier_failure_falls_back_to_keywords():
    resolver = IntentResolverUseCase(classifier=ScriptedClassifier([ClassifierUpstreamError("timeout")]))

    result = resolver.resolve(TENANT, "I want a haircut tomorrow", None)

    assert result.action is IntentAction.SHOW_AVAILABILITY
    assert result.service_hint == "haircut"
    assert result.source == "fallback"
    assert result.response_text


def test_contract_error_and_unknown_action_fall_back():
    resolver = IntentResolverUseCase(
        classifier=ScriptedClassifier([ClassifierContractError("bad json"), ClassifierOutput(action="DANCE")])
    )

    assert resolver.resolve(TENANT, "hello", None).source == "fallback"
    assert resolver.resolve(TENANT, "hello", None).source == "fallback"


def test_empty_classifier_response_gets_default_text():
    resolver = IntentResolverUseCase(
        classifier=ScriptedClassifier(
            [ClassifierOutput(action="ESCALATE"), ClassifierOutput(action="PENDING_STATUS", response_text="  ")]
        )
    )

    escalated = resolver.resolve(TENANT, "I want a manager", None)
    status = resolver.resolve(TENANT, "any news?", PENDING)

    assert escalated.action is IntentAction.ESCALATE
    assert escalated.response_text == reply("escalate", "en")
    assert status.response_text == reply("pending_wait", "en", label=PENDING.display_label)


def test_fallback_buckets():
    resolver = IntentResolverUseCase()

    assert resolver.resolve(TENANT, "what's the status?", PENDING).action is IntentAction.PENDING_STATUS
    assert resolver.resolve(TENANT, "I need to cancel", PENDING).action is IntentAction.CANCEL_BOOKING
    assert resolver.resolve(TENANT, "any openings this week?", None).action is IntentAction.SHOW_AVAILABILITY
    assert resolver.resolve(TENANT, "do you do nails", None).service_hint == "mani"

    greeting = resolver.resolve(TENANT, "hello there", None)
    assert greeting.action is IntentAction.ANSWER
    assert "Demo Salon" in greeting.response_text

    unknown = resolver.resolve(TENANT, "qwerty", None)
    assert unknown.action is IntentAction.UNKNOWN
    assert unknown.response_text


def test_status_question_without_pending_is_not_pending_status():
    resolver = IntentResolverUseCase()

    assert resolver.resolve(TENANT, "status", None).action is IntentAction.UNKNOWN


def test_fallback_replies_in_script_language():
    resolver = IntentResolverUseCase()

    hebrew = resolver.resolve(TENANT, "אני רוצה לקבוע תור", None)
    arabic = resolver.resolve(TENANT, "أريد إلغاء الموعد", PENDING)

    assert hebrew.language == "he"
    assert hebrew.action is IntentAction.SHOW_AVAILABILITY
    assert hebrew.response_text == reply("show_availability", "he")
    assert arabic.language == "ar"
    assert arabic.action is IntentAction.CANCEL_BOOKING
    assert arabic.response_text == reply("cancel_hint", "ar")


def test_empty_text_is_unknown():
    result = IntentResolverUseCase(classifier=ScriptedClassifier()).resolve(TENANT, "  ", None)

    assert result.action is IntentAction.UNKNOWN
    assert result.response_text


def test_classifier_context_lists_services_and_pending_booking():
    context = build_classifier_context(TENANT, PENDING)

    assert "haircut: Haircut" in context
    assert "America/New_York" in context
    assert "Mon Jan 8 · 10:30" in context
    assert "no pending booking" in build_classifier_context(TENANT, None)
