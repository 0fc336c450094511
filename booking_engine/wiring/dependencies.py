from functools import lru_cache
import logging

from booking_engine.core.config import settings
from booking_engine.application.ports.booking_store import PendingBookingStorePort
from booking_engine.application.ports.calendar import CalendarPort
from booking_engine.application.ports.classifier import ClassifierPort
from booking_engine.application.ports.message_platform import MessagePlatformPort
from booking_engine.application.ports.tenant_directory import TenantDirectoryPort
from booking_engine.application.use_cases.availability import AvailabilityUseCase
from booking_engine.application.use_cases.booking_orchestrator import BookingOrchestrator
from booking_engine.application.use_cases.resolve_intent import IntentResolverUseCase
from booking_engine.infrastructure.calendar.google_calendar import GoogleCalendar
from booking_engine.infrastructure.calendar.mock_calendar import MockCalendar
from booking_engine.infrastructure.llm.openai_classifier import OpenAIClassifier
from booking_engine.infrastructure.store.json_store import JsonPendingBookingStore
from booking_engine.infrastructure.store.memory_store import MemoryPendingBookingStore
from booking_engine.infrastructure.tenants.tenant_directory import JsonTenantDirectory
from booking_engine.infrastructure.whatsapp.mock_platform import MockWhatsAppPlatform
from booking_engine.infrastructure.whatsapp.webhook_verify import WebhookVerifier
from booking_engine.infrastructure.whatsapp.whatsapp_client import WhatsAppClient
from booking_engine.infrastructure.whatsapp.whatsapp_platform import WhatsAppPlatform

logger = logging.getLogger(__name__)


def _is_dev() -> bool:
    return settings.ENV.lower() in {"dev", "local"}


@lru_cache
def get_tenant_directory() -> TenantDirectoryPort:
    return JsonTenantDirectory(settings.TENANTS_FILE, default_phone_number_id=settings.WHATSAPP_PHONE_NUMBER_ID)


@lru_cache
def get_pending_booking_store() -> PendingBookingStorePort:
    if settings.STORE_PROVIDER.lower() == "memory":
        return MemoryPendingBookingStore()
    return JsonPendingBookingStore(data_dir=settings.PENDING_BOOKINGS_DIR)


@lru_cache
def get_calendar() -> CalendarPort:
    if not settings.GOOGLE_CALENDAR_ACCESS_TOKEN or _is_dev():
        logger.info("Using MockCalendar")
        return MockCalendar()
    return GoogleCalendar()


@lru_cache
def get_classifier() -> ClassifierPort | None:
    if settings.OPENAI_API_KEY and settings.OPENAI_API_KEY.strip():
        return OpenAIClassifier()
    logger.info("OPENAI_API_KEY missing; intent resolution runs on keyword rules only")
    return None


@lru_cache
def get_message_platform() -> MessagePlatformPort:
    logger.info("WHATSAPP_ACCESS_TOKEN present=%s ENV=%s", bool(settings.WHATSAPP_ACCESS_TOKEN), settings.ENV)

    if not settings.WHATSAPP_ACCESS_TOKEN and _is_dev():
        logger.info("Using MockWhatsAppPlatform (token missing, ENV=dev/local)")
        return MockWhatsAppPlatform()

    logger.info("Using real WhatsAppPlatform")
    return WhatsAppPlatform(
        client=WhatsAppClient(),
        tenants=get_tenant_directory(),
        default_access_token=settings.WHATSAPP_ACCESS_TOKEN,
        default_graph_version=settings.WHATSAPP_GRAPH_API_VERSION,
    )


@lru_cache
def get_booking_orchestrator() -> BookingOrchestrator:
    calendar = get_calendar()
    return BookingOrchestrator(
        store=get_pending_booking_store(),
        tenants=get_tenant_directory(),
        calendar=calendar,
        platform=get_message_platform(),
        resolver=IntentResolverUseCase(classifier=get_classifier()),
        availability=AvailabilityUseCase(
            calendar=calendar,
            grace_minutes=settings.SLOT_GRACE_MINUTES,
            window_days=settings.SLOT_WINDOW_DAYS,
            limit=settings.SLOT_LIMIT,
        ),
        owner_email=settings.OWNER_ATTENDEE_EMAIL,
    )


@lru_cache
def get_webhook_verifier() -> WebhookVerifier:
    return WebhookVerifier(
        verify_token=settings.WHATSAPP_VERIFY_TOKEN,
        app_secret=settings.WHATSAPP_APP_SECRET,
        env=settings.ENV,
    )
