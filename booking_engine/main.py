import logging

import uvicorn
from fastapi import FastAPI

from booking_engine.api.webhooks import router as webhooks_router
from booking_engine.core.config import settings

CONTEXT_KEYS = ("message_id", "tenant", "customer_id", "action", "language", "service", "event_id", "reason")


class ContextFormatter(logging.Formatter):
    """Appends whichever booking context keys were passed through ``extra``."""

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        context = [
            f"{key}={getattr(record, key)}" for key in CONTEXT_KEYS if getattr(record, key, None) not in (None, "")
        ]
        return f"{base} | {' '.join(context)}" if context else base


def configure_logging(level: str) -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(ContextFormatter("%(asctime)s %(levelname)s:%(name)s:%(message)s"))

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()
    root.addHandler(handler)


def create_app() -> FastAPI:
    configure_logging(settings.LOG_LEVEL)

    application = FastAPI(title="WhatsApp Booking Engine", version="1.0.0")
    application.include_router(webhooks_router, tags=["webhooks"])

    @application.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok", "env": settings.ENV}

    logging.getLogger(__name__).info("Booking engine ready (ENV=%s, store=%s)", settings.ENV, settings.STORE_PROVIDER)
    return application


app = create_app()


def run() -> None:
    uvicorn.run("booking_engine.main:app", host=settings.HOST, port=settings.PORT, log_config=None)


if __name__ == "__main__":
    run()
