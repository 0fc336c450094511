from __future__ import annotations

import json
import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Request, Response
from fastapi.responses import PlainTextResponse

from booking_engine.application.dto.webhook_event import WebhookEventDTO
from booking_engine.application.use_cases.booking_orchestrator import BookingOrchestrator
from booking_engine.domain.entities.message import InboundMessage
from booking_engine.infrastructure.whatsapp.webhook_verify import SIGNATURE_HEADER, WebhookVerifier
from booking_engine.wiring.dependencies import get_booking_orchestrator, get_webhook_verifier


router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/webhook")
def verify_webhook(
    hub_mode: str | None = Query(None, alias="hub.mode"),
    hub_verify_token: str | None = Query(None, alias="hub.verify_token"),
    hub_challenge: str | None = Query(None, alias="hub.challenge"),
    verifier: WebhookVerifier = Depends(get_webhook_verifier),
):
    challenge = verifier.challenge_for(hub_mode, hub_verify_token, hub_challenge)
    if challenge is None:
        raise HTTPException(status_code=403, detail="Verification failed")
    return PlainTextResponse(challenge)


@router.post("/webhook")
async def whatsapp_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    verifier: WebhookVerifier = Depends(get_webhook_verifier),
    orchestrator: BookingOrchestrator = Depends(get_booking_orchestrator),
) -> Response:
    body = await request.body()
    if not verifier.is_signed(body, request.headers.get(SIGNATURE_HEADER)):
        return Response(status_code=403)

    try:
        payload = json.loads(body.decode("utf-8")) if body else {}
    except (UnicodeDecodeError, json.JSONDecodeError):
        logger.exception("Failed to parse webhook body")
        return Response(status_code=400)

    try:
        event = WebhookEventDTO.model_validate(payload)
    except ValueError:
        logger.exception("Webhook payload has an unexpected shape")
        return Response(status_code=400)

    if not event.is_whatsapp():
        logger.info("Ignoring non-WhatsApp webhook", extra={"reason": event.object})
        return Response(status_code=200)

    for status in event.extract_statuses():
        logger.info(
            "Delivery status",
            extra={"message_id": status.get("id"), "reason": status.get("status")},
        )

    messages = event.extract_messages()
    logger.info("Webhook received", extra={"message_count": len(messages)})
    for message in messages:
        background_tasks.add_task(process_message, orchestrator, message)

    return Response(status_code=200)


def process_message(orchestrator: BookingOrchestrator, message: InboundMessage) -> None:
    try:
        orchestrator.handle(message)
    except Exception as e:
        logger.exception(
            "Failed to handle inbound message",
            extra={"message_id": message.id, "customer_id": message.customer_id, "reason": str(e)},
        )
