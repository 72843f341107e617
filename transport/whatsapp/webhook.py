"""
WhatsApp Webhook Receiver

FastAPI router for /webhook/whatsapp. Pure transport: turns HTTP into
dispatcher calls and WebhookReply into plain-text responses.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from .dispatcher import WebhookDispatcher

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhook", tags=["WhatsApp Transport"])


def get_dispatcher(request: Request) -> WebhookDispatcher:
    """Dispatcher built once at startup (see main.create_app)."""
    return request.app.state.dispatcher


# ============================================================================
# DEBUG PROBE + WEBHOOK CHALLENGE
# ============================================================================

@router.get("/whatsapp")
async def whatsapp_webhook_challenge(
    phone: Optional[str] = None,
    hub_mode: Optional[str] = Query(None, alias="hub.mode"),
    hub_verify_token: Optional[str] = Query(None, alias="hub.verify_token"),
    hub_challenge: Optional[str] = Query(None, alias="hub.challenge"),
    dispatcher: WebhookDispatcher = Depends(get_dispatcher),
) -> Response:
    """
    ?phone=...  → 200 JSON {phone, message} (debug probe, wins over hub.*)
    otherwise   → Meta verification: 200 challenge or 403 "Forbidden"
    """

    if phone:
        return JSONResponse(dispatcher.debug_probe(phone))

    reply = dispatcher.verify(hub_mode, hub_verify_token, hub_challenge)
    return PlainTextResponse(reply.body, status_code=reply.status_code)


# ============================================================================
# WEBHOOK RECEIVER (Message processing)
# ============================================================================

@router.post("/whatsapp")
async def whatsapp_webhook_receiver(
    request: Request,
    dispatcher: WebhookDispatcher = Depends(get_dispatcher),
) -> Response:
    """
    Receive WhatsApp deliveries.

    The body is read raw so the optional signature check sees the exact
    bytes Meta signed.
    """

    body = await request.body()
    reply = await dispatcher.handle_delivery(
        body, request.headers.get("X-Hub-Signature-256")
    )
    return PlainTextResponse(reply.body, status_code=reply.status_code)


@router.api_route("/whatsapp", methods=["PUT", "PATCH", "DELETE", "OPTIONS"])
async def whatsapp_webhook_method_not_allowed() -> Response:
    return PlainTextResponse(
        "Method not allowed", status_code=status.HTTP_405_METHOD_NOT_ALLOWED
    )
