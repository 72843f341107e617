"""
WhatsApp Webhook Dispatcher

Decides the reply for each inbound request:
  GET  → debug probe or verification handshake
  POST → parse delivery → reset command or query handler → send reply

At most one query and one reply send per delivery. Every path returns a
WebhookReply; nothing here raises to the router.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional

from rag import QueryHandler

from .normalize import extract_sender_id, parse_delivery
from .schemas import MessageAbsent
from .security import (
    SignatureVerificationError,
    WebhookVerificationError,
    verify_signature,
    verify_webhook_challenge,
)
from .sender import WhatsAppSender

logger = logging.getLogger(__name__)

RESET_COMMAND = "reset"
RESET_MESSAGE = "Session reset! Ask me anything about our knowledge base."
APOLOGY_MESSAGE = (
    "Sorry, I'm having technical difficulties. Please try again in a moment."
)


@dataclass(frozen=True)
class WebhookReply:
    """Plain-text HTTP reply to the platform."""

    status_code: int
    body: str


FORBIDDEN = WebhookReply(403, "Forbidden")


class WebhookDispatcher:
    """
    Request handling for the WhatsApp webhook.

    Args:
        config: Config (verify token, optional app secret)
        query_handler: anything with `async handle(sender, text) -> str`
        sender: WhatsAppSender used for replies
    """

    def __init__(self, config, query_handler, sender: WhatsAppSender):
        self.config = config
        self.query_handler = query_handler
        self.sender = sender

    @classmethod
    def from_config(cls, config) -> "WebhookDispatcher":
        """Wire the real backend and sender from configuration."""
        return cls(
            config=config,
            query_handler=QueryHandler(
                backend=config.create_rag_backend(),
                show_sources=config.show_sources_footer,
            ),
            sender=WhatsAppSender.from_config(config),
        )

    # ------------------------------------------------------------------ GET

    def debug_probe(self, phone: str) -> dict[str, str]:
        """Liveness probe answered for ?phone=..."""
        return {
            "phone": phone,
            "message": f"WhatsApp RAG service active for {phone}",
        }

    def verify(
        self,
        hub_mode: Optional[str],
        hub_verify_token: Optional[str],
        hub_challenge: Optional[str],
    ) -> WebhookReply:
        try:
            challenge = verify_webhook_challenge(
                hub_mode, hub_challenge, hub_verify_token, self.config.verify_token
            )
        except WebhookVerificationError as e:
            logger.warning(f"Webhook verification failed: {e}")
            return FORBIDDEN

        logger.info("Webhook verified successfully")
        return WebhookReply(200, challenge)

    # ----------------------------------------------------------------- POST

    async def handle_delivery(
        self,
        body: bytes,
        signature: Optional[str] = None,
    ) -> WebhookReply:
        """
        Process one webhook delivery.

        Args:
            body: Raw request body
            signature: X-Hub-Signature-256 header, checked only when an app
                secret is configured

        Returns:
            200 "No message" | "OK" | "Session reset" | "Message processed",
            403 "Forbidden" on a bad signature, or 500 "Error"
        """

        if self.config.whatsapp_app_secret:
            try:
                verify_signature(body, signature, self.config.whatsapp_app_secret)
            except SignatureVerificationError as e:
                logger.warning(f"Signature verification failed: {e}")
                return FORBIDDEN

        payload: Any = None
        try:
            payload = json.loads(body)
            logger.debug("Incoming WhatsApp payload", extra={"payload": payload})

            parsed = parse_delivery(payload)
            if isinstance(parsed, MessageAbsent):
                logger.info(
                    "No message found in payload",
                    extra={"reason": parsed.reason},
                )
                return WebhookReply(200, "No message")

            envelope = parsed.envelope
            if not envelope.has_text:
                logger.info(
                    "No text message found, ignoring",
                    extra={
                        "sender_id": envelope.sender_id,
                        "message_type": envelope.message_type,
                    },
                )
                return WebhookReply(200, "OK")

            sender_id = envelope.sender_id
            text = envelope.text
            logger.info(
                f'Message from {sender_id}: "{text}"',
                extra={"sender_id": sender_id, "message_id": envelope.message_id},
            )

            if text.lower() == RESET_COMMAND:
                await self.sender.send(sender_id, RESET_MESSAGE)
                return WebhookReply(200, "Session reset")

            response_text = await self.query_handler.handle(sender_id, text)
            logger.info(
                f'RAG response: "{response_text}"',
                extra={"sender_id": sender_id, "output_length": len(response_text)},
            )

            await self.sender.send(sender_id, response_text)
            return WebhookReply(200, "Message processed")

        except Exception as e:
            logger.error(f"Error processing message: {e}", exc_info=True)
            await self._apologize(payload)
            return WebhookReply(500, "Error")

    async def _apologize(self, payload: Any) -> None:
        """Best-effort apology; a failed send is logged, never raised."""
        recipient = extract_sender_id(payload)
        if not recipient:
            return

        delivered = await self.sender.try_send(recipient, APOLOGY_MESSAGE)
        if not delivered:
            logger.error(
                "Failed to send error message",
                extra={"sender_id": recipient},
            )
