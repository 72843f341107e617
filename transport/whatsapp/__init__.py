"""WhatsApp Transport Layer - Module Exports"""

from .normalize import extract_sender_id, parse_delivery
from .schemas import (
    InboundEnvelope,
    MessageAbsent,
    MessagePresent,
    OutboundMessage,
    ParsedDelivery,
    WhatsAppMessageResponse,
)
from .security import (
    SignatureVerificationError,
    WebhookVerificationError,
    verify_signature,
    verify_webhook_challenge,
)
from .sender import WhatsAppSender, WhatsAppSenderError
from .dispatcher import (
    APOLOGY_MESSAGE,
    RESET_MESSAGE,
    WebhookDispatcher,
    WebhookReply,
)
from .webhook import get_dispatcher, router

__all__ = [
    # Schemas
    "InboundEnvelope",
    "MessagePresent",
    "MessageAbsent",
    "ParsedDelivery",
    "OutboundMessage",
    "WhatsAppMessageResponse",
    # Parsing
    "parse_delivery",
    "extract_sender_id",
    # Security
    "verify_webhook_challenge",
    "verify_signature",
    "WebhookVerificationError",
    "SignatureVerificationError",
    # Sender
    "WhatsAppSender",
    "WhatsAppSenderError",
    # Dispatcher
    "WebhookDispatcher",
    "WebhookReply",
    "RESET_MESSAGE",
    "APOLOGY_MESSAGE",
    # Router
    "router",
    "get_dispatcher",
]
