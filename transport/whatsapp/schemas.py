"""
WhatsApp Transport Layer - Schemas

PURE DATA MODELS - NO LOGIC
Defines the inbound delivery contract and the send-message envelope.
"""

from dataclasses import dataclass
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, Field


# ============================================================================
# INBOUND ENVELOPE (THE CONTRACT)
# ============================================================================

class InboundEnvelope(BaseModel):
    """
    The first message of a webhook delivery.

    Request-scoped and immutable. text is None for non-text content
    (images, reactions, audio...), which the bridge acknowledges and drops.
    """

    sender_id: Optional[str] = Field(
        None,
        description="WhatsApp phone number of the sender. Always set when text is."
    )
    text: Optional[str] = Field(
        None,
        description="Trimmed text body. None when absent or blank."
    )
    message_id: Optional[str] = Field(None, description="WhatsApp message ID")
    message_type: Optional[str] = Field(None, description="text, image, audio, ...")
    timestamp: Optional[str] = Field(None, description="Raw delivery timestamp, unused")

    class Config:
        """Pydantic config."""
        frozen = True

    @property
    def has_text(self) -> bool:
        return bool(self.text)


# ============================================================================
# PARSE OUTCOME
# ============================================================================

AbsentReason = Literal["malformed", "no_messages"]


@dataclass(frozen=True)
class MessagePresent:
    """Delivery carried a message."""

    envelope: InboundEnvelope


@dataclass(frozen=True)
class MessageAbsent:
    """
    Delivery carried no message.

    malformed:   some level of entry[0].changes[0].value.messages[0] is
                 missing or has the wrong shape
    no_messages: well-formed envelope without messages (status callbacks)
    """

    reason: AbsentReason


ParsedDelivery = Union[MessagePresent, MessageAbsent]


# ============================================================================
# SEND-MESSAGE API (OUTPUT)
# ============================================================================

class OutboundMessage(BaseModel):
    """A text reply to one recipient."""

    recipient: str
    text: str

    class Config:
        frozen = True

    def to_payload(self) -> dict[str, Any]:
        return {
            "messaging_product": "whatsapp",
            "to": self.recipient,
            "text": {"body": self.text},
        }


class WhatsAppMessageResponse(BaseModel):
    """Response from WhatsApp Cloud API when sending a message."""

    messaging_product: Optional[str] = None
    contacts: list[dict[str, Any]] = Field(default_factory=list)
    messages: list[dict[str, Any]] = Field(default_factory=list)

    class Config:
        extra = "allow"  # error bodies carry an "error" object

    @property
    def message_id(self) -> Optional[str]:
        if self.messages:
            return self.messages[0].get("id")
        return None
