"""
WhatsApp Delivery Parsing

PURE CONVERSION - NO I/O

Plucks entry[0].changes[0].value.messages[0] out of a webhook delivery.
A missing level is an outcome (MessageAbsent), not an exception.
"""

from typing import Any, Optional

from .schemas import InboundEnvelope, MessageAbsent, MessagePresent, ParsedDelivery


def _first(container: Any, key: str) -> Optional[Any]:
    """container[key][0], or None if any part is missing or mistyped."""
    if not isinstance(container, dict):
        return None
    items = container.get(key)
    if not isinstance(items, list) or not items:
        return None
    return items[0]


def _str_or_none(value: Any) -> Optional[str]:
    return str(value) if value is not None else None


def _first_value(payload: Any) -> Optional[dict]:
    """entry[0].changes[0].value, or None if any level is missing."""
    change = _first(_first(payload, "entry"), "changes")
    if not isinstance(change, dict):
        return None
    value = change.get("value")
    return value if isinstance(value, dict) else None


def _first_message(payload: Any) -> Optional[Any]:
    return _first(_first_value(payload), "messages")


def _text_body(message: dict) -> Optional[str]:
    text = message.get("text")
    if not isinstance(text, dict):
        return None
    body = text.get("body")
    if not isinstance(body, str):
        return None
    return body.strip() or None


def _sender(message: dict) -> Optional[str]:
    sender_id = message.get("from")
    return sender_id if isinstance(sender_id, str) and sender_id else None


def parse_delivery(payload: Any) -> ParsedDelivery:
    """
    Parse a webhook delivery.

    Args:
        payload: Decoded JSON body of the POST

    Returns:
        MessagePresent(envelope) if there is a first message,
        MessageAbsent(reason) otherwise. A text message without a sender
        cannot be answered and counts as malformed; non-text messages are
        present with or without one.
    """

    value = _first_value(payload)
    if value is None:
        return MessageAbsent("malformed")

    if not value.get("messages"):
        return MessageAbsent("no_messages")

    message = _first_message(payload)
    if not isinstance(message, dict):
        return MessageAbsent("malformed")

    text = _text_body(message)
    sender_id = _sender(message)
    if text and sender_id is None:
        return MessageAbsent("malformed")

    return MessagePresent(
        InboundEnvelope(
            sender_id=sender_id,
            text=text,
            message_id=_str_or_none(message.get("id")),
            message_type=_str_or_none(message.get("type")),
            timestamp=_str_or_none(message.get("timestamp")),
        )
    )


def extract_sender_id(payload: Any) -> Optional[str]:
    """
    Best-effort sender lookup.

    Used on the failure path to find someone to apologize to.
    Returns None instead of raising.
    """
    message = _first_message(payload)
    if not isinstance(message, dict):
        return None
    return _sender(message)
