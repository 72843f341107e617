"""
WhatsApp Webhook Security

Verification handshake and optional Meta HMAC signature check.
No I/O. Raises on failure; the router turns that into 403 "Forbidden".
"""

import hashlib
import hmac
from typing import Optional


class WebhookVerificationError(Exception):
    """hub.mode / hub.verify_token did not match."""
    pass


class SignatureVerificationError(Exception):
    """Signature verification failed."""
    pass


def verify_webhook_challenge(
    hub_mode: Optional[str],
    hub_challenge: Optional[str],
    hub_verify_token: Optional[str],
    expected_token: str,
) -> str:
    """
    Verify webhook subscription challenge from WhatsApp.

    WhatsApp calls GET /webhook/whatsapp with:
    - hub.mode=subscribe
    - hub.challenge=random_string
    - hub.verify_token=configured_token

    Both mode and token must match; either one wrong is a rejection.

    Args:
        hub_mode: Should be "subscribe"
        hub_challenge: Random string to echo back
        hub_verify_token: Token sent by Meta
        expected_token: Token configured for this deployment

    Returns:
        The challenge string to echo back ("" if Meta sent none)

    Raises:
        WebhookVerificationError: Wrong mode or token
    """

    if hub_mode != "subscribe":
        raise WebhookVerificationError(f"Invalid hub.mode: {hub_mode!r}")

    # An unset verify token must never match an empty hub.verify_token
    if not expected_token or not hmac.compare_digest(
        (hub_verify_token or "").encode("utf-8"),
        expected_token.encode("utf-8"),
    ):
        raise WebhookVerificationError("Invalid hub.verify_token")

    return hub_challenge or ""


def expected_signature(body: bytes, app_secret: str) -> str:
    """X-Hub-Signature-256 value Meta sends for this body."""
    return "sha256=" + hmac.new(
        key=app_secret.encode("utf-8"),
        msg=body,
        digestmod=hashlib.sha256
    ).hexdigest()


def verify_signature(
    body: bytes,
    signature: Optional[str],
    app_secret: str,
) -> None:
    """
    Verify Meta HMAC-SHA256 signature on a webhook delivery.

    Args:
        body: Raw request body bytes
        signature: X-Hub-Signature-256 header value
        app_secret: WhatsApp app secret

    Raises:
        SignatureVerificationError: Missing or invalid signature
    """

    if not signature:
        raise SignatureVerificationError("Missing X-Hub-Signature-256 header")

    # Constant-time compare
    if not hmac.compare_digest(signature, expected_signature(body, app_secret)):
        raise SignatureVerificationError("Invalid signature")
