"""
WhatsApp Message Sender

Posts text replies to the WhatsApp Cloud API send-message endpoint.
No formatting. No retries.
"""

import logging
from typing import Optional

import httpx

from .schemas import OutboundMessage, WhatsAppMessageResponse

logger = logging.getLogger(__name__)


class WhatsAppSenderError(Exception):
    """Failed to send a message to WhatsApp."""
    pass


class WhatsAppSender:
    """
    Sends text messages as the configured business phone number.

    send() raises WhatsAppSenderError on any failure.
    try_send() is the fire-and-forget variant: it reports the outcome as a
    bool and never raises.
    """

    def __init__(
        self,
        api_url: str,
        phone_number_id: str,
        access_token: str,
        timeout: Optional[float] = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_url = api_url.rstrip("/")
        self.phone_number_id = phone_number_id
        self.access_token = access_token
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_config(cls, config, transport: Optional[httpx.AsyncBaseTransport] = None) -> "WhatsAppSender":
        return cls(
            api_url=config.whatsapp_api_url,
            phone_number_id=config.whatsapp_phone_number_id,
            access_token=config.whatsapp_access_token,
            timeout=config.http_timeout,
            transport=transport,
        )

    @property
    def endpoint(self) -> str:
        return f"{self.api_url}/{self.phone_number_id}/messages"

    async def send(self, recipient: str, text: str) -> WhatsAppMessageResponse:
        """
        Send a text message.

        Args:
            recipient: WhatsApp phone number
            text: Message body

        Returns:
            WhatsAppMessageResponse from Meta API

        Raises:
            WhatsAppSenderError: Transport failure, non-JSON body or non-2xx status
        """

        message = OutboundMessage(recipient=recipient, text=text)
        headers = {
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json"
        }

        logger.info(
            f"Sending WhatsApp message to {recipient} ({len(text)} characters)",
            extra={"sender_id": recipient, "length": len(text)},
        )

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    self.endpoint,
                    json=message.to_payload(),
                    headers=headers,
                )
        except httpx.RequestError as e:
            logger.error(
                f"HTTP request failed: {e}",
                exc_info=True,
                extra={"sender_id": recipient, "error": str(e)},
            )
            raise WhatsAppSenderError(f"HTTP request failed: {e}") from e

        # Parsed regardless of status so error bodies get logged too
        try:
            result = WhatsAppMessageResponse(**response.json())
        except (ValueError, TypeError) as e:
            logger.error(
                f"WhatsApp API returned non-JSON body: {response.status_code}",
                extra={"status_code": response.status_code, "error_body": response.text},
            )
            raise WhatsAppSenderError(
                f"WhatsApp API error: {response.reason_phrase}"
            ) from e

        logger.info(
            "WhatsApp API response",
            extra={
                "status_code": response.status_code,
                "ok": response.is_success,
                "response_id": result.message_id,
            },
        )

        if not response.is_success:
            logger.error(
                f"WhatsApp API error: {response.status_code} - {response.text}",
                extra={
                    "status_code": response.status_code,
                    "error_body": response.text,
                },
            )
            raise WhatsAppSenderError(f"WhatsApp API error: {response.reason_phrase}")

        return result

    async def try_send(self, recipient: str, text: str) -> bool:
        """
        Fire-and-forget send.

        The failure is logged and reported through the return value instead
        of being raised. Use only where a lost message is acceptable.
        """
        try:
            await self.send(recipient, text)
            return True
        except Exception as e:
            logger.error(
                f"Failed to send message to {recipient}: {e}",
                extra={"sender_id": recipient, "error": str(e)},
            )
            return False
