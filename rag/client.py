import logging
from typing import Optional

import httpx

from .base import RagBackend, RagBackendError
from .types import RagQuery, RagResult

logger = logging.getLogger(__name__)


class HttpRagBackend(RagBackend):
    """
    RAG backend reached over HTTP.

    POSTs the query to {base_url}/chat and parses
    {success, data: {response, sources, context_chunks_used}}.
    """

    def __init__(
        self,
        base_url: str,
        timeout: Optional[float] = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize HTTP backend.

        Args:
            base_url:  Base URL of the RAG service (no trailing slash)
            timeout:   Seconds per request, None for no timeout
            transport: Optional httpx transport (tests inject a MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def chat(self, query: RagQuery) -> RagResult:
        endpoint = f"{self.base_url}/chat"

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.post(endpoint, json=query.to_payload())
        except httpx.RequestError as e:
            raise RagBackendError(f"RAG backend unreachable: {e}") from e

        logger.info(
            "RAG backend responded",
            extra={
                "status_code": response.status_code,
                "reason": response.reason_phrase,
                "ok": response.is_success,
            },
        )

        if not response.is_success:
            logger.error(
                f"RAG backend error: {response.status_code} - {response.text}",
                extra={
                    "status_code": response.status_code,
                    "error_body": response.text,
                },
            )
            raise RagBackendError(f"RAG backend error: {response.reason_phrase}")

        try:
            payload = response.json()
        except ValueError as e:
            raise RagBackendError("RAG backend returned invalid JSON") from e

        if not isinstance(payload, dict):
            raise RagBackendError("RAG backend returned unexpected payload")

        result = RagResult.from_payload(payload)
        logger.info(
            "RAG response data",
            extra={
                "success": result.success,
                "has_response": bool(result.response),
                "sources_count": len(result.sources),
                "context_chunks_used": result.context_chunks_used,
            },
        )
        return result
