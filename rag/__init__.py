"""
RAG boundary layer.

Wraps the external retrieval-augmented-generation service behind a small
interface so the webhook never talks HTTP to it directly.

Supported backends:
- HttpRagBackend: the real service, POST {base}/chat
- StubRagBackend: deterministic echo backend (local runs, tests)

Example usage:
    from rag import QueryHandler, StubRagBackend

    handler = QueryHandler(StubRagBackend())
    reply = await handler.handle("15551234567", "What are your opening hours?")
"""

from .types import RagOptions, RagQuery, RagResult
from .base import RagBackend, RagBackendError
from .stub import StubRagBackend
from .client import HttpRagBackend
from .formatting import MAX_MESSAGE_CHARS, RESET_FOOTER, format_reply, markdown_to_whatsapp
from .handler import (
    FALLBACK_RESPONSE,
    TECHNICAL_DIFFICULTIES_RESPONSE,
    QueryHandler,
    session_key,
)

__all__ = [
    "RagOptions",
    "RagQuery",
    "RagResult",
    "RagBackend",
    "RagBackendError",
    "StubRagBackend",
    "HttpRagBackend",
    "MAX_MESSAGE_CHARS",
    "RESET_FOOTER",
    "format_reply",
    "markdown_to_whatsapp",
    "FALLBACK_RESPONSE",
    "TECHNICAL_DIFFICULTIES_RESPONSE",
    "QueryHandler",
    "session_key",
]
