"""
Query Handler

sender + text → session key → RAG backend → WhatsApp-formatted reply.

Never raises: every failure degrades to a fixed apology string, because the
webhook must still answer the user with a normal chat message.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from .base import RagBackend
from .formatting import format_reply
from .types import RagOptions, RagQuery

logger = logging.getLogger(__name__)

SESSION_PREFIX = "whatsapp"

FALLBACK_RESPONSE = (
    "I'm having trouble processing your request right now. Please try again."
)
TECHNICAL_DIFFICULTIES_RESPONSE = (
    "I'm experiencing technical difficulties. "
    "Please try again in a few minutes or contact support."
)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def session_key(sender: str, now: Optional[datetime] = None) -> str:
    """
    Derive the conversation session id for a sender.

    One session per sender per UTC calendar day; a new one starts at UTC
    midnight. Naive datetimes are taken as UTC.

    Example:
        session_key("15551234567") -> "whatsapp_15551234567_2024-03-09"
    """
    now = now or utc_now()
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    today = now.astimezone(timezone.utc).date().isoformat()
    return f"{SESSION_PREFIX}_{sender}_{today}"


class QueryHandler:
    """Turns one user message into one reply string."""

    def __init__(
        self,
        backend: RagBackend,
        show_sources: bool = False,
        options: Optional[RagOptions] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.backend = backend
        self.show_sources = show_sources
        self.options = options or RagOptions()
        self.clock = clock

    async def handle(self, sender: str, message_text: str) -> str:
        try:
            session_id = session_key(sender, self.clock())
            logger.info(
                f"Processing RAG query for session: {session_id}",
                extra={"session_id": session_id, "query": message_text},
            )

            result = await self.backend.chat(
                RagQuery(query=message_text, session_id=session_id, options=self.options)
            )

            return format_reply(
                result.response or FALLBACK_RESPONSE,
                sources=result.sources,
                show_sources=self.show_sources,
            )

        except Exception as e:
            logger.error(f"Error in RAG query processing: {e}", exc_info=True)
            return TECHNICAL_DIFFICULTIES_RESPONSE
