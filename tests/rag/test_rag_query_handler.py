"""
Query Handler Tests

Session keys, backend call, formatting, never-raise contract.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from rag.base import RagBackendError
from rag.formatting import RESET_FOOTER
from rag.handler import (
    FALLBACK_RESPONSE,
    TECHNICAL_DIFFICULTIES_RESPONSE,
    QueryHandler,
    session_key,
)
from rag.stub import StubRagBackend
from rag.types import RagOptions, RagQuery, RagResult

NOON = datetime(2024, 3, 9, 12, 0, tzinfo=timezone.utc)


class TestSessionKey:
    """One session per sender per UTC day."""

    def test_format(self):
        assert session_key("15551234567", NOON) == "whatsapp_15551234567_2024-03-09"

    def test_same_day_same_key(self):
        morning = datetime(2024, 3, 9, 0, 0, 1, tzinfo=timezone.utc)
        night = datetime(2024, 3, 9, 23, 59, 59, tzinfo=timezone.utc)

        assert session_key("X", morning) == session_key("X", night)

    def test_new_key_after_utc_midnight(self):
        before = datetime(2024, 3, 9, 23, 59, 59, tzinfo=timezone.utc)
        after = before + timedelta(seconds=2)

        assert session_key("X", before) != session_key("X", after)
        assert session_key("X", after) == "whatsapp_X_2024-03-10"

    def test_other_timezones_use_utc_date(self):
        # 01:00 in UTC+2 is still the previous day in UTC
        plus_two = timezone(timedelta(hours=2))
        local = datetime(2024, 3, 10, 1, 0, tzinfo=plus_two)

        assert session_key("X", local) == "whatsapp_X_2024-03-09"

    def test_naive_datetime_taken_as_utc(self):
        assert session_key("X", datetime(2024, 3, 9, 23, 30)) == "whatsapp_X_2024-03-09"

    def test_different_senders_different_keys(self):
        assert session_key("A", NOON) != session_key("B", NOON)

    def test_defaults_to_now(self):
        today = datetime.now(timezone.utc).date().isoformat()
        assert session_key("X") == f"whatsapp_X_{today}"


class TestQueryHandler:
    @pytest.fixture
    def backend(self):
        backend = AsyncMock()
        backend.chat.return_value = RagResult(
            success=True,
            response="**Opening hours** are *9-5*.",
            sources=[{"id": "doc-1"}],
            context_chunks_used=3,
        )
        return backend

    @pytest.mark.asyncio
    async def test_sends_query_with_fixed_options(self, backend):
        handler = QueryHandler(backend, clock=lambda: NOON)

        await handler.handle("15551234567", "When are you open?")

        backend.chat.assert_awaited_once_with(RagQuery(
            query="When are you open?",
            session_id="whatsapp_15551234567_2024-03-09",
            options=RagOptions(
                similarity_threshold=0.6, max_results=3, temperature=0.7, max_tokens=400,
            ),
        ))

    @pytest.mark.asyncio
    async def test_formats_response(self, backend):
        reply = await QueryHandler(backend, clock=lambda: NOON).handle("X", "q")
        assert reply == "*Opening hours* are _9-5_." + RESET_FOOTER

    @pytest.mark.asyncio
    async def test_sources_line_when_enabled(self, backend):
        handler = QueryHandler(backend, show_sources=True, clock=lambda: NOON)

        reply = await handler.handle("X", "q")

        assert "_Based on 1 document(s) from our knowledge base_" in reply
        assert reply.endswith(RESET_FOOTER)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("response", [None, ""])
    async def test_missing_response_uses_fallback(self, backend, response):
        backend.chat.return_value = RagResult(success=False, response=response)

        reply = await QueryHandler(backend).handle("X", "q")

        assert reply == FALLBACK_RESPONSE + RESET_FOOTER

    @pytest.mark.asyncio
    async def test_long_response_truncated(self, backend):
        backend.chat.return_value = RagResult(success=True, response="a" * 3000)

        reply = await QueryHandler(backend).handle("X", "q")

        assert reply == "a" * 1500 + RESET_FOOTER

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [
        RagBackendError("RAG backend error: Internal Server Error"),
        ValueError("bad json"),
        RuntimeError("anything"),
    ])
    async def test_never_raises(self, backend, error):
        backend.chat.side_effect = error

        reply = await QueryHandler(backend).handle("X", "q")

        assert reply == TECHNICAL_DIFFICULTIES_RESPONSE

    @pytest.mark.asyncio
    async def test_with_stub_backend(self):
        reply = await QueryHandler(StubRagBackend()).handle("X", "hello")
        assert reply == "*Stub answer* for: hello" + RESET_FOOTER
