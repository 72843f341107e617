from .base import RagBackend
from .types import RagQuery, RagResult


class StubRagBackend(RagBackend):
    """
    Deterministic fake RAG backend for local runs and tests.

    Echoes the query back so the whole webhook flow can be exercised
    without a retrieval service.
    """

    async def chat(self, query: RagQuery) -> RagResult:
        return RagResult(
            success=True,
            response=f"**Stub answer** for: {query.query}",
            sources=[],
            context_chunks_used=0,
        )
