from abc import ABC, abstractmethod

from .types import RagQuery, RagResult


class RagBackendError(Exception):
    """RAG backend call failed."""
    pass


class RagBackend(ABC):
    """
    Abstract RAG boundary.
    The query handler depends ONLY on this interface.
    """

    @abstractmethod
    async def chat(self, query: RagQuery) -> RagResult:
        """Send a query and return the generated answer."""
        raise NotImplementedError
