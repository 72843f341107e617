from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class RagOptions:
    similarity_threshold: float = 0.6
    max_results: int = 3
    temperature: float = 0.7
    max_tokens: int = 400      # keep answers short enough for a chat bubble


@dataclass(frozen=True)
class RagQuery:
    query: str
    session_id: str
    options: RagOptions = field(default_factory=RagOptions)

    def to_payload(self) -> Dict[str, Any]:
        """JSON body for POST /chat."""
        return {
            "query": self.query,
            "session_id": self.session_id,
            "options": asdict(self.options),
        }


@dataclass(frozen=True)
class RagResult:
    success: bool
    response: Optional[str] = None
    sources: List[Any] = field(default_factory=list)
    context_chunks_used: int = 0

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "RagResult":
        """
        Build a result from the backend's JSON body.

        Expected shape: {success, data: {response, sources, context_chunks_used}}.
        Missing levels fall back to empty values.
        """
        data = payload.get("data") or {}
        return cls(
            success=bool(payload.get("success")),
            response=data.get("response") or None,
            sources=list(data.get("sources") or []),
            context_chunks_used=int(data.get("context_chunks_used") or 0),
        )
