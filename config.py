"""
Configuration management for the WhatsApp RAG bridge.

Loads environment variables from .env file and builds a single immutable
Config that is passed to the dispatcher, sender and query handler.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Literal, Optional

from dotenv import load_dotenv

from rag import HttpRagBackend, RagBackend, StubRagBackend

# Load environment variables from .env file
env_path = Path(__file__).parent / ".env"
load_dotenv(env_path)


RagBackendType = Literal["http", "stub"]
RAG_BACKENDS = ("http", "stub")


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Config:
    """Bridge configuration from environment."""

    # WhatsApp Cloud API
    verify_token: str
    whatsapp_api_url: str
    whatsapp_phone_number_id: str
    whatsapp_access_token: str
    whatsapp_app_secret: Optional[str] = None

    # RAG backend
    rag_backend: RagBackendType = "http"
    rag_backend_url: str = "http://localhost:8001"
    show_sources_footer: bool = False

    # Outbound HTTP timeout in seconds, None disables it
    http_timeout: Optional[float] = 30.0

    # Runtime
    environment: str = "development"
    port: int = 8000
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        timeout = float(os.getenv("HTTP_TIMEOUT_SECONDS", "30"))
        rag_backend = os.getenv("RAG_BACKEND", "http").strip().lower()
        if rag_backend not in RAG_BACKENDS:
            raise ValueError(
                f"Unknown RAG_BACKEND {rag_backend!r}, expected one of: {', '.join(RAG_BACKENDS)}"
            )

        return cls(
            verify_token=os.getenv("WHATSAPP_VERIFY_TOKEN", ""),
            whatsapp_api_url=os.getenv(
                "WHATSAPP_API_URL", "https://graph.facebook.com/v20.0"
            ).rstrip("/"),
            whatsapp_phone_number_id=os.getenv("WHATSAPP_PHONE_NUMBER_ID", ""),
            whatsapp_access_token=os.getenv("WHATSAPP_ACCESS_TOKEN", ""),
            whatsapp_app_secret=os.getenv("WHATSAPP_APP_SECRET") or None,
            rag_backend=rag_backend,  # type: ignore
            rag_backend_url=os.getenv("RAG_BACKEND_URL", "http://localhost:8001").rstrip("/"),
            show_sources_footer=_env_bool("SHOW_SOURCES_FOOTER"),
            http_timeout=timeout if timeout > 0 else None,
            environment=os.getenv("ENVIRONMENT", "development"),
            port=int(os.getenv("PORT", "8000")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    def missing(self) -> List[str]:
        """Names of required settings that are not set."""
        required = {
            "WHATSAPP_VERIFY_TOKEN": self.verify_token,
            "WHATSAPP_PHONE_NUMBER_ID": self.whatsapp_phone_number_id,
            "WHATSAPP_ACCESS_TOKEN": self.whatsapp_access_token,
        }
        if self.rag_backend == "http":
            required["RAG_BACKEND_URL"] = self.rag_backend_url

        return [name for name, value in required.items() if not value]

    def validate(self) -> bool:
        """Validate that required configuration is set."""
        return not self.missing()

    def create_rag_backend(self) -> RagBackend:
        """Create RAG backend instance based on configuration."""
        if self.rag_backend == "stub":
            return StubRagBackend()

        if self.rag_backend == "http":
            return HttpRagBackend(
                base_url=self.rag_backend_url,
                timeout=self.http_timeout,
            )

        raise ValueError(f"Unknown RAG backend: {self.rag_backend!r}")


def get_config() -> Config:
    """Build configuration from the current environment."""
    return Config.from_env()


if __name__ == "__main__":
    config = get_config()
    print("Configuration loaded:")
    print(f"  Verify Token: {'✓ Set' if config.verify_token else '✗ Missing'}")
    print(f"  Phone Number ID: {config.whatsapp_phone_number_id or '✗ Missing'}")
    print(f"  Access Token: {'✓ Set' if config.whatsapp_access_token else '✗ Missing'}")
    print(f"  RAG Backend: {config.rag_backend} ({config.rag_backend_url})")
    print(f"  Environment: {config.environment}")
    print(f"\n  Validation: {'✓ PASSED' if config.validate() else '✗ FAILED'}")
