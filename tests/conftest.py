"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

import pytest

# Add project root to sys.path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from config import Config  # noqa: E402


@pytest.fixture
def config() -> Config:
    """Fully configured bridge, signature check off."""
    return Config(
        verify_token="test_verify_token",
        whatsapp_api_url="https://graph.example.test/v20.0",
        whatsapp_phone_number_id="1234567890",
        whatsapp_access_token="test_access_token",
        rag_backend="http",
        rag_backend_url="https://rag.example.test",
    )


@pytest.fixture
def make_delivery():
    """Build a WhatsApp webhook delivery around a single message."""

    def _make(text="Hello agent", sender="15551234567", message_type="text", **message):
        msg = {
            "from": sender,
            "id": "wamid.msg_123",
            "timestamp": "1707500000",
            "type": message_type,
            **message,
        }
        if text is not None:
            msg["text"] = {"body": text}
        return {
            "object": "whatsapp_business_account",
            "entry": [{
                "id": "WABA_ID",
                "changes": [{
                    "field": "messages",
                    "value": {
                        "messaging_product": "whatsapp",
                        "messages": [msg],
                    },
                }],
            }],
        }

    return _make
