"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

import pytest

# Add project root to sys.path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from config import RelayConfig  # noqa: E402
from transport.whatsapp.schemas import WhatsAppMessageResponse  # noqa: E402
from transport.whatsapp.sender import WhatsAppSenderError  # noqa: E402


class RecordingSender:
    """Stands in for WhatsAppSender; records every send attempt."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls = []

    async def send_text(self, to: str, body: str) -> WhatsAppMessageResponse:
        self.calls.append({"to": to, "body": body})
        if self.fail:
            raise WhatsAppSenderError("WhatsApp API returned 500")
        return WhatsAppMessageResponse(messages=[{"id": "wamid.reply"}])


@pytest.fixture
def relay_config() -> RelayConfig:
    return RelayConfig(
        whatsapp_token="test-access-token",
        whatsapp_phone_id="1098765",
        verify_token="verify-me",
        llm_backend="stub",
    )


@pytest.fixture
def recording_sender() -> RecordingSender:
    return RecordingSender()


@pytest.fixture
def failing_sender() -> RecordingSender:
    return RecordingSender(fail=True)


def nested_payload(sender: str = "15551234567", body: str = "hi") -> dict:
    return {
        "object": "whatsapp_business_account",
        "entry": [{
            "id": "WABA_ID",
            "changes": [{
                "field": "messages",
                "value": {
                    "messaging_product": "whatsapp",
                    "messages": [{
                        "from": sender,
                        "id": "wamid.msg_123",
                        "timestamp": "1707500000",
                        "type": "text",
                        "text": {"body": body},
                    }],
                },
            }],
        }],
    }
