"""
WhatsApp Sender Tests

Outbound send-message call against a mocked Cloud API.
"""

import json

import httpx
import pytest

from transport.whatsapp.schemas import OutboundReply
from transport.whatsapp.sender import WhatsAppSender, WhatsAppSenderError


def make_sender(handler, **kwargs) -> WhatsAppSender:
    options = {
        "access_token": "test-access-token",
        "phone_number_id": "1098765",
        "api_version": "v18.0",
    }
    options.update(kwargs)
    return WhatsAppSender(transport=httpx.MockTransport(handler), **options)


class TestOutboundReply:

    def test_payload_shape(self):
        payload = OutboundReply(to="15551234567", body="hello").to_payload()

        assert payload == {
            "messaging_product": "whatsapp",
            "to": "15551234567",
            "type": "text",
            "text": {"body": "hello"},
        }


class TestSendText:

    @pytest.mark.asyncio
    async def test_successful_send(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["url"] = str(request.url)
            captured["auth"] = request.headers.get("Authorization")
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json={
                "messaging_product": "whatsapp",
                "contacts": [{"input": "15551234567", "wa_id": "15551234567"}],
                "messages": [{"id": "wamid.reply_1"}],
            })

        result = await make_sender(handler).send_text("15551234567", "hello")

        assert captured["url"] == "https://graph.facebook.com/v18.0/1098765/messages"
        assert captured["auth"] == "Bearer test-access-token"
        assert captured["body"] == {
            "messaging_product": "whatsapp",
            "to": "15551234567",
            "type": "text",
            "text": {"body": "hello"},
        }
        assert result.message_id == "wamid.reply_1"

    @pytest.mark.asyncio
    async def test_custom_base_url(self):
        urls = []

        def handler(request):
            urls.append(str(request.url))
            return httpx.Response(200, json={})

        sender = make_sender(handler, base_url="http://graph.local/", api_version="v16.0")
        await sender.send_text("1", "x")

        assert urls == ["http://graph.local/v16.0/1098765/messages"]

    @pytest.mark.asyncio
    async def test_error_status_raises(self):
        def handler(request):
            return httpx.Response(401, json={"error": {"message": "Invalid OAuth access token"}})

        with pytest.raises(WhatsAppSenderError, match="401"):
            await make_sender(handler).send_text("15551234567", "hello")

    @pytest.mark.asyncio
    async def test_transport_error_raises(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(WhatsAppSenderError):
            await make_sender(handler).send_text("15551234567", "hello")

    @pytest.mark.asyncio
    async def test_timeout_raises(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(WhatsAppSenderError, match="timed out"):
            await make_sender(handler).send_text("15551234567", "hello")

    @pytest.mark.asyncio
    async def test_missing_token_fails_at_call_time(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json={})

        sender = make_sender(handler, access_token="")

        with pytest.raises(WhatsAppSenderError, match="WHATSAPP_TOKEN"):
            await sender.send_text("15551234567", "hello")
        assert calls == []

    @pytest.mark.asyncio
    async def test_missing_phone_id_fails_at_call_time(self):
        sender = make_sender(lambda request: httpx.Response(200, json={}), phone_number_id="")

        with pytest.raises(WhatsAppSenderError, match="WHATSAPP_PHONE_ID"):
            await sender.send_text("15551234567", "hello")

    @pytest.mark.asyncio
    async def test_non_json_success_body_is_accepted(self):
        sender = make_sender(lambda request: httpx.Response(200, text="OK"))

        result = await sender.send_text("15551234567", "hello")

        assert result.message_id is None
