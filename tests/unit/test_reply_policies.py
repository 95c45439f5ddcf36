"""Reply policy tests."""

import dataclasses

import pytest

from agent.replies import compose_reply
from inference import ModelBackend, ModelRequest, ModelResponse, StubModelBackend
from transport.whatsapp.schemas import InboundMessage


class RaisingBackend(ModelBackend):
    def generate(self, request: ModelRequest) -> ModelResponse:
        raise RuntimeError("backend exploded")


class EmptyBackend(ModelBackend):
    def generate(self, request: ModelRequest) -> ModelResponse:
        return ModelResponse(status="success", output="")


class CapturingBackend(ModelBackend):
    def __init__(self):
        self.requests = []

    def generate(self, request: ModelRequest) -> ModelResponse:
        self.requests.append(request)
        return ModelResponse(status="success", output="42")


@pytest.fixture
def message():
    return InboundMessage(sender_id="15551234567", text="hi")


class TestStaticPolicies:

    @pytest.mark.asyncio
    async def test_greeting(self, relay_config, message):
        assert await compose_reply(message, relay_config) == relay_config.greeting_text

    @pytest.mark.asyncio
    async def test_greeting_ignores_backend(self, relay_config, message):
        backend = CapturingBackend()

        await compose_reply(message, relay_config, backend)

        assert backend.requests == []

    @pytest.mark.asyncio
    async def test_echo(self, relay_config, message):
        config = dataclasses.replace(relay_config, reply_policy="echo", echo_prefix="Echo: ")

        assert await compose_reply(message, config) == "Echo: hi"


class TestCompletionPolicy:

    @pytest.fixture
    def config(self, relay_config):
        return dataclasses.replace(relay_config, reply_policy="completion", llm_max_tokens=64)

    @pytest.mark.asyncio
    async def test_completion_output(self, config, message):
        assert await compose_reply(message, config, StubModelBackend()) == "Stub reply to: hi"

    @pytest.mark.asyncio
    async def test_request_carries_limits(self, config, message):
        backend = CapturingBackend()

        await compose_reply(message, config, backend)

        request = backend.requests[0]
        assert request.prompt == "hi"
        assert request.max_tokens == 64
        assert request.timeout_s == config.outbound_timeout_s

    @pytest.mark.asyncio
    async def test_error_response_uses_fallback(self, config):
        failing = InboundMessage(sender_id="1", text="fail")

        assert await compose_reply(failing, config, StubModelBackend()) == config.fallback_text

    @pytest.mark.asyncio
    async def test_empty_output_uses_fallback(self, config, message):
        assert await compose_reply(message, config, EmptyBackend()) == config.fallback_text

    @pytest.mark.asyncio
    async def test_raising_backend_uses_fallback(self, config, message):
        assert await compose_reply(message, config, RaisingBackend()) == config.fallback_text

    @pytest.mark.asyncio
    async def test_no_backend_uses_fallback(self, config, message):
        assert await compose_reply(message, config, None) == config.fallback_text
