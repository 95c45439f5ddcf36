"""
Reply policies.

Decides the text sent back for an inbound message:
- greeting:   fixed welcome string
- echo:       configured prefix + the received text
- completion: completion-API output, or the fixed fallback string when
              the call fails or returns no text

A completion failure never propagates; it degrades to the fallback.
"""

import asyncio
import logging
from typing import Optional

from config import RelayConfig
from inference import ModelBackend, ModelRequest
from transport.whatsapp.schemas import InboundMessage

logger = logging.getLogger(__name__)


def greeting_reply(config: RelayConfig) -> str:
    return config.greeting_text


def echo_reply(message: InboundMessage, config: RelayConfig) -> str:
    return f"{config.echo_prefix}{message.text}"


async def completion_reply(
    message: InboundMessage,
    config: RelayConfig,
    backend: ModelBackend,
) -> str:
    """
    Ask the completion backend for a reply.

    The backend call is blocking, so it runs in the default executor.
    """
    request = ModelRequest(
        prompt=message.text,
        max_tokens=config.llm_max_tokens,
        timeout_s=config.outbound_timeout_s,
        sender_id=message.sender_id,
    )

    loop = asyncio.get_running_loop()
    try:
        response = await loop.run_in_executor(None, backend.generate, request)
    except Exception as e:
        logger.error(f"Completion backend raised: {e}", exc_info=True)
        return config.fallback_text

    if not response.ok:
        logger.error(
            f"Completion failed: {response.error_type or 'empty output'}",
            extra={
                "sender_id": message.sender_id,
                "status": response.status,
                "error_type": response.error_type,
            },
        )
        return config.fallback_text

    logger.info(
        "Completion received",
        extra={"sender_id": message.sender_id, "output_length": len(response.output)},
    )
    return response.output


async def compose_reply(
    message: InboundMessage,
    config: RelayConfig,
    backend: Optional[ModelBackend] = None,
) -> str:
    """Build the reply body for a message according to REPLY_POLICY."""
    if config.reply_policy == "echo":
        return echo_reply(message, config)

    if config.reply_policy == "completion":
        if backend is None:
            logger.error("REPLY_POLICY=completion but no completion backend configured")
            return config.fallback_text
        return await completion_reply(message, config, backend)

    return greeting_reply(config)
