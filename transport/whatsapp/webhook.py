"""
WhatsApp Webhook Receiver

FastAPI router for the single webhook route:
- GET:  subscription handshake
- POST: message relay (extract → compose reply → send)
Any other method gets 405 from the router.
No agent imports: the reply composer is passed in by the caller.

The upstream redelivers on non-2xx, so once a payload has decoded the
caller always gets 200, whatever happens downstream.
"""

import json
import logging
from typing import Awaitable, Callable, Optional

from fastapi import APIRouter, HTTPException, Query, Request, status
from fastapi.responses import PlainTextResponse

from config import RelayConfig
from inference import ModelBackend, create_model_backend

from .normalize import normalize_message
from .schemas import InboundMessage, VerificationRequest
from .security import (
    SIGNATURE_HEADER,
    SignatureVerificationError,
    verify_signature,
    verify_webhook_challenge,
)
from .sender import WhatsAppSender, WhatsAppSenderError

logger = logging.getLogger(__name__)

ReplyComposer = Callable[
    [InboundMessage, RelayConfig, Optional[ModelBackend]], Awaitable[str]
]


def create_router(
    config: RelayConfig,
    compose_reply: ReplyComposer,
    sender: Optional[WhatsAppSender] = None,
    backend: Optional[ModelBackend] = None,
) -> APIRouter:
    """
    Build the webhook router bound to one configuration.

    Args:
        config: Relay configuration (captured, never mutated)
        compose_reply: Builds the reply body for an inbound message
        sender: Send-message client; built from config when omitted
        backend: Completion backend; built from config when the reply
            policy needs one and none is given

    Returns:
        APIRouter exposing GET/POST on config.webhook_path
    """
    sender = sender or WhatsAppSender.from_config(config)
    if backend is None and config.reply_policy == "completion":
        backend = create_model_backend(config)

    router = APIRouter(tags=["WhatsApp Webhook"])

    # ========================================================================
    # WEBHOOK CHALLENGE (Setup only)
    # ========================================================================

    @router.get(config.webhook_path, response_class=PlainTextResponse)
    async def whatsapp_webhook_challenge(
        hub_mode: str = Query("", alias="hub.mode"),
        hub_verify_token: str = Query("", alias="hub.verify_token"),
        hub_challenge: str = Query("", alias="hub.challenge"),
    ) -> PlainTextResponse:
        """
        Verify webhook subscription challenge from Meta.

        Returns:
            The challenge, verbatim, as text/plain

        Raises:
            HTTPException(403): Wrong mode or token
        """
        handshake = VerificationRequest(
            mode=hub_mode,
            token=hub_verify_token,
            challenge=hub_challenge,
        )
        challenge = verify_webhook_challenge(handshake, config.verify_token)
        logger.info("Webhook verified")
        return PlainTextResponse(challenge)

    # ========================================================================
    # WEBHOOK RECEIVER (Message relay)
    # ========================================================================

    @router.post(config.webhook_path)
    async def whatsapp_webhook_receiver(request: Request) -> dict[str, str]:
        """
        Receive WhatsApp events via webhook.

        Flow:
        1. Read raw body
        2. Verify signature (only when WHATSAPP_APP_SECRET is set)
        3. Decode JSON (400 if invalid)
        4. Extract first text message (200 no-op if none)
        5. Compose reply per policy
        6. Send reply (failures logged only)

        Returns:
            {"status": "ok"} after a send attempt, {"status": "ignored"}
            when the event carries no text message
        """

        # Step 1: Raw body, needed as-is for the HMAC
        body = await request.body()

        # Step 2: Signature (security boundary)
        if config.app_secret:
            try:
                verify_signature(request.headers.get(SIGNATURE_HEADER), body, config.app_secret)
            except SignatureVerificationError as e:
                logger.warning(f"Signature verification failed: {e}")
                raise HTTPException(
                    status_code=(
                        status.HTTP_401_UNAUTHORIZED if e.missing else status.HTTP_403_FORBIDDEN
                    ),
                    detail="Signature verification failed",
                )

        # Step 3: Decode
        try:
            payload = json.loads(body)
        except (ValueError, RecursionError):
            logger.warning("Rejected webhook with malformed JSON body", extra={"body_length": len(body)})
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid JSON payload",
            )

        # Step 4: Extract
        message = normalize_message(payload, config.inbound_schema)
        if message is None:
            logger.debug("Webhook event without a text message, acknowledging")
            return {"status": "ignored"}

        logger.info(
            f"Received message from {message.sender_id}",
            extra={
                "sender_id": message.sender_id,
                "message_id": message.message_id,
                "text_length": len(message.text),
            },
        )

        # Step 5: Reply body
        reply_text = await compose_reply(message, config, backend)

        # Step 6: Send. The webhook response does not depend on the outcome.
        try:
            await sender.send_text(message.sender_id, reply_text)
        except WhatsAppSenderError as e:
            logger.error(
                f"Failed to send reply: {e}",
                extra={"sender_id": message.sender_id},
            )
        except Exception as e:
            logger.error(f"Unexpected error sending reply: {e}", exc_info=True)

        return {"status": "ok"}

    return router
