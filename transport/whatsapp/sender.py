"""
WhatsApp Response Sender

Sends a text reply back through the Cloud API send-message endpoint.
No formatting intelligence. No retries.
"""

import logging
from typing import Optional

import httpx

from config import RelayConfig

from .schemas import OutboundReply, WhatsAppMessageResponse

logger = logging.getLogger(__name__)


class WhatsAppSenderError(Exception):
    """Failed to send response to WhatsApp."""
    pass


class WhatsAppSender:
    """
    Thin client for POST /{phone_number_id}/messages.

    Credentials are checked when a message is sent, not at construction,
    so a relay with missing secrets still starts and answers handshakes.
    """

    def __init__(
        self,
        access_token: str,
        phone_number_id: str,
        api_version: str = "v18.0",
        base_url: str = "https://graph.facebook.com",
        timeout_s: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.access_token = access_token
        self.phone_number_id = phone_number_id
        self.api_version = api_version
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        self._transport = transport

    @classmethod
    def from_config(
        cls,
        config: RelayConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "WhatsAppSender":
        return cls(
            access_token=config.whatsapp_token,
            phone_number_id=config.whatsapp_phone_id,
            api_version=config.api_version,
            base_url=config.graph_base_url,
            timeout_s=config.outbound_timeout_s,
            transport=transport,
        )

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/{self.api_version}/{self.phone_number_id}/messages"

    async def send_text(self, to: str, body: str) -> WhatsAppMessageResponse:
        """
        Send a text message to a WhatsApp user.

        Args:
            to: Recipient WhatsApp id (the inbound sender)
            body: Reply text

        Returns:
            WhatsAppMessageResponse from Meta API

        Raises:
            WhatsAppSenderError: missing credentials, transport failure,
                timeout, or non-2xx status
        """
        if not self.access_token:
            raise WhatsAppSenderError("WHATSAPP_TOKEN not configured")
        if not self.phone_number_id:
            raise WhatsAppSenderError("WHATSAPP_PHONE_ID not configured")

        reply = OutboundReply(to=to, body=body)
        headers = {
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
        }

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_s,
                transport=self._transport,
            ) as client:
                response = await client.post(
                    self.endpoint,
                    json=reply.to_payload(),
                    headers=headers,
                )
        except httpx.TimeoutException as e:
            raise WhatsAppSenderError(f"WhatsApp API timed out after {self.timeout_s}s") from e
        except httpx.RequestError as e:
            raise WhatsAppSenderError(f"HTTP request failed: {e}") from e

        if not response.is_success:
            logger.error(
                f"WhatsApp API error: {response.status_code}",
                extra={
                    "status_code": response.status_code,
                    "error_body": response.text[:500],
                },
            )
            raise WhatsAppSenderError(f"WhatsApp API returned {response.status_code}")

        try:
            result = WhatsAppMessageResponse(**response.json())
        except (TypeError, ValueError):
            # 2xx with an unexpected body still means the message was accepted
            result = WhatsAppMessageResponse()

        logger.info(
            f"Reply sent to {to}",
            extra={"recipient_id": to, "response_id": result.message_id},
        )
        return result
