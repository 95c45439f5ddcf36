"""
WhatsApp Transport Layer - Pydantic Schemas

PURE DATA MODELS - NO LOGIC
Request-scoped values exchanged between the webhook, the reply policy
and the send-message API. Nothing here outlives a single request.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# VERIFICATION HANDSHAKE (GET)
# ============================================================================

class VerificationRequest(BaseModel):
    """
    Subscription handshake sent by Meta when the webhook is registered.

    Built from the hub.mode / hub.verify_token / hub.challenge query params.
    Missing params arrive as empty strings.
    """

    mode: str = Field("", description="Expected to be 'subscribe'")
    token: str = Field("", description="Compared against the configured verify token")
    challenge: str = Field("", description="Opaque value echoed back verbatim")

    model_config = ConfigDict(frozen=True)


# ============================================================================
# INBOUND MESSAGE (POST)
# ============================================================================

class InboundMessage(BaseModel):
    """
    The first text message of an inbound event.

    Only text messages are modeled. Other message types never become an
    InboundMessage.
    """

    sender_id: str = Field(..., description="WhatsApp id (phone number) of the sender")
    text: str = Field(..., description="text.body, unmodified")
    message_id: Optional[str] = Field(None, description="wamid, when present")

    model_config = ConfigDict(frozen=True)


# ============================================================================
# OUTBOUND REPLY
# ============================================================================

class TextBody(BaseModel):
    body: str


class OutboundReply(BaseModel):
    """A text reply addressed to the sender of the triggering message."""

    to: str
    body: str

    model_config = ConfigDict(frozen=True)

    def to_payload(self) -> dict[str, Any]:
        """Send-message request body for the Cloud API."""
        return SendMessagePayload(to=self.to, text=TextBody(body=self.body)).model_dump()


class SendMessagePayload(BaseModel):
    """
    POST /{phone_number_id}/messages body.

    ref: https://developers.facebook.com/docs/whatsapp/cloud-api/reference/messages
    """

    messaging_product: str = "whatsapp"
    to: str
    type: str = "text"
    text: TextBody


# ============================================================================
# WHATSAPP API RESPONSE
# ============================================================================

class WhatsAppMessageResponse(BaseModel):
    """Response from WhatsApp Cloud API when sending a message."""

    messaging_product: str = Field(default="whatsapp")
    contacts: list[dict[str, Any]] = Field(default_factory=list)  # [{"input": "...", "wa_id": "..."}]
    messages: list[dict[str, Any]] = Field(default_factory=list)  # [{"id": "wamid.xxx"}]

    model_config = ConfigDict(extra="allow")  # WhatsApp may add fields

    @property
    def message_id(self) -> Optional[str]:
        if self.messages:
            return self.messages[0].get("id")
        return None
