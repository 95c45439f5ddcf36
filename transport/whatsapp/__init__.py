"""WhatsApp Transport Layer - Module Exports"""

from .normalize import first_message_record, normalize_message
from .schemas import (
    InboundMessage,
    OutboundReply,
    SendMessagePayload,
    VerificationRequest,
    WhatsAppMessageResponse,
)
from .security import (
    SignatureVerificationError,
    compute_signature,
    verify_signature,
    verify_webhook_challenge,
)
from .sender import WhatsAppSender, WhatsAppSenderError
from .webhook import create_router

__all__ = [
    # Schemas
    "VerificationRequest",
    "InboundMessage",
    "OutboundReply",
    "SendMessagePayload",
    "WhatsAppMessageResponse",
    # Normalization
    "normalize_message",
    "first_message_record",
    # Security
    "verify_webhook_challenge",
    "verify_signature",
    "compute_signature",
    "SignatureVerificationError",
    # Sender
    "WhatsAppSender",
    "WhatsAppSenderError",
    # Router
    "create_router",
]
