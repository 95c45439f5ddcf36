"""
WhatsApp Webhook Security

SECURITY BOUNDARY - subscription handshake and optional Meta HMAC signature.
No retries. No side effects.
"""

import hashlib
import hmac
import logging
from typing import Optional

from fastapi import HTTPException, status

from .schemas import VerificationRequest

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "X-Hub-Signature-256"


class SignatureVerificationError(Exception):
    """Signature verification failed."""

    def __init__(self, message: str, missing: bool = False):
        super().__init__(message)
        self.missing = missing


def verify_webhook_challenge(
    request: VerificationRequest,
    verify_token: str,
) -> str:
    """
    Verify webhook subscription challenge from WhatsApp.

    WhatsApp calls GET /webhook with:
    - hub.mode=subscribe
    - hub.challenge=random_string
    - hub.verify_token=configured_token

    Plain equality on the token; the challenge is returned untouched.

    Args:
        request: Handshake query parameters
        verify_token: Operator-configured secret

    Returns:
        The challenge string to echo back

    Raises:
        HTTPException(403): Wrong mode, wrong token, or no token configured
    """

    # An unset secret never verifies, not even an empty hub.verify_token
    if not verify_token:
        logger.warning("Verification attempted but WHATSAPP_VERIFY_TOKEN is not configured")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")

    if request.mode != "subscribe" or request.token != verify_token:
        logger.warning(
            "Webhook verification rejected",
            extra={"hub_mode": request.mode},
        )
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")

    return request.challenge


def compute_signature(body: bytes, app_secret: str) -> str:
    """Expected X-Hub-Signature-256 value for a raw body."""
    return "sha256=" + hmac.new(
        key=app_secret.encode("utf-8"),
        msg=body,
        digestmod=hashlib.sha256,
    ).hexdigest()


def verify_signature(
    signature: Optional[str],
    body: bytes,
    app_secret: str,
) -> None:
    """
    Verify Meta HMAC-SHA256 signature on a webhook delivery.

    Args:
        signature: X-Hub-Signature-256 header value (None if absent)
        body: Raw request body bytes
        app_secret: App secret from the Meta dashboard

    Raises:
        SignatureVerificationError: missing=True when the header is absent
    """

    if not signature:
        raise SignatureVerificationError(f"Missing {SIGNATURE_HEADER} header", missing=True)

    # Constant-time compare
    if not hmac.compare_digest(signature, compute_signature(body, app_secret)):
        raise SignatureVerificationError("Invalid signature")
