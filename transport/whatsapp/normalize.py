"""
WhatsApp Input Normalization

PURE CONVERSION - NO I/O, NO MODEL CALLS

Pulls the first text message out of a decoded webhook event.
- nested: entry[0].changes[0].value.messages[0] (Cloud API schema)
- flat:   messages[0]

Absence at any level is the no-op case and returns None. Nothing here
raises on payload shape: status updates, empty arrays, and non-text
messages are all expected deliveries.
"""

import logging
from typing import Any, Optional

from .schemas import InboundMessage

logger = logging.getLogger(__name__)


def _first(container: Any, key: str) -> Any:
    """container[key][0] when container is a dict holding a non-empty list, else None."""
    if not isinstance(container, dict):
        return None
    items = container.get(key)
    if not isinstance(items, list) or not items:
        return None
    return items[0]


def first_message_record(payload: Any, schema: str = "nested") -> Optional[dict]:
    """
    Locate the raw first message record for the given inbound schema.

    Only the first entry and first change are inspected.
    """
    if schema == "flat":
        record = _first(payload, "messages")
    elif schema == "nested":
        change = _first(_first(payload, "entry"), "changes")
        value = change.get("value") if isinstance(change, dict) else None
        record = _first(value, "messages")
    else:
        raise ValueError(f"Unknown inbound schema: {schema}")

    return record if isinstance(record, dict) else None


def normalize_message(payload: Any, schema: str = "nested") -> Optional[InboundMessage]:
    """
    Convert a decoded webhook event into an InboundMessage.

    Args:
        payload: Decoded JSON body (any JSON type)
        schema: "nested" or "flat"

    Returns:
        InboundMessage, or None when the event carries no text message
    """
    record = first_message_record(payload, schema)
    if record is None:
        return None

    sender_id = record.get("from")
    if not isinstance(sender_id, str) or not sender_id:
        logger.debug("Message record without sender, ignoring")
        return None

    text = record.get("text")
    body = text.get("body") if isinstance(text, dict) else None
    if not isinstance(body, str):
        logger.info(
            "Non-text message ignored",
            extra={"sender_id": sender_id, "message_type": record.get("type")},
        )
        return None

    message_id = record.get("id")
    return InboundMessage(
        sender_id=sender_id,
        text=body,
        message_id=message_id if isinstance(message_id, str) else None,
    )
