"""Decoding of inbound job triggers into a source object id."""

import base64
import json
from typing import Any

from video_processing_service.domain.exceptions import BadTriggerError


def validate_source_id(value: Any) -> str:
    """Return ``value`` if it is a usable object id, else raise BadTriggerError."""
    if not isinstance(value, str) or not value.strip():
        raise BadTriggerError("sourceId must be a non-empty string")
    return value


def decode_trigger(payload: Any) -> str:
    """
    Extract the source object id from a trigger body.

    Two shapes are accepted:

    * ``{"sourceId": "clip1.mp4"}``
    * a push-subscription envelope from a storage notification,
      ``{"message": {"data": "<base64 of {\\"name\\": \\"clip1.mp4\\", ...}>"}}``

    Raises:
        BadTriggerError: body is malformed or carries no usable id
    """
    if not isinstance(payload, dict):
        raise BadTriggerError("Trigger body must be a JSON object")

    if "sourceId" in payload:
        return validate_source_id(payload["sourceId"])

    message = payload.get("message")
    if message is None:
        raise BadTriggerError("Missing sourceId")
    if not isinstance(message, dict) or not isinstance(message.get("data"), str):
        raise BadTriggerError("Notification message carries no data")

    try:
        decoded = json.loads(base64.b64decode(message["data"], validate=True).decode("utf-8"))
    except ValueError as e:
        raise BadTriggerError(f"Invalid notification payload: {e}") from e

    if not isinstance(decoded, dict) or "name" not in decoded:
        raise BadTriggerError("Notification payload has no object name")

    return validate_source_id(decoded["name"])
