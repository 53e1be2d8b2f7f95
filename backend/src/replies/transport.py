"""Inbound webhook payload decoding.

Turns a provider webhook request (JSON, multipart or url-encoded form, or
a raw body holding JSON) into an InboundEmailPayload, and checks the
shared webhook secret.
"""

import hmac
import json
from typing import Any, Mapping, Optional

from fastapi import Request
from pydantic import ValidationError

from .schemas import InboundEmailPayload

WEBHOOK_SECRET_HEADER = "x-webhook-secret"
FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


class PayloadError(ValueError):
    """The webhook body could not be decoded into an email."""
    pass


def payload_from_mapping(data: Any) -> InboundEmailPayload:
    """Validate a decoded JSON object or form mapping."""
    if not isinstance(data, Mapping):
        raise PayloadError("Webhook payload must be an object")
    try:
        return InboundEmailPayload.model_validate(dict(data))
    except ValidationError as e:
        raise PayloadError(f"Malformed webhook payload: {e.error_count()} invalid fields") from e


async def decode_request(request: Request) -> InboundEmailPayload:
    """Decode a webhook request by its content type.

    Raises:
        PayloadError: Unsupported content type or malformed body
    """
    content_type = request.headers.get("content-type", "")

    if content_type.startswith(FORM_CONTENT_TYPES):
        form = await request.form()
        # Attachments arrive as UploadFile parts; only text fields matter here
        fields = {key: value for key, value in form.items() if isinstance(value, str)}
        return payload_from_mapping(fields)

    raw = await request.body()
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise PayloadError("Unsupported content type or malformed request") from e
    return payload_from_mapping(data)


def provided_secret(headers: Mapping[str, str]) -> Optional[str]:
    """Secret sent as X-Webhook-Secret or as an Authorization bearer token."""
    secret = headers.get(WEBHOOK_SECRET_HEADER)
    if secret:
        return secret
    authorization = headers.get("authorization", "")
    if authorization.startswith("Bearer "):
        return authorization[len("Bearer "):]
    return None


def verify_webhook_secret(expected: Optional[str], headers: Mapping[str, str]) -> bool:
    """True when no secret is configured or the request carries it."""
    if not expected:
        return True
    secret = provided_secret(headers)
    if secret is None:
        return False
    return hmac.compare_digest(secret.encode(), expected.encode())
