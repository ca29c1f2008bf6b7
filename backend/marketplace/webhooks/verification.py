from __future__ import annotations

import json
from typing import Any

from ..exceptions import InvalidSignature
from ..tools.payments import verify_webhook_signature


class WebhookVerificationError(RuntimeError):
    pass


def _verify_webhook(payload: bytes, headers: dict[str, str]) -> dict[str, Any]:
    """Check the Razorpay signature over the raw body and return the parsed event."""
    try:
        verify_webhook_signature(payload, headers.get("x-razorpay-signature", ""))
    except InvalidSignature as exc:
        raise WebhookVerificationError(f"Webhook signature verification failed: {exc.detail}") from exc

    try:
        event = json.loads(payload.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise WebhookVerificationError("Webhook payload is not valid JSON.") from exc
    if not isinstance(event, dict):
        raise WebhookVerificationError("Webhook payload must be a JSON object.")
    return event
