from __future__ import annotations

import base64
import hashlib
import hmac
import json
import logging
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.parse import quote
from urllib.request import Request, urlopen

from django.conf import settings

logger = logging.getLogger(__name__)

DEFAULT_RAZORPAY_API_BASE_URL = "https://api.razorpay.com/v1"


class PaymentGatewayError(RuntimeError):
    """Raised when the payment gateway rejects a request or cannot be reached."""


class PaymentGatewayConfigurationError(PaymentGatewayError):
    """Raised when gateway credentials or settings are missing."""


def _setting(name: str, default: str = "") -> str:
    return str(getattr(settings, name, default) or "").strip()


def _require_credentials() -> tuple[str, str]:
    key_id = _setting("RAZORPAY_KEY_ID")
    key_secret = _setting("RAZORPAY_KEY_SECRET")
    if not key_id or not key_secret:
        raise PaymentGatewayConfigurationError("RAZORPAY_KEY_ID and RAZORPAY_KEY_SECRET are required.")
    return key_id, key_secret


def _timeout_seconds() -> int:
    raw_value = getattr(settings, "RAZORPAY_TIMEOUT_SECONDS", 10)
    try:
        return max(int(raw_value), 1)
    except (TypeError, ValueError) as exc:
        raise PaymentGatewayConfigurationError("RAZORPAY_TIMEOUT_SECONDS must be an integer.") from exc


def compute_signature(secret: str, message: str | bytes) -> str:
    """Hex HMAC-SHA256 of ``message`` keyed by ``secret``."""
    payload = message if isinstance(message, bytes) else str(message).encode("utf-8")
    return hmac.new(str(secret).encode("utf-8"), payload, hashlib.sha256).hexdigest()


def _request(method: str, path: str, payload: dict[str, Any] | None = None) -> dict[str, Any]:
    key_id, key_secret = _require_credentials()
    base_url = (_setting("RAZORPAY_API_BASE_URL") or DEFAULT_RAZORPAY_API_BASE_URL).rstrip("/")
    credentials = base64.b64encode(f"{key_id}:{key_secret}".encode("utf-8")).decode("ascii")
    request = Request(
        f"{base_url}/{path.lstrip('/')}",
        data=json.dumps(payload).encode("utf-8") if payload is not None else None,
        headers={
            "Authorization": f"Basic {credentials}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        },
        method=method,
    )

    try:
        with urlopen(request, timeout=_timeout_seconds()) as response:
            body = response.read().decode("utf-8", errors="ignore")
    except HTTPError as exc:
        error_body = exc.read().decode("utf-8", errors="ignore")
        logger.warning("Razorpay %s %s failed with status %s: %s", method, path, exc.code, error_body)
        raise PaymentGatewayError(f"Payment gateway returned status {exc.code}.") from exc
    except URLError as exc:
        logger.warning("Razorpay %s %s failed: %s", method, path, exc.reason)
        raise PaymentGatewayError("Payment gateway is unreachable.") from exc

    try:
        data = json.loads(body or "{}")
    except json.JSONDecodeError as exc:
        raise PaymentGatewayError("Payment gateway returned invalid JSON.") from exc
    if not isinstance(data, dict):
        raise PaymentGatewayError("Payment gateway returned an unexpected payload.")
    return data


def create_gateway_order(
    *,
    amount: int,
    currency: str,
    receipt: str,
    notes: dict[str, str],
) -> dict[str, Any]:
    order = _request(
        "POST",
        "orders",
        {
            "amount": int(amount),
            "currency": currency,
            "receipt": receipt,
            "payment_capture": 1,
            "notes": notes,
        },
    )
    if not str(order.get("id") or "").strip():
        raise PaymentGatewayError("Payment gateway order response is missing an id.")
    logger.info("Created Razorpay order %s for %s %s.", order.get("id"), amount, currency)
    return order


def fetch_gateway_order(order_id: str) -> dict[str, Any]:
    safe_order_id = quote(str(order_id or "").strip(), safe="")
    if not safe_order_id:
        raise PaymentGatewayError("Order id is required.")
    return _request("GET", f"orders/{safe_order_id}")
