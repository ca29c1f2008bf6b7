from __future__ import annotations

import logging
from typing import Any

from ..tools.payments import record_captured_payment

logger = logging.getLogger(__name__)


def _entity(payload: dict[str, Any], name: str) -> dict[str, Any]:
    wrapper = payload.get(name)
    entity = wrapper.get("entity") if isinstance(wrapper, dict) else None
    return entity if isinstance(entity, dict) else {}


def handle_payment_captured(payload: dict[str, Any]) -> None:
    # Audit only: plan activation belongs to client-side verification.
    payment = _entity(payload, "payment")
    if not payment:
        logger.warning("payment.captured webhook without a payment entity.")
        return
    logger.info("Webhook payment.captured %s amount %s.", payment.get("id"), payment.get("amount"))
    record_captured_payment(payment)


EVENT_HANDLERS: dict[str, Any] = {
    "payment.captured": handle_payment_captured,
}
