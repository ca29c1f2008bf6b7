from __future__ import annotations

import logging
import secrets
import time
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from django.conf import settings
from django.db import DatabaseError, transaction
from rest_framework.exceptions import NotFound, ValidationError

from ...exceptions import ActiveAlreadyExists, InvalidOrderNotes, InvalidSignature
from ...models import Account, PaymentRecord, PendingPayment, Plan
from ..plans import PlanDescriptor, activate_plan, find_usable_active_plan, parse_duration_months
from .razorpay import (
    PaymentGatewayConfigurationError,
    compute_signature,
    create_gateway_order,
    fetch_gateway_order,
)

logger = logging.getLogger(__name__)


def _safe_str(value: Any) -> str:
    return str(value).strip() if value is not None else ""


def _safe_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _payment_currency() -> str:
    return _safe_str(getattr(settings, "PAYMENT_CURRENCY", "INR")).upper() or "INR"


def to_minor_units(price: Any) -> int:
    """Convert a major-unit price (rupees) to paise, rejecting non-positive amounts."""
    try:
        amount = Decimal(_safe_str(price))
    except (InvalidOperation, ValueError):
        raise ValidationError({"price": "Invalid price."})
    if not amount.is_finite():
        raise ValidationError({"price": "Invalid price."})

    minor_units = int((amount * 100).to_integral_value(rounding=ROUND_HALF_UP))
    if minor_units <= 0:
        raise ValidationError({"price": "Invalid price."})
    return minor_units


def _account_from_notes(notes: dict[str, Any]) -> Account | None:
    user_id = _safe_str(notes.get("userId"))
    if not user_id.isdigit():
        return None
    return Account.objects.filter(pk=int(user_id)).first()


def create_order(
    account: Account,
    *,
    plan_id: str,
    title: str,
    price: Any,
    duration: Any = None,
) -> dict[str, Any]:
    if find_usable_active_plan(account) is not None:
        logger.warning("Refused order creation for account %s: active plan exists.", account.pk)
        raise ActiveAlreadyExists("User already has an active plan. Cannot create order.")

    amount = to_minor_units(price)
    currency = _payment_currency()
    notes = {
        "userId": str(account.pk),
        "planId": _safe_str(plan_id),
        "planTitle": _safe_str(title),
        "planDuration": _safe_str(duration) if duration else "",
    }
    order = create_gateway_order(
        amount=amount,
        currency=currency,
        receipt=f"rcpt_{int(time.time() * 1000)}",
        notes=notes,
    )

    # The gateway order is authoritative; the pending entry is bookkeeping only.
    try:
        with transaction.atomic():
            PendingPayment.objects.create(
                account=account,
                order_id=_safe_str(order.get("id")),
                plan_id=notes["planId"],
                amount=amount,
                currency=currency,
            )
    except DatabaseError:
        logger.exception("Failed to record pending payment for order %s.", order.get("id"))

    logger.info("Order %s created for account %s (%s %s).", order.get("id"), account.pk, amount, currency)
    return order


def verify_payment(order_id: str, payment_id: str, signature: str) -> Plan:
    order_id = _safe_str(order_id)
    payment_id = _safe_str(payment_id)
    signature = _safe_str(signature)
    if not order_id or not payment_id or not signature:
        raise ValidationError("Missing payment fields.")

    key_secret = _safe_str(getattr(settings, "RAZORPAY_KEY_SECRET", ""))
    if not key_secret:
        raise PaymentGatewayConfigurationError("RAZORPAY_KEY_SECRET is required.")

    expected = compute_signature(key_secret, f"{order_id}|{payment_id}")
    if not secrets.compare_digest(expected, signature):
        logger.warning("Invalid payment signature for order %s, payment %s.", order_id, payment_id)
        raise InvalidSignature()

    order = fetch_gateway_order(order_id)
    notes = _safe_dict(order.get("notes"))
    if not _safe_str(notes.get("userId")).isdigit():
        logger.warning("Order %s has no usable user mapping in its notes.", order_id)
        raise InvalidOrderNotes()

    account = _account_from_notes(notes)
    if account is None:
        raise NotFound("User not found.")

    amount = int(order.get("amount") or 0)
    currency = _safe_str(order.get("currency")).upper() or _payment_currency()
    months = parse_duration_months(notes.get("planDuration"))

    plan = None
    with transaction.atomic():
        Account.objects.select_for_update().get(pk=account.pk)

        if find_usable_active_plan(account) is None:
            plan = activate_plan(
                account,
                PlanDescriptor(
                    plan_id=_safe_str(notes.get("planId")),
                    title=_safe_str(notes.get("planTitle")) or "Purchased Plan",
                    price=Decimal(amount) / 100,
                    duration=months,
                ),
            )
            PaymentRecord.objects.create(
                account=account,
                order_id=order_id,
                payment_id=payment_id,
                amount=amount,
                currency=currency,
                source=PaymentRecord.Source.VERIFICATION,
                notes=notes,
            )
        PendingPayment.objects.filter(account=account, order_id=order_id).delete()

    if plan is None:
        logger.warning("Activation denied for order %s: account %s already has an active plan.", order_id, account.pk)
        raise ActiveAlreadyExists("User already has an active plan. Activation denied.")

    logger.info("Payment %s verified for order %s; plan %s activated.", payment_id, order_id, plan.pk)
    return plan


def verify_webhook_signature(raw_body: bytes, signature: str) -> None:
    webhook_secret = _safe_str(getattr(settings, "RAZORPAY_WEBHOOK_SECRET", ""))
    signature = _safe_str(signature)
    if not webhook_secret or not signature:
        raise InvalidSignature("Webhook signature or secret missing.")

    expected = compute_signature(webhook_secret, raw_body)
    if not secrets.compare_digest(expected, signature):
        raise InvalidSignature()


def record_captured_payment(payment_entity: dict[str, Any]) -> PaymentRecord | None:
    """Append an audit PaymentRecord for a captured payment; plans are never touched here."""
    order_id = _safe_str(payment_entity.get("order_id"))
    if not order_id:
        logger.warning("Captured payment %s has no order id.", payment_entity.get("id"))
        return None

    order = fetch_gateway_order(order_id)
    notes = _safe_dict(order.get("notes"))
    account = _account_from_notes(notes)
    if account is None:
        logger.warning("Webhook: order %s notes missing or invalid userId.", order_id)
        return None

    record = PaymentRecord.objects.create(
        account=account,
        order_id=order_id,
        payment_id=_safe_str(payment_entity.get("id")),
        amount=int(payment_entity.get("amount") or 0),
        currency=_safe_str(payment_entity.get("currency")).upper() or _payment_currency(),
        source=PaymentRecord.Source.WEBHOOK,
        notes=notes,
    )
    logger.info("Recorded captured payment %s for account %s.", record.payment_id, account.pk)
    return record
