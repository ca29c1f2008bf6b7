from __future__ import annotations

import calendar
import logging
import re
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from django.db import transaction
from django.db.models import F, IntegerField, Q, Value
from django.db.models.functions import Greatest
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from ...exceptions import ActiveAlreadyExists, QuotaExceeded
from ...models import Account, Plan

logger = logging.getLogger(__name__)

# Checked in order; "premium" must win over "pro".
SPRAYS_PER_MONTH_BY_KEYWORD: tuple[tuple[str, int], ...] = (
    ("premium", 4),
    ("starter", 2),
    ("pro", 3),
)
DEFAULT_SPRAYS_PER_MONTH = 1
MAX_PLAN_MONTHS = 120
EXPLICIT_SPRAYS_PATTERN = re.compile(r"(\d+)\s*-?\s*sprays?", re.IGNORECASE)


@dataclass(frozen=True)
class PlanDescriptor:
    plan_id: str
    title: str
    price: Any
    duration: Any = 1


def parse_duration_months(raw: Any) -> int:
    """Return a month count in 1..MAX_PLAN_MONTHS; anything unparseable or non-positive becomes 1."""
    if raw is None or isinstance(raw, bool):
        return 1

    text = str(raw).strip()
    try:
        months = int(text)
    except ValueError:
        digits = re.sub(r"\D", "", text)
        if not digits:
            return 1
        months = int(digits)
    if months <= 0:
        return 1
    return min(months, MAX_PLAN_MONTHS)


def _keyword_present(keyword: str, text: str) -> bool:
    return re.search(rf"(?<![a-z]){re.escape(keyword)}(?![a-z])", text) is not None


def sprays_per_month(title: str, plan_id: str = "") -> int:
    for candidate in (title, plan_id):
        match = EXPLICIT_SPRAYS_PATTERN.search(str(candidate or ""))
        if match and int(match.group(1)) > 0:
            return int(match.group(1))

    haystack = f"{title or ''} {plan_id or ''}".lower()
    for keyword, sprays in SPRAYS_PER_MONTH_BY_KEYWORD:
        if _keyword_present(keyword, haystack):
            return sprays
    return DEFAULT_SPRAYS_PER_MONTH


def add_months(start: datetime, months: int) -> datetime:
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return start.replace(year=year, month=month, day=min(start.day, last_day))


def _to_price(value: Any) -> Decimal:
    try:
        price = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError({"price": "Price must be a number."})
    if not price.is_finite() or price < 0:
        raise ValidationError({"price": "Price must be a non-negative number."})
    return price.quantize(Decimal("0.01"))


def _usable_filter(now: datetime) -> Q:
    return Q(status=Plan.Status.ACTIVE) & (Q(end_date__isnull=True) | Q(end_date__gt=now))


def find_usable_active_plan(account: Account, now: datetime | None = None) -> Plan | None:
    now = now or timezone.now()
    return Plan.objects.filter(account=account).filter(_usable_filter(now)).order_by("id").first()


def activate_plan(account: Account, descriptor: PlanDescriptor, *, now: datetime | None = None) -> Plan:
    months = parse_duration_months(descriptor.duration)
    price = _to_price(descriptor.price)
    now = now or timezone.now()

    with transaction.atomic():
        # Serializes concurrent activations for the same account.
        Account.objects.select_for_update().get(pk=account.pk)

        expired_count = Plan.objects.filter(account=account, status=Plan.Status.ACTIVE).update(
            status=Plan.Status.EXPIRED,
            updated_at=now,
        )
        plan = Plan.objects.create(
            account=account,
            plan_id=str(descriptor.plan_id or "").strip() or f"manual_{int(now.timestamp() * 1000)}",
            title=str(descriptor.title or "").strip() or "Purchased Plan",
            price=price,
            duration_months=months,
            start_date=now,
            end_date=add_months(now, months),
            status=Plan.Status.ACTIVE,
            sprays_allowed=sprays_per_month(descriptor.title, descriptor.plan_id) * months,
            sprays_used=0,
        )
        Account.objects.filter(pk=account.pk).update(plan_active=True, updated_at=now)
        account.plan_active = True

    logger.info(
        "Activated plan %s (%s) for account %s: %s month(s), %s spray(s); expired %s previous plan(s).",
        plan.plan_id,
        plan.title,
        account.pk,
        months,
        plan.sprays_allowed,
        expired_count,
    )
    return plan


def purchase_plan(account: Account, descriptor: PlanDescriptor) -> Plan:
    with transaction.atomic():
        Account.objects.select_for_update().get(pk=account.pk)
        if find_usable_active_plan(account) is not None:
            logger.warning("Rejected plan purchase for account %s: active plan exists.", account.pk)
            raise ActiveAlreadyExists("Cannot purchase while an active plan exists.")
        return activate_plan(account, descriptor)


def adjust_quota(account: Account, plan: Plan, delta: int) -> Plan:
    """Apply ``delta`` to ``sprays_used`` as one conditional update."""
    delta = int(delta)
    if delta == 0:
        return plan

    now = timezone.now()
    queryset = Plan.objects.filter(pk=plan.pk, account=account)
    if delta > 0:
        updated = queryset.filter(sprays_used__lte=F("sprays_allowed") - delta).update(
            sprays_used=F("sprays_used") + delta,
            updated_at=now,
        )
        if not updated:
            plan.refresh_from_db(fields=["sprays_allowed", "sprays_used"])
            raise QuotaExceeded(
                f"Insufficient sprays remaining. Requested {delta}, "
                f"you have {plan.sprays_remaining} spray(s) left in your plan."
            )
    else:
        queryset.update(
            sprays_used=Greatest(F("sprays_used") + delta, Value(0), output_field=IntegerField()),
            updated_at=now,
        )

    plan.refresh_from_db(fields=["sprays_allowed", "sprays_used", "updated_at"])
    return plan


def refresh_plan_active_flag(account: Account, now: datetime | None = None) -> bool:
    now = now or timezone.now()
    Plan.objects.filter(
        account=account,
        status=Plan.Status.ACTIVE,
        end_date__isnull=False,
        end_date__lte=now,
    ).update(status=Plan.Status.EXPIRED, updated_at=now)

    has_active = find_usable_active_plan(account, now=now) is not None
    if account.plan_active != has_active:
        Account.objects.filter(pk=account.pk).update(plan_active=has_active, updated_at=now)
        account.plan_active = has_active
    return has_active
