from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import QuerySet
from django.utils import timezone
from rest_framework.exceptions import PermissionDenied, ValidationError

from ...exceptions import (
    ConflictingBooking,
    NoActivePlan,
    NotAssigned,
    NotCancellable,
    NotEditable,
    NotInProgress,
    NotPending,
    QuotaExceeded,
    SlotTaken,
)
from ...models import DEFAULT_SERVICE_TITLE, OPEN_BOOKING_STATUSES, Account, Assignment, Booking, ServiceFeedback
from ..plans import adjust_quota, find_usable_active_plan

logger = logging.getLogger(__name__)

EDITABLE_BOOKING_FIELDS = ("service_title", "orchid", "field", "address", "pincode", "notes")


def _positive_sprays(value: Any) -> int:
    try:
        sprays = int(value)
    except (TypeError, ValueError):
        raise ValidationError({"spraysCount": "Sprays count must be a whole number."})
    if sprays < 1:
        raise ValidationError({"spraysCount": "Sprays count must be at least 1."})
    return sprays


def _lock_booking(booking: Booking) -> Booking:
    return Booking.objects.select_for_update().select_related("owner").get(pk=booking.pk)


def _has_open_booking(account: Account) -> bool:
    return Booking.objects.filter(owner=account, status__in=OPEN_BOOKING_STATUSES).exists()


def create_booking(
    account: Account,
    *,
    field: str,
    address: str,
    pincode: str,
    sprays_count: Any = 1,
    service_title: str = "",
    orchid: str = "",
    notes: str = "",
) -> Booking:
    sprays_count = _positive_sprays(sprays_count)
    service_title = (service_title or "").strip() or DEFAULT_SERVICE_TITLE

    with transaction.atomic():
        Account.objects.select_for_update().get(pk=account.pk)

        plan = find_usable_active_plan(account)
        if plan is None:
            raise NoActivePlan("No active plan found. Please purchase a plan before booking a service.")
        if plan.sprays_remaining < sprays_count:
            raise QuotaExceeded(
                f"Insufficient sprays remaining. Requested {sprays_count}, "
                f"you have {plan.sprays_remaining} spray(s) left in your plan."
            )
        if _has_open_booking(account):
            raise ConflictingBooking(
                "You already have a pending or in-progress booking. "
                "Complete or cancel it before booking another service."
            )

        try:
            with transaction.atomic():
                booking = Booking.objects.create(
                    owner=account,
                    service_title=service_title,
                    orchid=orchid,
                    field=field,
                    address=address,
                    pincode=pincode,
                    sprays_count=sprays_count,
                    notes=notes,
                )
        except IntegrityError:
            raise ConflictingBooking()

        adjust_quota(account, plan, sprays_count)

    logger.info(
        "Created booking %s for account %s using %s spray(s) from plan %s.",
        booking.pk,
        account.pk,
        sprays_count,
        plan.pk,
    )
    return booking


def edit_booking(booking: Booking, changes: dict[str, Any]) -> Booking:
    with transaction.atomic():
        booking = _lock_booking(booking)
        if booking.status != Booking.Status.PENDING:
            raise NotEditable()

        new_count = booking.sprays_count
        if changes.get("sprays_count") is not None:
            new_count = _positive_sprays(changes["sprays_count"])
        delta = new_count - booking.sprays_count

        # Quota moves first so a shortfall leaves every field untouched.
        if delta:
            plan = find_usable_active_plan(booking.owner)
            if plan is not None:
                adjust_quota(booking.owner, plan, delta)
            elif delta > 0:
                raise NoActivePlan()
            else:
                logger.warning(
                    "Booking %s reduced by %s spray(s) without a usable plan; refund skipped.",
                    booking.pk,
                    -delta,
                )

        changed_fields: list[str] = []
        for field_name in EDITABLE_BOOKING_FIELDS:
            if field_name in changes and changes[field_name] is not None:
                setattr(booking, field_name, changes[field_name])
                changed_fields.append(field_name)
        if delta:
            booking.sprays_count = new_count
            changed_fields.append("sprays_count")
        if changed_fields:
            booking.save(update_fields=[*changed_fields, "updated_at"])

    logger.info("Edited booking %s (sprays delta %s).", booking.pk, delta)
    return booking


def cancel_booking(booking: Booking) -> Booking:
    with transaction.atomic():
        booking = _lock_booking(booking)
        if booking.status != Booking.Status.PENDING:
            raise NotCancellable()

        booking.status = Booking.Status.CANCELLED
        booking.save(update_fields=["status", "updated_at"])

        plan = find_usable_active_plan(booking.owner)
        if plan is None:
            logger.warning(
                "Cancelled booking %s without a usable plan; %s spray(s) not refunded.",
                booking.pk,
                booking.sprays_count,
            )
        else:
            try:
                with transaction.atomic():
                    adjust_quota(booking.owner, plan, -booking.sprays_count)
            except DatabaseError:
                logger.exception("Failed to refund quota for cancelled booking %s.", booking.pk)

    logger.info("Cancelled booking %s for account %s.", booking.pk, booking.owner_id)
    return booking


def _mirror_assignment(booking: Booking, sprayer: Account, status: str) -> Assignment:
    assignment, _ = Assignment.objects.update_or_create(
        sprayer=sprayer,
        booking=booking,
        defaults={
            "farmer_id": booking.owner_id,
            "schedule_date": booking.schedule_date or timezone.now(),
            "status": status,
        },
    )
    return assignment


def _claim_booking(
    booking: Booking,
    sprayer: Account,
    schedule_date: datetime,
    *,
    check_slot: bool,
) -> Booking:
    if not (sprayer.is_sprayer or sprayer.is_admin):
        raise ValidationError({"sprayerId": "Assigned account must be a sprayer."})

    with transaction.atomic():
        booking = _lock_booking(booking)
        if booking.status != Booking.Status.PENDING:
            raise NotPending()

        if check_slot:
            slot_taken = (
                Booking.objects.filter(status__in=OPEN_BOOKING_STATUSES, schedule_date=schedule_date)
                .exclude(pk=booking.pk)
                .exists()
            )
            if slot_taken:
                raise SlotTaken()

        booking.schedule_date = schedule_date
        booking.status = Booking.Status.IN_PROGRESS
        booking.assigned_sprayer = sprayer
        try:
            with transaction.atomic():
                booking.save(update_fields=["schedule_date", "status", "assigned_sprayer", "updated_at"])
        except IntegrityError:
            raise SlotTaken()

        _mirror_assignment(booking, sprayer, Assignment.Status.IN_PROGRESS)

    logger.info(
        "Booking %s assigned to sprayer %s for %s.",
        booking.pk,
        sprayer.pk,
        schedule_date.isoformat(),
    )
    return booking


def assign_slot(booking: Booking, schedule_date: datetime, sprayer: Account) -> Booking:
    return _claim_booking(booking, sprayer, schedule_date, check_slot=True)


def accept_service(booking: Booking, sprayer: Account) -> Booking:
    return _claim_booking(booking, sprayer, timezone.now(), check_slot=False)


def complete_service(booking: Booking, sprayer: Account) -> Booking:
    with transaction.atomic():
        booking = _lock_booking(booking)
        if booking.assigned_sprayer_id != sprayer.pk:
            raise NotAssigned()
        if booking.status != Booking.Status.IN_PROGRESS:
            raise NotInProgress()

        booking.status = Booking.Status.COMPLETED
        booking.completed_at = timezone.now()
        booking.save(update_fields=["status", "completed_at", "updated_at"])

        # The sprayer-side mirror follows the booking; recreate it if it went missing.
        updated = Assignment.objects.filter(sprayer=sprayer, booking=booking).update(
            status=Assignment.Status.COMPLETED,
            updated_at=timezone.now(),
        )
        if not updated:
            logger.warning("Assignment mirror missing for booking %s; recreating.", booking.pk)
            _mirror_assignment(booking, sprayer, Assignment.Status.COMPLETED)

    logger.info("Booking %s completed by sprayer %s.", booking.pk, sprayer.pk)
    return booking


def list_open_bookings(status: str | None = None) -> QuerySet[Booking]:
    queryset = Booking.objects.filter(status__in=OPEN_BOOKING_STATUSES).select_related(
        "owner",
        "assigned_sprayer",
    )
    if status:
        if status not in OPEN_BOOKING_STATUSES:
            raise ValidationError({"status": f"Status must be one of: {', '.join(OPEN_BOOKING_STATUSES)}."})
        queryset = queryset.filter(status=status)
    return queryset.order_by("created_at", "id")


def leave_feedback(booking: Booking, author: Account, rating: Any, comment: str = "") -> ServiceFeedback:
    if booking.owner_id != author.pk:
        raise PermissionDenied("Only the booking owner can leave feedback.")
    if booking.status != Booking.Status.COMPLETED:
        raise ValidationError({"status": "Feedback can only be left on completed bookings."})

    try:
        rating = int(rating)
    except (TypeError, ValueError):
        raise ValidationError({"rating": "Rating must be a whole number between 1 and 5."})
    if not 1 <= rating <= 5:
        raise ValidationError({"rating": "Rating must be a whole number between 1 and 5."})

    if ServiceFeedback.objects.filter(booking=booking, author=author).exists():
        raise ValidationError("Feedback already submitted for this booking.")

    feedback = ServiceFeedback.objects.create(
        booking=booking,
        author=author,
        rating=rating,
        comment=comment or "",
    )
    logger.info("Feedback %s recorded for booking %s (rating %s).", feedback.pk, booking.pk, rating)
    return feedback
