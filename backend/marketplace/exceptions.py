from __future__ import annotations

import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class NoActivePlan(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "no_active_plan"
    default_detail = "No active plan found."


class QuotaExceeded(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "quota_exceeded"
    default_detail = "Spray quota exceeded for the active plan."


class ActiveAlreadyExists(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "active_plan_exists"
    default_detail = "User already has an active plan."


class ConflictingBooking(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "conflicting_booking"
    default_detail = "An open booking already exists for this account."


class SlotTaken(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "slot_taken"
    default_detail = "Slot already assigned."


class NotEditable(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "not_editable"
    default_detail = "Only pending bookings can be edited."


class NotCancellable(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "not_cancellable"
    default_detail = "Only pending bookings can be cancelled."


class NotPending(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "not_pending"
    default_detail = "Booking is not pending."


class NotInProgress(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "not_in_progress"
    default_detail = "Booking is not in progress."


class NotAssigned(APIException):
    status_code = status.HTTP_403_FORBIDDEN
    default_code = "not_assigned"
    default_detail = "Booking is not assigned to this sprayer."


class InvalidSignature(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "invalid_signature"
    default_detail = "Invalid signature."


class InvalidOrderNotes(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "invalid_order_notes"
    default_detail = "Invalid order notes (no user mapping)."


def api_exception_handler(exc, context):
    """Format every failure as ``{"detail", "code"}``; unknown errors become a generic 500."""
    if isinstance(exc, DjangoValidationError):
        exc = ValidationError(exc.message_dict if hasattr(exc, "error_dict") else exc.messages)

    response = exception_handler(exc, context)
    if response is None:
        view = context.get("view")
        logger.exception(
            "Unhandled error in %s",
            view.__class__.__name__ if view is not None else "unknown view",
            exc_info=exc,
        )
        return Response(
            {"detail": "Server error.", "code": "server_error"},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if isinstance(exc, APIException) and isinstance(response.data, dict):
        codes = exc.get_codes()
        if isinstance(codes, str):
            response.data.setdefault("code", codes)
    return response
