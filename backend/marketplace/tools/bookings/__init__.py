from .manager import (
    accept_service,
    assign_slot,
    cancel_booking,
    complete_service,
    create_booking,
    edit_booking,
    leave_feedback,
    list_open_bookings,
)

__all__ = [
    "accept_service",
    "assign_slot",
    "cancel_booking",
    "complete_service",
    "create_booking",
    "edit_booking",
    "leave_feedback",
    "list_open_bookings",
]
