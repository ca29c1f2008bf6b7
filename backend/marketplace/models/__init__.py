from .accounts import Account
from .commerce import PaymentRecord, PendingPayment, Plan, WebhookEvent
from .services import DEFAULT_SERVICE_TITLE, OPEN_BOOKING_STATUSES, Assignment, Booking, ServiceFeedback

__all__ = [
    "Account",
    "Plan",
    "PendingPayment",
    "PaymentRecord",
    "WebhookEvent",
    "DEFAULT_SERVICE_TITLE",
    "OPEN_BOOKING_STATUSES",
    "Booking",
    "Assignment",
    "ServiceFeedback",
]
