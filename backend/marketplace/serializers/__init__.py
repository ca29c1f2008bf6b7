from .accounts import AccountSerializer, AccountUpdateSerializer, LoginSerializer, RegisterSerializer
from .commerce import (
    CreateOrderSerializer,
    PaymentRecordSerializer,
    PendingPaymentSerializer,
    PlanSerializer,
    PurchasePlanSerializer,
    VerifyPaymentSerializer,
)
from .services import (
    AssignmentSerializer,
    AssignSlotSerializer,
    BookingActionSerializer,
    BookingCreateSerializer,
    BookingEditSerializer,
    BookingSerializer,
    FeedbackCreateSerializer,
    ServiceFeedbackSerializer,
)

__all__ = [
    "AccountSerializer",
    "AccountUpdateSerializer",
    "AssignSlotSerializer",
    "AssignmentSerializer",
    "BookingActionSerializer",
    "BookingCreateSerializer",
    "BookingEditSerializer",
    "BookingSerializer",
    "CreateOrderSerializer",
    "FeedbackCreateSerializer",
    "LoginSerializer",
    "PaymentRecordSerializer",
    "PendingPaymentSerializer",
    "PlanSerializer",
    "PurchasePlanSerializer",
    "RegisterSerializer",
    "ServiceFeedbackSerializer",
    "VerifyPaymentSerializer",
]
