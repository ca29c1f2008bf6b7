from .views_modules.accounts import (
    AccountDetailView,
    AccountListView,
    AccountPurchasesView,
    HealthView,
    LoginView,
    RegisterView,
)
from .views_modules.payments import CreateOrderView, VerifyPaymentView
from .views_modules.services import (
    AcceptServiceView,
    AssignSlotView,
    BookServiceView,
    CancelBookingView,
    CompleteServiceView,
    EditBookingView,
    PurchasePlanView,
    ServiceFeedbackView,
    SprayerServiceListView,
)
from .webhooks import RazorpayWebhookView

__all__ = [
    "AcceptServiceView",
    "AccountDetailView",
    "AccountListView",
    "AccountPurchasesView",
    "AssignSlotView",
    "BookServiceView",
    "CancelBookingView",
    "CompleteServiceView",
    "CreateOrderView",
    "EditBookingView",
    "HealthView",
    "LoginView",
    "PurchasePlanView",
    "RazorpayWebhookView",
    "RegisterView",
    "ServiceFeedbackView",
    "SprayerServiceListView",
    "VerifyPaymentView",
]
