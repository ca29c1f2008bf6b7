from django.urls import path

from .views import (
    AcceptServiceView,
    AccountDetailView,
    AccountListView,
    AccountPurchasesView,
    AssignSlotView,
    BookServiceView,
    CancelBookingView,
    CompleteServiceView,
    CreateOrderView,
    EditBookingView,
    HealthView,
    LoginView,
    PurchasePlanView,
    RazorpayWebhookView,
    RegisterView,
    ServiceFeedbackView,
    SprayerServiceListView,
    VerifyPaymentView,
)

urlpatterns = [
    path("health", HealthView.as_view(), name="health"),
    path("register", RegisterView.as_view(), name="register"),
    path("login", LoginView.as_view(), name="login"),
    path("users", AccountListView.as_view(), name="account-list"),
    path("users/<int:user_id>", AccountDetailView.as_view(), name="account-detail"),
    path("users/<int:user_id>/purchases", AccountPurchasesView.as_view(), name="account-purchases"),
    path("purchase-plan/<int:user_id>", PurchasePlanView.as_view(), name="purchase-plan"),
    path("book-service/<int:user_id>", BookServiceView.as_view(), name="book-service"),
    path("edit-booking/<int:user_id>/<int:booking_id>", EditBookingView.as_view(), name="edit-booking"),
    path("cancel-booking/<int:user_id>/<int:booking_id>", CancelBookingView.as_view(), name="cancel-booking"),
    path("services/<int:booking_id>/feedback", ServiceFeedbackView.as_view(), name="service-feedback"),
    path("sprayer/services", SprayerServiceListView.as_view(), name="sprayer-services"),
    path("sprayer/assign-slot", AssignSlotView.as_view(), name="sprayer-assign-slot"),
    path("sprayer/accept-service", AcceptServiceView.as_view(), name="sprayer-accept-service"),
    path("sprayer/complete-service", CompleteServiceView.as_view(), name="sprayer-complete-service"),
    path("api/payments/create-order", CreateOrderView.as_view(), name="payments-create-order"),
    path("api/payments/verify-payment", VerifyPaymentView.as_view(), name="payments-verify-payment"),
    path("api/payments/webhook", RazorpayWebhookView.as_view(), name="payments-webhook"),
]
