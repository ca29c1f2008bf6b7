from .handlers import EVENT_HANDLERS, handle_payment_captured
from .receiver import RazorpayWebhookView
from .verification import WebhookVerificationError, _verify_webhook

__all__ = [
    "EVENT_HANDLERS",
    "RazorpayWebhookView",
    "WebhookVerificationError",
    "_verify_webhook",
    "handle_payment_captured",
]
