from .razorpay import (
    PaymentGatewayConfigurationError,
    PaymentGatewayError,
    compute_signature,
    create_gateway_order,
    fetch_gateway_order,
)
from .reconciliation import (
    create_order,
    record_captured_payment,
    to_minor_units,
    verify_payment,
    verify_webhook_signature,
)

__all__ = [
    "PaymentGatewayConfigurationError",
    "PaymentGatewayError",
    "compute_signature",
    "create_gateway_order",
    "create_order",
    "fetch_gateway_order",
    "record_captured_payment",
    "to_minor_units",
    "verify_payment",
    "verify_webhook_signature",
]
