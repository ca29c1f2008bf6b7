from __future__ import annotations

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from ..serializers import CreateOrderSerializer, PlanSerializer, VerifyPaymentSerializer
from ..tools.payments import (
    PaymentGatewayConfigurationError,
    PaymentGatewayError,
    create_order,
    verify_payment,
)
from .helpers import get_target_account


def _gateway_error_response(exc: PaymentGatewayError) -> Response:
    if isinstance(exc, PaymentGatewayConfigurationError):
        return Response(
            {"detail": str(exc), "code": "gateway_not_configured"},
            status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )
    return Response(
        {"detail": str(exc), "code": "gateway_error"},
        status=status.HTTP_502_BAD_GATEWAY,
    )


class CreateOrderView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "order_create"

    def post(self, request):
        serializer = CreateOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        account = get_target_account(request, data["user_id"])

        try:
            order = create_order(
                account,
                plan_id=data["plan_id"],
                title=data["title"],
                price=data["price"],
                duration=data.get("duration"),
            )
        except PaymentGatewayError as exc:
            return _gateway_error_response(exc)
        return Response({"order": order})


class VerifyPaymentView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "payment_verify"

    def post(self, request):
        serializer = VerifyPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            plan = verify_payment(
                data["razorpay_order_id"],
                data["razorpay_payment_id"],
                data["razorpay_signature"],
            )
        except PaymentGatewayError as exc:
            return _gateway_error_response(exc)
        return Response(
            {"ok": True, "message": "Payment verified and plan activated", "plan": PlanSerializer(plan).data}
        )
