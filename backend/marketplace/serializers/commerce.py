from __future__ import annotations

from rest_framework import serializers

from ..models import PaymentRecord, PendingPayment, Plan
from ..tools.plans import MAX_PLAN_MONTHS


def _validate_duration(value: str) -> str:
    digits = "".join(char for char in str(value or "") if char.isdigit())
    if digits and int(digits) > MAX_PLAN_MONTHS:
        raise serializers.ValidationError(f"Duration cannot exceed {MAX_PLAN_MONTHS} months.")
    return value


class PlanSerializer(serializers.ModelSerializer):
    planId = serializers.CharField(source="plan_id", read_only=True)
    durationMonths = serializers.IntegerField(source="duration_months", read_only=True)
    startDate = serializers.DateTimeField(source="start_date", read_only=True)
    endDate = serializers.DateTimeField(source="end_date", read_only=True)
    spraysAllowed = serializers.IntegerField(source="sprays_allowed", read_only=True)
    spraysUsed = serializers.IntegerField(source="sprays_used", read_only=True)
    spraysRemaining = serializers.IntegerField(source="sprays_remaining", read_only=True)

    class Meta:
        model = Plan
        fields = (
            "id",
            "planId",
            "title",
            "price",
            "duration",
            "durationMonths",
            "startDate",
            "endDate",
            "status",
            "spraysAllowed",
            "spraysUsed",
            "spraysRemaining",
        )
        read_only_fields = fields


class PendingPaymentSerializer(serializers.ModelSerializer):
    orderId = serializers.CharField(source="order_id", read_only=True)
    planId = serializers.CharField(source="plan_id", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = PendingPayment
        fields = ("orderId", "planId", "amount", "currency", "createdAt")
        read_only_fields = fields


class PaymentRecordSerializer(serializers.ModelSerializer):
    orderId = serializers.CharField(source="order_id", read_only=True)
    paymentId = serializers.CharField(source="payment_id", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = PaymentRecord
        fields = ("orderId", "paymentId", "amount", "currency", "source", "notes", "createdAt")
        read_only_fields = fields


class PurchasePlanSerializer(serializers.Serializer):
    planId = serializers.CharField(source="plan_id", max_length=128, required=False, allow_blank=True)
    title = serializers.CharField(max_length=180)
    price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    duration = serializers.CharField(max_length=32, required=False, allow_blank=True, default="1")

    def validate_duration(self, value):
        return _validate_duration(value)


class CreateOrderSerializer(serializers.Serializer):
    userId = serializers.IntegerField(source="user_id", min_value=1)
    planId = serializers.CharField(source="plan_id", max_length=128)
    title = serializers.CharField(max_length=180)
    price = serializers.CharField(max_length=32)
    duration = serializers.CharField(max_length=32, required=False, allow_blank=True)

    def validate_duration(self, value):
        return _validate_duration(value)


class VerifyPaymentSerializer(serializers.Serializer):
    razorpay_order_id = serializers.CharField(max_length=128)
    razorpay_payment_id = serializers.CharField(max_length=128)
    razorpay_signature = serializers.CharField(max_length=256)
