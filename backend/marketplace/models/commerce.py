from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F, Q
from django.utils import timezone


class Plan(models.Model):
    class Status(models.TextChoices):
        ACTIVE = "Active", "Active"
        EXPIRED = "Expired", "Expired"

    account = models.ForeignKey(
        "Account",
        on_delete=models.CASCADE,
        related_name="plans",
    )
    plan_id = models.CharField(max_length=128)
    title = models.CharField(max_length=180)
    price = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    duration_months = models.PositiveSmallIntegerField(default=1)
    start_date = models.DateTimeField(default=timezone.now)
    end_date = models.DateTimeField(blank=True, null=True)
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.ACTIVE)
    sprays_allowed = models.PositiveIntegerField(default=0)
    sprays_used = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("id",)
        indexes = [
            models.Index(fields=("account", "status"), name="plan_account_status_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=("account",),
                condition=Q(status="Active"),
                name="plan_single_active_per_account",
            ),
            models.CheckConstraint(
                condition=Q(sprays_used__lte=F("sprays_allowed")),
                name="plan_sprays_used_within_allowed",
            ),
            models.CheckConstraint(
                condition=Q(price__gte=0),
                name="plan_price_non_negative",
            ),
        ]

    @property
    def duration(self) -> str:
        return f"{self.duration_months} Month"

    @property
    def sprays_remaining(self) -> int:
        return max((self.sprays_allowed or 0) - (self.sprays_used or 0), 0)

    def clean(self) -> None:
        self.plan_id = (self.plan_id or "").strip()
        self.title = (self.title or "").strip()

        if not self.title:
            raise ValidationError({"title": "Plan title is required."})
        if self.end_date and self.start_date and self.end_date <= self.start_date:
            raise ValidationError({"end_date": "end_date must be after start_date."})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.title} ({self.status}, {self.sprays_used}/{self.sprays_allowed})"


class PendingPayment(models.Model):
    account = models.ForeignKey(
        "Account",
        on_delete=models.CASCADE,
        related_name="pending_payments",
    )
    order_id = models.CharField(max_length=128, db_index=True)
    plan_id = models.CharField(max_length=128, blank=True)
    amount = models.PositiveIntegerField(default=0)
    currency = models.CharField(max_length=3, default="INR")
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ("created_at", "id")

    def __str__(self) -> str:
        return f"{self.order_id} ({self.amount} {self.currency})"


class PaymentRecord(models.Model):
    class Source(models.TextChoices):
        VERIFICATION = "verification", "Client verification"
        WEBHOOK = "webhook", "Webhook"

    account = models.ForeignKey(
        "Account",
        on_delete=models.CASCADE,
        related_name="payments",
    )
    order_id = models.CharField(max_length=128, db_index=True)
    payment_id = models.CharField(max_length=128, blank=True)
    amount = models.PositiveIntegerField(default=0)
    currency = models.CharField(max_length=3, default="INR")
    source = models.CharField(max_length=24, choices=Source.choices, default=Source.VERIFICATION)
    notes = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ("created_at", "id")
        indexes = [
            models.Index(fields=("account", "order_id"), name="payment_account_order_idx"),
        ]

    def clean(self) -> None:
        self.order_id = (self.order_id or "").strip()
        self.payment_id = (self.payment_id or "").strip()
        self.currency = (self.currency or "INR").strip().upper()
        if not self.order_id:
            raise ValidationError({"order_id": "Order id is required."})
        if len(self.currency) != 3:
            raise ValidationError({"currency": "Currency must be a 3-letter code."})

    def save(self, *args, **kwargs):
        if self.pk is not None:
            raise ValidationError("Payment records are append-only.")
        self.full_clean()
        return super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.order_id}:{self.payment_id}"


class WebhookEvent(models.Model):
    class Provider(models.TextChoices):
        RAZORPAY = "razorpay", "Razorpay"
        OTHER = "other", "Other"

    class Status(models.TextChoices):
        RECEIVED = "received", "Received"
        PROCESSED = "processed", "Processed"
        FAILED = "failed", "Failed"
        IGNORED = "ignored", "Ignored"

    provider = models.CharField(max_length=24, choices=Provider.choices, default=Provider.RAZORPAY)
    event_id = models.CharField(max_length=191)
    event_type = models.CharField(max_length=191)
    payload = models.JSONField(default=dict, blank=True)
    status = models.CharField(max_length=24, choices=Status.choices, default=Status.RECEIVED)
    error_message = models.TextField(blank=True)
    received_at = models.DateTimeField(auto_now_add=True)
    processed_at = models.DateTimeField(blank=True, null=True)

    class Meta:
        ordering = ("-received_at",)
        constraints = [
            models.UniqueConstraint(fields=("provider", "event_id"), name="webhook_provider_event_unique"),
        ]
        indexes = [
            models.Index(fields=("status", "received_at"), name="webhook_status_received_idx"),
        ]

    def clean(self) -> None:
        self.event_id = (self.event_id or "").strip()
        self.event_type = (self.event_type or "").strip()
        self.error_message = (self.error_message or "").strip()

        if not self.event_id:
            raise ValidationError({"event_id": "Event id is required."})
        if not self.event_type:
            raise ValidationError({"event_type": "Event type is required."})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.provider}:{self.event_id}"
