from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

OPEN_BOOKING_STATUSES = ("Pending", "In Progress")
DEFAULT_SERVICE_TITLE = "Fertilizer Spray"
DEFAULT_ORCHID = "Orchid A"


class Booking(models.Model):
    class Status(models.TextChoices):
        PENDING = "Pending", "Pending"
        IN_PROGRESS = "In Progress", "In progress"
        COMPLETED = "Completed", "Completed"
        CANCELLED = "Cancelled", "Cancelled"

    owner = models.ForeignKey(
        "Account",
        on_delete=models.CASCADE,
        related_name="bookings",
    )
    service_title = models.CharField(max_length=180, blank=True, default=DEFAULT_SERVICE_TITLE)
    orchid = models.CharField(max_length=120, blank=True, default=DEFAULT_ORCHID)
    field = models.CharField(max_length=180)
    address = models.CharField(max_length=255)
    pincode = models.CharField(max_length=12)
    sprays_count = models.PositiveSmallIntegerField(default=1)
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.PENDING)
    schedule_date = models.DateTimeField(blank=True, null=True)
    assigned_sprayer = models.ForeignKey(
        "Account",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="assigned_bookings",
    )
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    completed_at = models.DateTimeField(blank=True, null=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("created_at", "id")
        indexes = [
            models.Index(fields=("owner", "status"), name="booking_owner_status_idx"),
            models.Index(fields=("status", "schedule_date"), name="booking_status_schedule_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=("owner",),
                condition=Q(status__in=OPEN_BOOKING_STATUSES),
                name="booking_single_open_per_owner",
            ),
            models.UniqueConstraint(
                fields=("schedule_date",),
                condition=Q(status__in=OPEN_BOOKING_STATUSES, schedule_date__isnull=False),
                name="booking_open_slot_unique",
            ),
            models.CheckConstraint(
                condition=Q(sprays_count__gte=1),
                name="booking_sprays_count_positive",
            ),
        ]

    def clean(self) -> None:
        self.service_title = (self.service_title or "").strip() or DEFAULT_SERVICE_TITLE
        self.orchid = (self.orchid or "").strip() or DEFAULT_ORCHID
        self.field = (self.field or "").strip()
        self.address = (self.address or "").strip()
        self.pincode = (self.pincode or "").strip()
        self.notes = (self.notes or "").strip()

        if not self.field:
            raise ValidationError({"field": "Field is required."})
        if not self.address:
            raise ValidationError({"address": "Address is required."})
        if not self.pincode:
            raise ValidationError({"pincode": "Pincode is required."})
        if self.completed_at and self.status != self.Status.COMPLETED:
            raise ValidationError({"completed_at": "completed_at can only be set when status is completed."})

    def save(self, *args, **kwargs):
        # Open-booking and slot uniqueness are enforced by the database; callers map IntegrityError.
        self.full_clean(validate_constraints=False)
        return super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"Booking({self.owner_id}, {self.service_title}, {self.status})"


class Assignment(models.Model):
    """Sprayer-side copy of a claimed booking; updated after the booking itself."""

    class Status(models.TextChoices):
        IN_PROGRESS = "In Progress", "In progress"
        COMPLETED = "Completed", "Completed"

    sprayer = models.ForeignKey(
        "Account",
        on_delete=models.CASCADE,
        related_name="assignments",
    )
    booking = models.ForeignKey(
        "Booking",
        on_delete=models.CASCADE,
        related_name="assignments",
    )
    farmer = models.ForeignKey(
        "Account",
        on_delete=models.CASCADE,
        related_name="farmer_assignments",
    )
    schedule_date = models.DateTimeField()
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.IN_PROGRESS)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("created_at", "id")
        constraints = [
            models.UniqueConstraint(fields=("sprayer", "booking"), name="assignment_sprayer_booking_unique"),
        ]

    def __str__(self) -> str:
        return f"Assignment({self.sprayer_id}, booking={self.booking_id}, {self.status})"


class ServiceFeedback(models.Model):
    booking = models.ForeignKey(
        "Booking",
        on_delete=models.CASCADE,
        related_name="feedback",
    )
    author = models.ForeignKey(
        "Account",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="feedback_given",
    )
    rating = models.PositiveSmallIntegerField()
    comment = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("created_at", "id")
        constraints = [
            models.CheckConstraint(
                condition=Q(rating__gte=1, rating__lte=5),
                name="feedback_rating_range",
            ),
            models.UniqueConstraint(fields=("booking", "author"), name="feedback_booking_author_unique"),
        ]

    def clean(self) -> None:
        self.comment = (self.comment or "").strip()

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"Feedback({self.booking_id}, {self.rating})"
