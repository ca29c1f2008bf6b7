from __future__ import annotations

from rest_framework import serializers

from ..models import Assignment, Booking, ServiceFeedback


class BookingSerializer(serializers.ModelSerializer):
    userId = serializers.IntegerField(source="owner_id", read_only=True)
    ownerName = serializers.CharField(source="owner.name", read_only=True)
    ownerPhone = serializers.CharField(source="owner.phone", read_only=True)
    serviceTitle = serializers.CharField(source="service_title", read_only=True)
    spraysCount = serializers.IntegerField(source="sprays_count", read_only=True)
    scheduleDate = serializers.DateTimeField(source="schedule_date", read_only=True)
    assignedSprayer = serializers.IntegerField(source="assigned_sprayer_id", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    completedAt = serializers.DateTimeField(source="completed_at", read_only=True)

    class Meta:
        model = Booking
        fields = (
            "id",
            "userId",
            "ownerName",
            "ownerPhone",
            "serviceTitle",
            "orchid",
            "field",
            "address",
            "pincode",
            "spraysCount",
            "status",
            "scheduleDate",
            "assignedSprayer",
            "notes",
            "createdAt",
            "completedAt",
        )
        read_only_fields = fields


class BookingCreateSerializer(serializers.Serializer):
    serviceTitle = serializers.CharField(source="service_title", max_length=180, required=False, allow_blank=True)
    orchid = serializers.CharField(max_length=120, required=False, allow_blank=True)
    field = serializers.CharField(max_length=180)
    address = serializers.CharField(max_length=255)
    pincode = serializers.CharField(max_length=12)
    spraysCount = serializers.IntegerField(source="sprays_count", min_value=1, default=1)
    notes = serializers.CharField(required=False, allow_blank=True)


class BookingEditSerializer(serializers.Serializer):
    serviceTitle = serializers.CharField(source="service_title", max_length=180, required=False)
    orchid = serializers.CharField(max_length=120, required=False)
    field = serializers.CharField(max_length=180, required=False)
    address = serializers.CharField(max_length=255, required=False)
    pincode = serializers.CharField(max_length=12, required=False)
    spraysCount = serializers.IntegerField(source="sprays_count", min_value=1, required=False)
    notes = serializers.CharField(required=False, allow_blank=True)


class BookingActionSerializer(serializers.Serializer):
    bookingId = serializers.IntegerField(source="booking_id", min_value=1)


class AssignSlotSerializer(BookingActionSerializer):
    scheduleDate = serializers.DateTimeField(source="schedule_date")
    sprayerId = serializers.IntegerField(source="sprayer_id", min_value=1, required=False)


class AssignmentSerializer(serializers.ModelSerializer):
    bookingId = serializers.IntegerField(source="booking_id", read_only=True)
    farmerId = serializers.IntegerField(source="farmer_id", read_only=True)
    scheduleDate = serializers.DateTimeField(source="schedule_date", read_only=True)

    class Meta:
        model = Assignment
        fields = ("id", "bookingId", "farmerId", "scheduleDate", "status")
        read_only_fields = fields


class FeedbackCreateSerializer(serializers.Serializer):
    rating = serializers.IntegerField(min_value=1, max_value=5)
    comment = serializers.CharField(required=False, allow_blank=True, max_length=2000)


class ServiceFeedbackSerializer(serializers.ModelSerializer):
    bookingId = serializers.IntegerField(source="booking_id", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = ServiceFeedback
        fields = ("id", "bookingId", "rating", "comment", "createdAt")
        read_only_fields = fields
