from __future__ import annotations

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from ..models import Account, Booking
from ..serializers import (
    AssignSlotSerializer,
    BookingActionSerializer,
    BookingCreateSerializer,
    BookingEditSerializer,
    BookingSerializer,
    FeedbackCreateSerializer,
    PlanSerializer,
    PurchasePlanSerializer,
    ServiceFeedbackSerializer,
)
from ..tools.auth import IsSprayerOrAdmin
from ..tools.bookings import (
    accept_service,
    assign_slot,
    cancel_booking,
    complete_service,
    create_booking,
    edit_booking,
    leave_feedback,
    list_open_bookings,
)
from ..tools.plans import PlanDescriptor, purchase_plan
from .helpers import get_owned_booking, get_target_account


class PurchasePlanView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, user_id: int):
        account = get_target_account(request, user_id)
        serializer = PurchasePlanSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        plan = purchase_plan(
            account,
            PlanDescriptor(
                plan_id=data.get("plan_id", ""),
                title=data["title"],
                price=data["price"],
                duration=data.get("duration"),
            ),
        )
        return Response(
            {"message": "Plan purchased successfully", "plan": PlanSerializer(plan).data},
            status=status.HTTP_201_CREATED,
        )


class BookServiceView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, user_id: int):
        account = get_target_account(request, user_id)
        serializer = BookingCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        booking = create_booking(account, **serializer.validated_data)
        return Response(
            {"message": "Service booked successfully", "service": BookingSerializer(booking).data},
            status=status.HTTP_201_CREATED,
        )


class EditBookingView(APIView):
    permission_classes = [IsAuthenticated]

    def put(self, request, user_id: int, booking_id: int):
        account = get_target_account(request, user_id)
        booking = get_owned_booking(account, booking_id)
        serializer = BookingEditSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        booking = edit_booking(booking, serializer.validated_data)
        return Response({"message": "Booking updated successfully", "service": BookingSerializer(booking).data})


class CancelBookingView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, user_id: int, booking_id: int):
        account = get_target_account(request, user_id)
        booking = cancel_booking(get_owned_booking(account, booking_id))
        return Response({"message": "Booking cancelled successfully", "service": BookingSerializer(booking).data})


class SprayerServiceListView(APIView):
    permission_classes = [IsAuthenticated, IsSprayerOrAdmin]

    def get(self, request):
        bookings = list_open_bookings(request.query_params.get("status") or None)
        return Response({"services": BookingSerializer(bookings, many=True).data})


def _resolve_sprayer(request, sprayer_id: int | None) -> Account:
    actor = request.user
    if sprayer_id is None or sprayer_id == actor.pk:
        return actor
    if not actor.is_admin:
        raise PermissionDenied("Sprayers can only assign bookings to themselves.")
    return get_object_or_404(Account, pk=sprayer_id, is_active=True)


class AssignSlotView(APIView):
    permission_classes = [IsAuthenticated, IsSprayerOrAdmin]

    def post(self, request):
        serializer = AssignSlotSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        booking = get_object_or_404(Booking, pk=data["booking_id"])
        sprayer = _resolve_sprayer(request, data.get("sprayer_id"))
        booking = assign_slot(booking, data["schedule_date"], sprayer)
        return Response({"message": "Slot assigned successfully", "service": BookingSerializer(booking).data})


class AcceptServiceView(APIView):
    permission_classes = [IsAuthenticated, IsSprayerOrAdmin]

    def post(self, request):
        serializer = BookingActionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        booking = get_object_or_404(Booking, pk=serializer.validated_data["booking_id"])
        booking = accept_service(booking, request.user)
        return Response({"message": "Service accepted", "service": BookingSerializer(booking).data})


class CompleteServiceView(APIView):
    permission_classes = [IsAuthenticated, IsSprayerOrAdmin]

    def post(self, request):
        serializer = BookingActionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        booking = get_object_or_404(Booking, pk=serializer.validated_data["booking_id"])
        booking = complete_service(booking, request.user)
        return Response({"message": "Service marked as completed", "service": BookingSerializer(booking).data})


class ServiceFeedbackView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, booking_id: int):
        booking = get_object_or_404(Booking, pk=booking_id)
        serializer = FeedbackCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        feedback = leave_feedback(
            booking,
            request.user,
            serializer.validated_data["rating"],
            serializer.validated_data.get("comment", ""),
        )
        return Response(
            {"message": "Feedback submitted", "feedback": ServiceFeedbackSerializer(feedback).data},
            status=status.HTTP_201_CREATED,
        )
