from __future__ import annotations

import logging

from rest_framework import generics, status
from rest_framework.exceptions import AuthenticationFailed
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from ..models import Account, Booking
from ..serializers import (
    AccountSerializer,
    AccountUpdateSerializer,
    AssignmentSerializer,
    BookingSerializer,
    LoginSerializer,
    PaymentRecordSerializer,
    PendingPaymentSerializer,
    PlanSerializer,
    RegisterSerializer,
)
from ..tools.auth import IsAdminAccount, issue_access_token
from ..tools.plans import find_usable_active_plan, refresh_plan_active_flag
from .helpers import get_target_account

logger = logging.getLogger(__name__)


class HealthView(APIView):
    permission_classes = [AllowAny]
    authentication_classes: list = []

    def get(self, request):
        return Response({"status": "ok"})


class RegisterView(APIView):
    permission_classes = [AllowAny]
    authentication_classes: list = []
    throttle_scope = "login"

    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        account = serializer.save()
        logger.info("Registered account %s with role %s.", account.pk, account.role)
        return Response(
            {
                "message": "User registered successfully",
                "user": AccountSerializer(account).data,
                "token": issue_access_token(account),
            },
            status=status.HTTP_201_CREATED,
        )


class LoginView(APIView):
    permission_classes = [AllowAny]
    authentication_classes: list = []
    throttle_scope = "login"

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        account = Account.objects.filter(email=serializer.validated_data["email"], is_active=True).first()
        if account is None or not account.check_password(serializer.validated_data["password"]):
            logger.warning("Failed login attempt for %s.", serializer.validated_data["email"])
            raise AuthenticationFailed("Invalid email or password.")

        return Response(
            {
                "message": "Login successful",
                "user": AccountSerializer(account).data,
                "token": issue_access_token(account),
            }
        )

    def get_authenticate_header(self, request):
        # Without a challenge header DRF turns AuthenticationFailed into 403.
        return "Bearer"


class AccountListView(generics.ListAPIView):
    permission_classes = [IsAuthenticated, IsAdminAccount]
    serializer_class = AccountSerializer

    def get_queryset(self):
        queryset = Account.objects.all()
        role = (self.request.query_params.get("role") or "").strip().lower()
        if role:
            queryset = queryset.filter(role=role)
        return queryset.order_by("id")


class AccountDetailView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, user_id: int):
        account = get_target_account(request, user_id)
        refresh_plan_active_flag(account)
        return Response(AccountSerializer(account).data)

    def put(self, request, user_id: int):
        account = get_target_account(request, user_id)
        serializer = AccountUpdateSerializer(
            account,
            data=request.data,
            partial=True,
            context={"request": request},
        )
        serializer.is_valid(raise_exception=True)
        account = serializer.save()
        logger.info("Updated account %s.", account.pk)
        return Response(AccountSerializer(account).data)


class AccountPurchasesView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, user_id: int):
        account = get_target_account(request, user_id)
        refresh_plan_active_flag(account)

        bookings = (
            account.bookings.exclude(status=Booking.Status.CANCELLED)
            .select_related("owner")
            .order_by("created_at", "id")
        )
        active_plan = find_usable_active_plan(account)
        payload = {
            "planActive": account.plan_active,
            "activePlan": PlanSerializer(active_plan).data if active_plan else None,
            "purchasedPlans": PlanSerializer(account.plans.order_by("id"), many=True).data,
            "bookings": BookingSerializer(bookings, many=True).data,
            "payments": PaymentRecordSerializer(account.payments.order_by("created_at", "id"), many=True).data,
            "pendingPayments": PendingPaymentSerializer(
                account.pending_payments.order_by("created_at", "id"),
                many=True,
            ).data,
        }
        if account.is_sprayer:
            payload["assignedServices"] = AssignmentSerializer(
                account.assignments.order_by("created_at", "id"),
                many=True,
            ).data
        return Response(payload)
