from __future__ import annotations

from django.shortcuts import get_object_or_404

from ..models import Account, Booking
from ..tools.auth import ensure_can_act_for


def get_target_account(request, user_id: int) -> Account:
    """Resolve the account addressed by the URL and check the caller may act on it."""
    account = get_object_or_404(Account, pk=user_id)
    ensure_can_act_for(request, account)
    return account


def get_owned_booking(account: Account, booking_id: int) -> Booking:
    return get_object_or_404(Booking.objects.select_related("owner"), pk=booking_id, owner=account)
