from __future__ import annotations

from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import BasePermission


class IsSprayerOrAdmin(BasePermission):
    message = "Only sprayers or admins can access this resource."

    def has_permission(self, request, view) -> bool:
        account = request.user
        return bool(
            account
            and getattr(account, "is_authenticated", False)
            and (getattr(account, "is_sprayer", False) or getattr(account, "is_admin", False))
        )


class IsAdminAccount(BasePermission):
    message = "Only admins can access this resource."

    def has_permission(self, request, view) -> bool:
        return bool(getattr(request.user, "is_admin", False))


def ensure_can_act_for(request, account) -> None:
    """Farmers and sprayers act on their own account; admins act on any."""
    actor = request.user
    if getattr(actor, "is_admin", False) or getattr(actor, "pk", None) == account.pk:
        return
    raise PermissionDenied("You can only act on your own account.")
