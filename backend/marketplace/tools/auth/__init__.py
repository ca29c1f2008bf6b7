from .authentication import AccountTokenAuthentication
from .permissions import IsAdminAccount, IsSprayerOrAdmin, ensure_can_act_for
from .tokens import TokenConfigurationError, decode_access_token, issue_access_token

__all__ = [
    "AccountTokenAuthentication",
    "IsAdminAccount",
    "IsSprayerOrAdmin",
    "TokenConfigurationError",
    "decode_access_token",
    "ensure_can_act_for",
    "issue_access_token",
]
