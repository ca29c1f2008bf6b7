from __future__ import annotations

from datetime import timedelta
from typing import Any

from django.conf import settings
from django.utils import timezone
from rest_framework.exceptions import AuthenticationFailed

TOKEN_TYPE = "access"


class TokenConfigurationError(RuntimeError):
    pass


def _get_jwt_library():
    try:
        import jwt

        return jwt
    except Exception as exc:
        raise TokenConfigurationError("PyJWT is required for access token signing.") from exc


def _signing_key() -> str:
    key = str(getattr(settings, "AUTH_TOKEN_SIGNING_KEY", "") or "")
    if not key:
        raise TokenConfigurationError("AUTH_TOKEN_SIGNING_KEY is not configured.")
    return key


def _algorithm() -> str:
    return str(getattr(settings, "AUTH_TOKEN_ALGORITHM", "HS256") or "HS256")


def issue_access_token(account) -> str:
    jwt_lib = _get_jwt_library()
    now = timezone.now()
    ttl_minutes = int(getattr(settings, "AUTH_TOKEN_TTL_MINUTES", 60 * 24))
    payload = {
        "sub": str(account.pk),
        "role": account.role,
        "type": TOKEN_TYPE,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=ttl_minutes)).timestamp()),
    }
    return jwt_lib.encode(payload, _signing_key(), algorithm=_algorithm())


def decode_access_token(token: str) -> dict[str, Any]:
    jwt_lib = _get_jwt_library()
    try:
        payload = jwt_lib.decode(
            token,
            _signing_key(),
            algorithms=[_algorithm()],
            options={"require": ["sub", "exp"]},
        )
    except jwt_lib.ExpiredSignatureError as exc:
        raise AuthenticationFailed("Access token has expired.") from exc
    except jwt_lib.InvalidTokenError as exc:
        raise AuthenticationFailed("Invalid access token.") from exc

    if payload.get("type") != TOKEN_TYPE:
        raise AuthenticationFailed("Token is not an access token.")
    if not str(payload.get("sub") or "").isdigit():
        raise AuthenticationFailed("Token is missing a valid sub claim.")
    return payload
