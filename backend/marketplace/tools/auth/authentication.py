from __future__ import annotations

from rest_framework.authentication import BaseAuthentication, get_authorization_header
from rest_framework.exceptions import AuthenticationFailed

from ...models import Account
from .tokens import TokenConfigurationError, decode_access_token


class AccountTokenAuthentication(BaseAuthentication):
    keyword = "Bearer"

    def authenticate(self, request):
        auth = get_authorization_header(request).split()
        if not auth or auth[0].decode("utf-8").lower() != self.keyword.lower():
            return None
        if len(auth) == 1:
            raise AuthenticationFailed("Invalid Authorization header: missing token.")
        if len(auth) > 2:
            raise AuthenticationFailed("Invalid Authorization header: token has spaces.")

        try:
            claims = decode_access_token(auth[1].decode("utf-8"))
        except TokenConfigurationError as exc:
            raise AuthenticationFailed(str(exc)) from exc

        account = Account.objects.filter(pk=int(claims["sub"]), is_active=True).first()
        if account is None:
            raise AuthenticationFailed("Account not found or inactive.")
        return account, claims

    def authenticate_header(self, request):
        return self.keyword
