"""Bearer-token authentication through the identity provider."""

from rest_framework import exceptions
from rest_framework.authentication import BaseAuthentication, get_authorization_header

from ticketing.handlers import dependencies

KEYWORD = b"bearer"


class BearerTokenAuthentication(BaseAuthentication):
    """Authenticates ``Authorization: Bearer <token>``.

    ``request.user`` becomes a domain ``Identity`` carrying uid, e-mail and roles.
    """

    def authenticate(self, request):
        auth = get_authorization_header(request).split()
        if not auth or auth[0].lower() != KEYWORD:
            return None
        if len(auth) != 2:
            raise exceptions.AuthenticationFailed("Invalid token header")

        try:
            token = auth[1].decode()
        except UnicodeError:
            raise exceptions.AuthenticationFailed("Invalid token header") from None

        identity = dependencies.identity_provider().verify_token(token)
        if identity is None:
            raise exceptions.AuthenticationFailed("Invalid or expired token")
        return identity, token

    def authenticate_header(self, request) -> str:
        return "Bearer"
