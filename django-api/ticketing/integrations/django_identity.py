"""Identity provider backed by django.contrib.auth and DRF tokens.

Roles are auth groups named after ``Role`` values; superusers are admins.
"""

import logging

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from rest_framework.authtoken.models import Token

from ticketing.domain import Identity, Role
from ticketing.domain.errors import AccountCreationFailedError
from ticketing.domain.value_objects import normalize_email
from ticketing.integrations.interfaces import IdentityProvider

logger = logging.getLogger(__name__)

_ROLE_NAMES = {role.value: role for role in Role}


def roles_for(user) -> frozenset[Role]:
    roles = {
        _ROLE_NAMES[name]
        for name in user.groups.values_list("name", flat=True)
        if name in _ROLE_NAMES
    }
    if user.is_superuser:
        roles.add(Role.ADMIN)
    return frozenset(roles or {Role.USUARIO})


def identity_for(user) -> Identity:
    return Identity(uid=str(user.pk), email=normalize_email(user.email), roles=roles_for(user))


class DjangoIdentityProvider(IdentityProvider):
    def __init__(self) -> None:
        self._users = get_user_model()

    def verify_token(self, token: str) -> Identity | None:
        found = Token.objects.select_related("user").filter(key=token).first()
        if found is None or not found.user.is_active:
            return None
        return identity_for(found.user)

    def get_user_id_by_email(self, email: str) -> str | None:
        pk = (
            self._users.objects.filter(email__iexact=normalize_email(email))
            .order_by("pk")
            .values_list("pk", flat=True)
            .first()
        )
        return str(pk) if pk is not None else None

    def user_exists(self, uid: str) -> bool:
        try:
            return self._users.objects.filter(pk=uid).exists()
        except (TypeError, ValueError):
            return False

    def create_user(self, email: str, password: str, display_name: str = "") -> str:
        email = normalize_email(email)
        if self.get_user_id_by_email(email) is not None:
            raise AccountCreationFailedError(email, "An account with this email already exists")
        try:
            with transaction.atomic():
                user = self._users.objects.create_user(
                    username=email,
                    email=email,
                    password=password,
                    first_name=display_name[:150],
                )
        except IntegrityError as exc:
            raise AccountCreationFailedError(email, str(exc)) from exc
        logger.info("Created account %s for %s", user.pk, email)
        return str(user.pk)

    def create_custom_token(self, uid: str) -> str:
        token, _ = Token.objects.get_or_create(user_id=uid)
        return token.key
