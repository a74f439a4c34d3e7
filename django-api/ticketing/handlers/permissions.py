from rest_framework.permissions import BasePermission

from ticketing.domain import Identity, Role
from ticketing.domain.value_objects import MANAGER_ROLES, VALIDATOR_ROLES


class HasRole(BasePermission):
    roles: frozenset[Role] = frozenset()
    message = "Insufficient permissions"

    def has_permission(self, request, view) -> bool:
        user = request.user
        return isinstance(user, Identity) and user.has_any_role(self.roles)


class IsAdmin(HasRole):
    roles = frozenset({Role.ADMIN})
    message = "Admin access required"


class IsManager(HasRole):
    """Admins and gestores."""

    roles = MANAGER_ROLES
    message = "Admin or gestor access required"


class IsValidator(HasRole):
    """Staff allowed to scan tickets at the door."""

    roles = VALIDATOR_ROLES
    message = "Only admin, gestor and comprobador can validate tickets"
