"""Authorization verifier: permission OR ownership."""

from typing import Any

from quizhub.core.app_exceptions import AuthorizationFailedError
from quizhub.core.permissions import (
    DEFAULT_PERMISSION_HIERARCHY,
    Permission,
    PermissionHierarchy,
    expand_permissions,
)
from quizhub.models.user import User


def _owner_id_of(target: Any) -> str | None:
    # A user record is owned by that user
    if isinstance(target, User):
        return target.id
    return getattr(target, "owner_id", None)


class AuthorizationVerifier:
    """Decides whether a user may perform an action on an optional target."""

    def __init__(self, hierarchy: PermissionHierarchy | None = None):
        self.hierarchy = hierarchy if hierarchy is not None else DEFAULT_PERMISSION_HIERARCHY

    def resolve_permissions(self, user: User) -> set[str]:
        return expand_permissions(list(user.permissions or []), self.hierarchy)

    def has_permission(self, user: User, permission: Permission | str) -> bool:
        resolved = self.resolve_permissions(user)
        return Permission.ALL.value in resolved or _value(permission) in resolved

    def is_authorized(self, user: User | None, permission: Permission | str, target: Any = None) -> bool:
        """Non-raising check, used to filter lists and hide fields."""
        if user is None:
            return False
        if self.has_permission(user, permission):
            return True
        return target is not None and _owner_id_of(target) == user.id

    def verify_authorization(self, user: User, permission: Permission | str, target: Any = None) -> None:
        """Allow if the user holds ``permission`` or owns ``target``.

        Raises:
            AuthorizationFailedError: If neither holds.
        """
        if not self.is_authorized(user, permission, target):
            raise AuthorizationFailedError(_value(permission))


def _value(permission: Permission | str) -> str:
    return permission.value if isinstance(permission, Permission) else permission
