"""
Role based access control.

Every API view requires an authenticated user (:class:`IsAuthenticatedUser`
is the default permission); handlers that are limited to some roles add
``allow_roles(...)``.
"""
from __future__ import annotations

from typing import Iterable

from rest_framework.permissions import BasePermission

from .exceptions import InsufficientPermissions
from .models import Role

ROLES = frozenset(Role.values)


def role_allows(role, allowed: Iterable[str]) -> bool:
    """Whether ``role`` is in ``allowed``; unknown roles are never allowed."""
    return role in ROLES and role in set(allowed)


class IsAuthenticatedUser(BasePermission):
    """Any signed-in staff member."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = getattr(request, "user", None)
        return bool(user and user.is_authenticated)


def allow_roles(*roles: str, methods: Iterable[str] | None = None):
    """Build a permission class admitting only ``roles``.

    With ``methods`` the restriction applies to those HTTP methods only;
    other methods just need a signed-in user.

    A signed-in user with another role gets a 403 whose ``errors`` name
    both the caller's role and the allow-list.
    """
    allowed = [str(r) for r in roles]
    limited = {m.upper() for m in methods} if methods else None

    class RolePermission(IsAuthenticatedUser):
        def has_permission(self, request, view) -> bool:  # type: ignore[override]
            if not super().has_permission(request, view):
                return False
            if limited is not None and request.method not in limited:
                return True
            role = getattr(request.user, "role", None)
            if not role_allows(role, allowed):
                raise InsufficientPermissions(allowed, role)
            return True

    RolePermission.__name__ = f"Allow{''.join(r.title() for r in allowed)}"
    return RolePermission


IsAdmin = allow_roles(Role.ADMIN)
IsAdminOrDoctor = allow_roles(Role.ADMIN, Role.DOCTOR)
IsAdminOrReceptionist = allow_roles(Role.ADMIN, Role.RECEPTIONIST)
