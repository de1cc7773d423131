# users/permissions.py
from rest_framework.exceptions import NotAuthenticated
from rest_framework.permissions import BasePermission, SAFE_METHODS


def is_admin(user):
    return bool(user and user.is_authenticated and getattr(user, "role", None) == "admin")


class IsAdminRole(BasePermission):
    """Admin role required; everyone else is treated as unauthenticated (401)."""

    def has_permission(self, request, view):
        if not is_admin(request.user):
            raise NotAuthenticated()
        return True


class IsAdminRoleOrReadOnly(IsAdminRole):
    def has_permission(self, request, view):
        if request.method in SAFE_METHODS:
            return True
        return super().has_permission(request, view)
