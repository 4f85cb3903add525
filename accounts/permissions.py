"""
Custom permissions for role-based access
"""
from rest_framework import permissions

from accounts.models import User


class _RolePermission(permissions.BasePermission):
    roles = ()

    def has_permission(self, request, view):
        return bool(
            request.user and
            request.user.is_authenticated and
            request.user.role in self.roles
        )


class IsAdmin(_RolePermission):
    """Permission check for admin role"""
    roles = (User.ROLE_ADMIN,)


class IsAgentOrAdmin(_RolePermission):
    """Schemes, customers, enrollments, auctions and passbook entries are managed by agents and admins."""
    roles = (User.ROLE_ADMIN, User.ROLE_AGENT)


class IsCollectorOrAdmin(_RolePermission):
    """Collections are recorded by collectors and admins."""
    roles = (User.ROLE_ADMIN, User.ROLE_COLLECTOR)


class ReadOnly(permissions.BasePermission):
    """Safe methods only; combine as `ReadOnly | IsAgentOrAdmin` for role-gated writes."""

    def has_permission(self, request, view):
        return request.method in permissions.SAFE_METHODS
