"""
Role and tenant based access control.

Roles form a strict hierarchy: a super administrator passes every role
check, an administrator passes admin and captain checks.  The tenant an
API call operates on is resolved by :func:`tenant_id`.
"""
from __future__ import annotations

from typing import Optional

from rest_framework.exceptions import PermissionDenied, ValidationError
from rest_framework.permissions import BasePermission

SUPER_ADMIN = 'SUPER_ADMIN'
ADMIN = 'ADMIN'
CAPTAIN = 'CAPTAIN'

ADMIN_ROLES = {SUPER_ADMIN, ADMIN}
ALL_ROLES = {SUPER_ADMIN, ADMIN, CAPTAIN}

ORGANIZATION_HEADER = 'HTTP_X_ORGANIZATION_ID'


def _role(request) -> Optional[str]:
    user = getattr(request, 'user', None)
    if not (user and user.is_authenticated):
        return None
    return getattr(user, 'role', None)


def tenant_id(request) -> Optional[int]:
    """Return the organization id the request is scoped to.

    Super administrators act platform-wide unless they pick an
    organization with the ``X-Organization-Id`` header.  Everybody else
    is pinned to their own organization.
    """
    user = request.user
    if user.role == SUPER_ADMIN:
        raw = (request.META.get(ORGANIZATION_HEADER) or '').strip()
        if not raw:
            return None
        try:
            return int(raw)
        except ValueError:
            raise ValidationError({'X-Organization-Id': ['Organization id must be an integer']})
    if not user.organization_id:
        raise PermissionDenied('User not assigned to any organization')
    return user.organization_id


def require_tenant(request) -> int:
    """Like :func:`tenant_id` but an organization context is mandatory."""
    org_id = tenant_id(request)
    if org_id is None:
        raise ValidationError({'X-Organization-Id': ['Organization context required']})
    return org_id


class IsSuperAdmin(BasePermission):
    """Only platform super administrators."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return _role(request) == SUPER_ADMIN


class IsAdmin(BasePermission):
    """Organization administrators or super administrators."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return _role(request) in ADMIN_ROLES


class IsCaptainOrAdmin(BasePermission):
    """Any of the three roles."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return _role(request) in ALL_ROLES


class TenantScoped(BasePermission):
    """Reject non-super users that belong to no organization."""
    message = 'User not assigned to any organization'

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = getattr(request, 'user', None)
        if not (user and user.is_authenticated):
            return False
        return user.role == SUPER_ADMIN or bool(user.organization_id)
