"""
User management inside an organization.

Administrators manage the users of their own organization; super
administrators act on the organization selected with the
``X-Organization-Id`` header or, without it, on every user.  Users are
deactivated rather than deleted so that their reports and audit trail
keep a valid author.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from django.db import transaction
from django.db.models import Count, Max, Q
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from reporting.exceptions import Conflict
from reporting.models import Organization, User, Vessel
from reporting.permissions import require_tenant, tenant_id
from reporting.serializers.user import SELF_SERVICE_FIELDS, user_dict
from reporting.services import email as email_service
from reporting.services.audit import log_action

logger = logging.getLogger(__name__)


def scoped_users(request):
    qs = User.objects.select_related('organization', 'assigned_vessel')
    org_id = tenant_id(request)
    if org_id is not None:
        qs = qs.filter(organization_id=org_id)
    return qs


def get_scoped_user(request, pk: int) -> User:
    user = scoped_users(request).filter(pk=pk).first()
    if user is None:
        raise NotFound('User not found')
    return user


def _ensure_email_free(email: str, exclude_pk: Optional[int] = None) -> None:
    qs = User.objects.filter(email__iexact=email)
    if exclude_pk is not None:
        qs = qs.exclude(pk=exclude_pk)
    if qs.exists():
        raise Conflict('User with this email already exists')


def _check_role(request, role: str) -> None:
    if role == User.ROLE_SUPER_ADMIN and request.user.role != User.ROLE_SUPER_ADMIN:
        raise PermissionDenied('Only a super administrator can grant the SUPER_ADMIN role')


def _vessel_for_assignment(vessel_id: int, organization_id: Optional[int], user: Optional[User] = None) -> Vessel:
    vessel = Vessel.objects.filter(pk=vessel_id).first()
    if vessel is None:
        raise NotFound('Vessel not found')
    if vessel.organization_id != organization_id:
        raise PermissionDenied('Vessel belongs to a different organization')
    holder = User.objects.filter(assigned_vessel=vessel).exclude(pk=getattr(user, 'pk', None)).first()
    if holder is not None:
        raise Conflict('Vessel already has a captain assigned')
    return vessel


def _target_organization(request, role: str, organization_id: Optional[int]) -> Optional[int]:
    if role == User.ROLE_SUPER_ADMIN:
        return None
    if organization_id and request.user.role == User.ROLE_SUPER_ADMIN:
        if not Organization.objects.filter(pk=organization_id).exists():
            raise NotFound('Organization not found')
        return organization_id
    return require_tenant(request)


def create_user(request, data: Dict[str, Any], organization_id: Optional[int] = None) -> User:
    """Create a user in the request's organization.

    ``organization_id`` is only honoured for super administrators, who
    may place a user in any organization without switching context.
    """
    role = data.get('role') or User.ROLE_CAPTAIN
    _check_role(request, role)
    organization_id = _target_organization(request, role, organization_id)
    _ensure_email_free(data['email'])

    with transaction.atomic():
        vessel = None
        if data.get('assignedVesselId'):
            if role != User.ROLE_CAPTAIN:
                raise ValidationError({'assignedVesselId': ['Only captains can be assigned to a vessel']})
            vessel = _vessel_for_assignment(data['assignedVesselId'], organization_id)
        user = User.objects.create_user(
            email=data['email'],
            password=data['password'],
            name=data['name'],
            role=role,
            organization_id=organization_id,
            assigned_vessel=vessel,
            is_active=data.get('isActive', True),
        )
        log_action(request=request, action='CREATE', entity_type='User', entity_id=user.id,
                   organization_id=organization_id, after=user_dict(user))

    org = Organization.objects.filter(pk=organization_id).first() if organization_id else None
    email_service.send_onboarding_email(
        user_name=user.name,
        user_email=user.email,
        organization_name=org.name if org else 'Ship Reporting',
        role=user.role,
        temporary_password=data['password'],
    )
    return user


def list_users(request, *, role: Optional[str] = None, search: str = '', include_inactive: bool = False):
    qs = scoped_users(request)
    if not include_inactive:
        qs = qs.filter(is_active=True)
    if role:
        qs = qs.filter(role=role)
    if search:
        qs = qs.filter(Q(name__icontains=search) | Q(email__icontains=search))
    return qs.order_by('-created_at', '-id')


def update_user(request, pk: int, data: Dict[str, Any]) -> User:
    actor = request.user
    is_self = actor.pk == pk
    is_admin = actor.role in (User.ROLE_ADMIN, User.ROLE_SUPER_ADMIN)

    if not is_admin:
        if not is_self:
            raise PermissionDenied('You do not have permission to perform this action.')
        forbidden = set(data) - SELF_SERVICE_FIELDS
        if forbidden:
            raise PermissionDenied(f"You cannot change: {', '.join(sorted(forbidden))}")

    with transaction.atomic():
        user = actor if is_self and not is_admin else get_scoped_user(request, pk)
        user = User.objects.select_for_update().get(pk=user.pk)
        before = user_dict(user)

        if 'email' in data and data['email'] != user.email:
            _ensure_email_free(data['email'], exclude_pk=user.pk)
            user.email = data['email']
        if 'name' in data:
            user.name = data['name']
        if 'signatureImage' in data:
            user.signature_image = data['signatureImage'] or None
        if data.get('password'):
            user.set_password(data['password'])
        if 'role' in data and data['role'] != user.role:
            _check_role(request, data['role'])
            if is_self:
                raise ValidationError({'role': ['You cannot change your own role']})
            user.role = data['role']
            if user.role != User.ROLE_CAPTAIN:
                user.assigned_vessel = None
        if 'isActive' in data:
            if is_self and not data['isActive']:
                raise ValidationError({'isActive': ['You cannot deactivate your own account']})
            user.is_active = data['isActive']
        if 'assignedVesselId' in data:
            vessel_id = data['assignedVesselId']
            if vessel_id is None:
                user.assigned_vessel = None
            else:
                if user.role != User.ROLE_CAPTAIN:
                    raise ValidationError({'assignedVesselId': ['Only captains can be assigned to a vessel']})
                user.assigned_vessel = _vessel_for_assignment(vessel_id, user.organization_id, user)

        user.save()
        after = user_dict(user)
        log_action(request=request, action='UPDATE', entity_type='User', entity_id=user.id,
                   organization_id=user.organization_id, before=before,
                   after=dict(after, passwordChanged=bool(data.get('password'))))
    return user


def deactivate_user(request, pk: int) -> User:
    if request.user.pk == pk:
        raise ValidationError({'id': ['You cannot deactivate your own account']})
    with transaction.atomic():
        user = get_scoped_user(request, pk)
        before = user_dict(user)
        user.is_active = False
        user.save(update_fields=['is_active', 'updated_at'])
        log_action(request=request, action='DELETE', entity_type='User', entity_id=user.id,
                   organization_id=user.organization_id, before=before, after=user_dict(user))
    return user


def hard_delete_user(request, pk: int) -> None:
    if request.user.pk == pk:
        raise ValidationError({'id': ['You cannot delete your own account']})
    with transaction.atomic():
        user = get_scoped_user(request, pk)
        if user.reports.exists():
            raise Conflict('User has authored inspection reports; deactivate the account instead')
        before = user_dict(user)
        log_action(request=request, action='HARD_DELETE', entity_type='User', entity_id=user.id,
                   organization_id=user.organization_id, before=before)
        user.delete()


def captain_activity(request):
    """Per captain: assigned vessel, number of reports and last activity."""
    qs = (
        scoped_users(request)
        .filter(role=User.ROLE_CAPTAIN)
        .annotate(report_count=Count('reports'), last_report_at=Max('reports__created_at'))
        .order_by('name')
    )
    rows = []
    for captain in qs:
        vessel = captain.assigned_vessel
        rows.append({
            'id': captain.id,
            'name': captain.name,
            'email': captain.email,
            'isActive': captain.is_active,
            'vessel': {'id': vessel.id, 'name': vessel.name} if vessel else None,
            'reportCount': captain.report_count,
            'lastReportDate': captain.last_report_at.isoformat() if captain.last_report_at else None,
            'lastLogin': captain.last_login.isoformat() if captain.last_login else None,
        })
    return rows


def profile(user: User) -> Dict[str, Any]:
    return user_dict(user, include_organization=True, include_vessel=True)
