"""
Organization (tenant) management and platform analytics.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from django.db import transaction
from django.db.models import Count
from rest_framework.exceptions import NotFound

from reporting.exceptions import Conflict
from reporting.models import Organization, User
from reporting.permissions import tenant_id
from reporting.serializers.organization import FIELD_MAP, organization_dict
from reporting.serializers.user import user_dict
from reporting.serializers.vessel import vessel_dict
from reporting.services import email as email_service
from reporting.services.audit import log_action

logger = logging.getLogger(__name__)


def _with_counts(qs):
    return qs.annotate(
        vessel_count=Count('vessels', distinct=True),
        user_count=Count('users', distinct=True),
        report_count=Count('reports', distinct=True),
    )


def _counts(org) -> Dict[str, int]:
    return {'vessels': org.vessel_count, 'users': org.user_count, 'inspectionReports': org.report_count}


def default_admin_email(name: str) -> str:
    return f"admin@{''.join(name.lower().split())}.com"


def create_organization(request, data: Dict[str, Any]):
    """Create an organization together with its first administrator.

    The administrator logs in with the organization email (or a derived
    ``admin@<name>.com``) and ``adminPassword``.
    """
    admin_email = (data.get('email') or default_admin_email(data['name'])).lower()
    admin_name = data.get('owner') or f"{data['name']} Admin"
    if User.objects.filter(email__iexact=admin_email).exists():
        raise Conflict('User with this email already exists')

    with transaction.atomic():
        org = Organization.objects.create(**{
            attr: data.get(key) for key, attr in FIELD_MAP.items() if key in data
        })
        admin = User.objects.create_user(
            email=admin_email,
            password=data['adminPassword'],
            name=admin_name,
            role=User.ROLE_ADMIN,
            organization=org,
        )
        log_action(request=request, action='CREATE', entity_type='Organization', entity_id=org.id,
                   organization_id=org.id, after=organization_dict(org))

    sent = email_service.send_welcome_email(
        organization_name=org.name,
        admin_name=admin.name,
        admin_email=admin.email,
        temporary_password=data['adminPassword'],
    )
    if not sent:
        logger.warning('Welcome email for organization %s was not delivered', org.id)
    return org, admin


def list_organizations():
    rows = []
    for org in _with_counts(Organization.objects.all()).order_by('-created_at'):
        item = organization_dict(org)
        item['_count'] = _counts(org)
        rows.append(item)
    return rows


def get_my_organization(request) -> Optional[Dict[str, Any]]:
    org = request.user.organization
    return organization_dict(org) if org else None


def get_current_organization(request) -> Optional[Dict[str, Any]]:
    """The organization the request is scoped to, if any."""
    org_id = tenant_id(request)
    if org_id is None:
        return None
    org = Organization.objects.filter(pk=org_id).first()
    if org is None:
        raise NotFound('Organization not found')
    return organization_dict(org)


def _resolve_id(request, pk: int) -> int:
    # administrators only ever see their own organization
    if request.user.role == User.ROLE_ADMIN:
        return request.user.organization_id
    return pk


def get_organization(request, pk: int) -> Dict[str, Any]:
    org_id = _resolve_id(request, pk)
    org = _with_counts(Organization.objects.filter(pk=org_id)).first()
    if org is None:
        raise NotFound('Organization not found')
    data = organization_dict(org)
    data['_count'] = _counts(org)
    data['vessels'] = [vessel_dict(v) for v in org.vessels.order_by('name')]
    data['users'] = [user_dict(u) for u in org.users.order_by('-created_at')]
    return data


def update_organization(request, pk: int, data: Dict[str, Any]) -> Dict[str, Any]:
    org_id = _resolve_id(request, pk)
    with transaction.atomic():
        org = Organization.objects.select_for_update().filter(pk=org_id).first()
        if org is None:
            raise NotFound('Organization not found')
        before = organization_dict(org)
        for key, attr in FIELD_MAP.items():
            if key in data:
                setattr(org, attr, data[key])
        org.save()
        after = organization_dict(org)
        log_action(request=request, action='UPDATE', entity_type='Organization', entity_id=org.id,
                   organization_id=org.id, before=before, after=after)
    return after


def delete_organization(request, pk: int) -> None:
    with transaction.atomic():
        org = Organization.objects.filter(pk=pk).first()
        if org is None:
            raise NotFound('Organization not found')
        if org.reports.exists():
            raise Conflict('Organization still has inspection reports')
        before = organization_dict(org)
        log_action(request=request, action='DELETE', entity_type='Organization', entity_id=org.id,
                   organization_id=None, before=before)
        org.delete()


def analytics() -> Dict[str, Any]:
    """Platform wide figures for the super administrator dashboard."""
    orgs = list(_with_counts(Organization.objects.all()).order_by('created_at', 'id'))

    growth: Dict[str, int] = {}
    for org in orgs:
        month = org.created_at.strftime('%Y-%m')
        growth[month] = growth.get(month, 0) + 1
    cumulative = 0
    organization_growth = []
    for month in sorted(growth):
        cumulative += growth[month]
        organization_growth.append({'month': month, 'count': cumulative})

    top = sorted(orgs, key=lambda o: o.report_count, reverse=True)[:5]

    return {
        'summary': {
            'totalOrganizations': len(orgs),
            'totalUsers': sum(o.user_count for o in orgs),
            'totalVessels': sum(o.vessel_count for o in orgs),
            'totalInspections': sum(o.report_count for o in orgs),
        },
        'userDistribution': [{'name': o.name, 'value': o.user_count} for o in orgs],
        'vesselDistribution': [{'name': o.name, 'value': o.vessel_count} for o in orgs],
        'inspectionDistribution': [{'name': o.name, 'value': o.report_count} for o in orgs],
        'organizationGrowth': organization_growth,
        'topOrganizations': [
            {'name': o.name, 'users': o.user_count, 'vessels': o.vessel_count, 'inspections': o.report_count}
            for o in top
        ],
    }
