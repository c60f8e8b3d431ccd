"""
Vessel registry of an organization and captain assignment.
"""
from __future__ import annotations

from typing import Any, Dict, Optional

from django.db import transaction
from django.db.models import Count
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from reporting.exceptions import Conflict
from reporting.models import User, Vessel
from reporting.permissions import require_tenant, tenant_id
from reporting.serializers.inspection import report_dict
from reporting.serializers.user import user_dict
from reporting.serializers.vessel import FIELD_MAP, vessel_dict
from reporting.services.audit import log_action


def _captain(vessel) -> Optional[Dict[str, Any]]:
    captain = getattr(vessel, 'captain', None)
    if captain is None:
        return None
    return {'id': captain.id, 'email': captain.email, 'name': captain.name, 'signatureImage': captain.signature_image}


def vessel_summary(vessel) -> Dict[str, Any]:
    data = vessel_dict(vessel)
    org = vessel.organization
    data['organization'] = {'id': org.id, 'name': org.name} if org else None
    data['captain'] = _captain(vessel)
    if hasattr(vessel, 'report_count'):
        data['_count'] = {'inspections': vessel.report_count}
    return data


def _ensure_imo_free(imo: Optional[str], exclude_pk: Optional[int] = None) -> None:
    if not imo:
        return
    qs = Vessel.objects.filter(imo_number=imo)
    if exclude_pk is not None:
        qs = qs.exclude(pk=exclude_pk)
    if qs.exists():
        raise Conflict('Vessel with this IMO number already exists')


def get_scoped_vessel(request, pk: int) -> Vessel:
    """Vessel by id; rows of other organizations are reported as missing."""
    vessel = Vessel.objects.select_related('organization').filter(pk=pk).first()
    org_id = tenant_id(request)
    if vessel is None or (org_id is not None and vessel.organization_id != org_id):
        raise NotFound(f'Vessel with ID {pk} not found')
    return vessel


def create_vessel(request, data: Dict[str, Any]) -> Vessel:
    org_id = require_tenant(request)
    _ensure_imo_free(data.get('imoNumber'))
    with transaction.atomic():
        vessel = Vessel.objects.create(
            organization_id=org_id,
            **{attr: data.get(key) for key, attr in FIELD_MAP.items() if key in data},
        )
        log_action(request=request, action='CREATE', entity_type='Vessel', entity_id=vessel.id,
                   organization_id=org_id, after=vessel_dict(vessel))
    return vessel


def list_vessels(request):
    qs = (
        Vessel.objects.select_related('organization', 'captain')
        .annotate(report_count=Count('reports'))
        .order_by('name', 'id')
    )
    user = request.user
    if user.role == User.ROLE_CAPTAIN:
        if not user.assigned_vessel_id:
            return qs.none()
        return qs.filter(pk=user.assigned_vessel_id)
    org_id = tenant_id(request)
    if org_id is not None:
        qs = qs.filter(organization_id=org_id)
    return qs


def get_vessel_detail(request, pk: int) -> Dict[str, Any]:
    vessel = get_scoped_vessel(request, pk)
    if request.user.role == User.ROLE_CAPTAIN and request.user.assigned_vessel_id != vessel.pk:
        raise PermissionDenied('You can only access your assigned vessel')
    data = vessel_summary(vessel)
    data['inspections'] = [report_dict(r) for r in vessel.reports.order_by('-created_at')[:10]]
    return data


def my_vessel(request) -> Optional[Dict[str, Any]]:
    vessel_id = request.user.assigned_vessel_id
    if not vessel_id:
        return None
    vessel = Vessel.objects.select_related('organization').filter(pk=vessel_id).first()
    return vessel_summary(vessel) if vessel else None


def update_vessel(request, pk: int, data: Dict[str, Any]) -> Vessel:
    with transaction.atomic():
        vessel = get_scoped_vessel(request, pk)
        if 'imoNumber' in data:
            _ensure_imo_free(data['imoNumber'], exclude_pk=vessel.pk)
        before = vessel_dict(vessel)
        for key, attr in FIELD_MAP.items():
            if key in data:
                setattr(vessel, attr, data[key])
        vessel.save()
        log_action(request=request, action='UPDATE', entity_type='Vessel', entity_id=vessel.id,
                   organization_id=vessel.organization_id, before=before, after=vessel_dict(vessel))
    return vessel


def delete_vessel(request, pk: int) -> None:
    with transaction.atomic():
        vessel = get_scoped_vessel(request, pk)
        if vessel.reports.exists():
            raise Conflict('Vessel still has inspection reports')
        log_action(request=request, action='DELETE', entity_type='Vessel', entity_id=vessel.id,
                   organization_id=vessel.organization_id, before=vessel_dict(vessel))
        vessel.delete()


def assign_captain(request, pk: int, user_id: int) -> User:
    """Make ``user_id`` the captain of the vessel, releasing any previous one."""
    with transaction.atomic():
        vessel = get_scoped_vessel(request, pk)
        captain = User.objects.select_for_update().filter(pk=user_id).first()
        if captain is None:
            raise NotFound(f'User with ID {user_id} not found')
        if captain.organization_id != vessel.organization_id:
            raise PermissionDenied('Cannot assign captain from a different organization')
        if captain.role != User.ROLE_CAPTAIN:
            raise ValidationError({'userId': ['User is not a captain']})

        previous = User.objects.filter(assigned_vessel=vessel).exclude(pk=captain.pk).first()
        if previous is not None:
            previous.assigned_vessel = None
            previous.save(update_fields=['assigned_vessel', 'updated_at'])
        captain.assigned_vessel = vessel
        captain.save(update_fields=['assigned_vessel', 'updated_at'])
        log_action(request=request, action='ASSIGN_CAPTAIN', entity_type='Vessel', entity_id=vessel.id,
                   organization_id=vessel.organization_id,
                   before={'captainId': previous.id if previous else None},
                   after={'captainId': captain.id, 'captain': user_dict(captain)})
    return captain


def remove_captain(request, pk: int) -> Optional[User]:
    with transaction.atomic():
        vessel = get_scoped_vessel(request, pk)
        captain = User.objects.filter(assigned_vessel=vessel).first()
        if captain is None:
            return None
        captain.assigned_vessel = None
        captain.save(update_fields=['assigned_vessel', 'updated_at'])
        log_action(request=request, action='REMOVE_CAPTAIN', entity_type='Vessel', entity_id=vessel.id,
                   organization_id=vessel.organization_id,
                   before={'captainId': captain.id}, after={'captainId': None})
    return captain
