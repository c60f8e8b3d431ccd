"""
Deficiency entries of an inspection report.

Ship staff own the deficiency description and the actions taken; the
office owns the company analysis, the status and the sign-off.  Office
fields sent by a captain are dropped without an error so that the same
form can be submitted by both sides.
"""
from __future__ import annotations

from typing import Any, Dict, Iterable, List

from django.conf import settings
from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound, ValidationError

from reporting.models import InspectionEntry, InspectionReport, User
from reporting.permissions import ADMIN_ROLES
from reporting.serializers.inspection import ENTRY_FIELD_MAP, OFFICE_FIELDS, SHIP_STAFF_FIELDS, entry_dict
from reporting.services.audit import log_action


def is_office(user) -> bool:
    return user.role in ADMIN_ROLES


def filter_fields(data: Dict[str, Any], user) -> Dict[str, Any]:
    """Keep the fields ``user`` may write."""
    allowed = SHIP_STAFF_FIELDS + OFFICE_FIELDS if is_office(user) else SHIP_STAFF_FIELDS
    return {k: v for k, v in data.items() if k in allowed}


def _apply(entry: InspectionEntry, data: Dict[str, Any]) -> None:
    for key, value in data.items():
        attr = ENTRY_FIELD_MAP.get(key)
        if attr is not None:
            setattr(entry, attr, value)


def _check_signer(data: Dict[str, Any], report: InspectionReport) -> None:
    signer_id = data.get('officeSignUserId')
    if signer_id and not User.objects.filter(pk=signer_id, organization_id=report.organization_id).exists():
        raise ValidationError({'officeSignUserId': ['Signer must belong to the report organization']})


def build_entry(report: InspectionReport, data: Dict[str, Any], user, sign: bool = False) -> InspectionEntry:
    """Unsaved entry from already validated input.

    Without ``sign`` the submitted ``officeSignUserId`` and
    ``officeSignDate`` are kept as sent.  With ``sign`` an office author
    signs the entry.
    """
    fields = filter_fields(data, user)
    if not fields.get('srNo') or not fields.get('deficiency'):
        raise ValidationError('srNo and deficiency are required')
    _check_signer(fields, report)
    entry = InspectionEntry(report=report)
    _apply(entry, fields)
    if sign and is_office(user):
        entry.office_sign_user = user
        entry.office_sign_date = fields.get('officeSignDate') or timezone.now()
    return entry


def check_capacity(current: int, adding: int = 1) -> None:
    limit = settings.MAX_ENTRIES_PER_REPORT
    if current + adding > limit:
        raise ValidationError(f'Maximum {limit} entries per report allowed')


def create_entries(report: InspectionReport, items: Iterable[Dict[str, Any]], user) -> List[InspectionEntry]:
    entries = [build_entry(report, item, user) for item in items]
    return InspectionEntry.objects.bulk_create(entries)


def list_entries(report: InspectionReport):
    return report.entries.select_related('office_sign_user').order_by('sr_no', 'id')


def get_entry(report: InspectionReport, entry_id: int) -> InspectionEntry:
    entry = list_entries(report).filter(pk=entry_id).first()
    if entry is None:
        raise NotFound('Entry not found')
    return entry


def create_entry(request, report: InspectionReport, data: Dict[str, Any]) -> InspectionEntry:
    with transaction.atomic():
        # lock the report so concurrent inserts cannot exceed the limit
        InspectionReport.objects.select_for_update().filter(pk=report.pk).first()
        check_capacity(report.entries.count())
        # a single entry added by the office is signed by its author
        entry = build_entry(report, data, request.user, sign=True)
        entry.save()
        log_action(request=request, action='CREATE', entity_type='InspectionEntry', entity_id=entry.id,
                   organization_id=report.organization_id, after=entry_dict(entry))
    return entry


def _action_for(before: Dict[str, Any], after: Dict[str, Any]) -> str:
    if not before['officeSignUserId'] and after['officeSignUserId']:
        return 'OFFICE_SIGN'
    if before['officeSignUserId'] and not after['officeSignUserId']:
        return 'OFFICE_UNSIGN'
    if before['status'] != after['status']:
        return 'STATUS_CHANGE'
    return 'UPDATE'


def update_entry(request, report: InspectionReport, entry_id: int, data: Dict[str, Any]) -> InspectionEntry:
    user = request.user
    with transaction.atomic():
        entry = get_entry(report, entry_id)
        before = entry_dict(entry)
        fields = filter_fields(data, user)
        _check_signer(fields, report)
        _apply(entry, fields)
        if is_office(user) and (fields.get('companyAnalysis') or fields.get('status')):
            entry.office_sign_user = user
            entry.office_sign_date = timezone.now()
        entry.save()
        after = entry_dict(entry)
        log_action(request=request, action=_action_for(before, after), entity_type='InspectionEntry',
                   entity_id=entry.id, organization_id=report.organization_id, before=before, after=after)
    return entry


def delete_entry(request, report: InspectionReport, entry_id: int) -> None:
    with transaction.atomic():
        entry = get_entry(report, entry_id)
        log_action(request=request, action='DELETE', entity_type='InspectionEntry', entity_id=entry.id,
                   organization_id=report.organization_id, before=entry_dict(entry))
        entry.delete()
