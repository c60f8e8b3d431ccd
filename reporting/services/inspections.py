"""
Inspection reports.

A report always belongs to the organization of its vessel.  Captains
create and edit reports for the vessel they are assigned to only;
administrators may pick any vessel of their organization.
"""
from __future__ import annotations

from typing import Any, Dict

from django.db import transaction
from django.db.models import Prefetch
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from reporting.models import InspectionEntry, InspectionReport, Organization, User, Vessel
from reporting.permissions import require_tenant, tenant_id
from reporting.serializers.inspection import REPORT_FIELD_MAP, report_detail_dict
from reporting.services import entries as entry_service
from reporting.services.audit import log_action


def _detail_queryset():
    return InspectionReport.objects.select_related('vessel', 'organization', 'created_by').prefetch_related(
        Prefetch(
            'entries',
            queryset=InspectionEntry.objects.select_related('office_sign_user').order_by('sr_no', 'id'),
        )
    )


def _status_summary(report) -> Dict[str, int]:
    summary = {s: 0 for s, _ in InspectionEntry.STATUS_CHOICES}
    for entry in report.entries.all():
        summary[entry.status] = summary.get(entry.status, 0) + 1
    return summary


def list_item(report) -> Dict[str, Any]:
    data = report_detail_dict(report)
    data['entryCount'] = len(data['entries'])
    data['statusSummary'] = _status_summary(report)
    data.pop('entries')
    return data


def get_report(request, pk: int) -> InspectionReport:
    """Report by id with the visibility rules applied.

    Reports of another organization answer 404, reports of another
    vessel answer 403 for captains.
    """
    report = _detail_queryset().filter(pk=pk).first()
    org_id = tenant_id(request)
    if report is None or (org_id is not None and report.organization_id != org_id):
        raise NotFound('Inspection report not found')
    user = request.user
    if user.role == User.ROLE_CAPTAIN and report.vessel_id != user.assigned_vessel_id:
        raise PermissionDenied('You do not have access to this report')
    return report


def list_reports(request, *, vessel_id=None, status=None):
    qs = _detail_queryset().order_by('-created_at', '-id')
    org_id = tenant_id(request)
    if org_id is not None:
        qs = qs.filter(organization_id=org_id)
    user = request.user
    if user.role == User.ROLE_CAPTAIN:
        if not user.assigned_vessel_id:
            return qs.none()
        qs = qs.filter(vessel_id=user.assigned_vessel_id)
    if vessel_id:
        qs = qs.filter(vessel_id=vessel_id)
    if status:
        qs = qs.filter(entries__status=status).distinct()
    return qs


def create_report(request, data: Dict[str, Any]) -> InspectionReport:
    user = request.user
    org_id = require_tenant(request)

    vessel_id = data.get('vesselId')
    if user.role == User.ROLE_CAPTAIN:
        if not user.assigned_vessel_id:
            raise PermissionDenied('Captain must be assigned to a vessel to create reports')
        vessel_id = user.assigned_vessel_id
    if not vessel_id:
        raise ValidationError({'vesselId': ['Vessel ID is required']})

    vessel = Vessel.objects.filter(pk=vessel_id).first()
    if vessel is None:
        raise NotFound('Vessel not found')
    if vessel.organization_id != org_id:
        raise PermissionDenied('Vessel does not belong to your organization')

    items = data.get('entries') or []
    entry_service.check_capacity(0, len(items))

    form_no = data.get('formNo')
    if not form_no:
        form_no = Organization.objects.filter(pk=org_id).values_list('default_form_no', flat=True).first()

    with transaction.atomic():
        report = InspectionReport(vessel=vessel, organization_id=org_id, created_by=user)
        for key, attr in REPORT_FIELD_MAP.items():
            if key in data:
                setattr(report, attr, data[key])
        report.title = data.get('title') or InspectionReport.DEFAULT_TITLE
        report.ship_file_no = data.get('shipFileNo') or vessel.ship_file_no
        report.form_no = form_no
        report.save()
        entry_service.create_entries(report, items, user)
        report = _detail_queryset().get(pk=report.pk)
        log_action(request=request, action='CREATE', entity_type='InspectionReport', entity_id=report.id,
                   organization_id=org_id, after=report_detail_dict(report))
    return report


def update_report(request, pk: int, data: Dict[str, Any]) -> InspectionReport:
    """Update header fields; a non-empty ``entries`` list replaces all entries.

    The vessel of a report never changes.
    """
    with transaction.atomic():
        report = get_report(request, pk)
        before = report_detail_dict(report)
        for key, attr in REPORT_FIELD_MAP.items():
            if key in data:
                setattr(report, attr, data[key])
        if not report.title:
            report.title = InspectionReport.DEFAULT_TITLE
        report.save()

        items = data.get('entries')
        if items:
            entry_service.check_capacity(0, len(items))
            report.entries.all().delete()
            entry_service.create_entries(report, items, request.user)

        report = _detail_queryset().get(pk=report.pk)
        after = report_detail_dict(report)
        log_action(request=request, action='UPDATE', entity_type='InspectionReport', entity_id=report.id,
                   organization_id=report.organization_id, before=before, after=after)
    return report


def delete_report(request, pk: int) -> Dict[str, Any]:
    with transaction.atomic():
        report = get_report(request, pk)
        log_action(request=request, action='DELETE', entity_type='InspectionReport', entity_id=report.id,
                   organization_id=report.organization_id, before=report_detail_dict(report))
        report.delete()
    return {'deleted': True, 'id': pk}
