"""
Deficiency entries nested under an inspection report.

Access to the parent report decides access to its entries, so every
view resolves the report first.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from reporting.permissions import IsAdmin, IsCaptainOrAdmin
from reporting.serializers.inspection import EntrySerializer, EntryUpdateSerializer, entry_dict
from reporting.services import entries as service
from reporting.services.inspections import get_report


def _serialize(entry):
    return entry_dict(entry, include_signer=True)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsCaptainOrAdmin])
def entries(request, report_id: int):
    report = get_report(request, report_id)
    if request.method == 'GET':
        return Response([_serialize(e) for e in service.list_entries(report)])

    s = EntrySerializer(data=request.data)
    s.is_valid(raise_exception=True)
    entry = service.create_entry(request, report, s.validated_data)
    entry = service.get_entry(report, entry.pk)
    return Response(_serialize(entry), status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsCaptainOrAdmin])
def entry_detail(request, report_id: int, entry_id: int):
    report = get_report(request, report_id)
    if request.method == 'GET':
        return Response(_serialize(service.get_entry(report, entry_id)))

    if request.method == 'PATCH':
        s = EntryUpdateSerializer(data=request.data, partial=True)
        s.is_valid(raise_exception=True)
        service.update_entry(request, report, entry_id, s.validated_data)
        return Response(_serialize(service.get_entry(report, entry_id)))

    if not IsAdmin().has_permission(request, None):
        raise PermissionDenied('Only administrators can delete entries')
    service.delete_entry(request, report, entry_id)
    return Response({'deleted': True, 'id': entry_id})
