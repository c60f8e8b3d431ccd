"""
Inspection report views, including the PDF download.
"""
from __future__ import annotations

import logging

from django.http import HttpResponse
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from reporting.pagination import paginated_response
from reporting.permissions import IsAdmin, IsCaptainOrAdmin
from reporting.serializers.inspection import (
    InspectionCreateSerializer,
    InspectionListQuerySerializer,
    InspectionUpdateSerializer,
    report_detail_dict,
)
from reporting.services import inspections as service
from reporting.services import pdf

logger = logging.getLogger(__name__)

SORT_FIELDS = {'createdAt': 'created_at', 'inspectionDate': 'inspection_date', 'title': 'title'}


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsCaptainOrAdmin])
def inspections(request):
    if request.method == 'POST':
        s = InspectionCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        report = service.create_report(request, s.validated_data)
        return Response(report_detail_dict(report), status=status.HTTP_201_CREATED)

    q = InspectionListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    qs = service.list_reports(
        request,
        vessel_id=q.validated_data.get('vesselId'),
        status=q.validated_data.get('status'),
    )
    return paginated_response(request, qs, service.list_item, SORT_FIELDS)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsCaptainOrAdmin])
def inspection_detail(request, pk: int):
    if request.method == 'GET':
        return Response(report_detail_dict(service.get_report(request, pk)))

    if request.method == 'PATCH':
        s = InspectionUpdateSerializer(data=request.data, partial=True)
        s.is_valid(raise_exception=True)
        report = service.update_report(request, pk, s.validated_data)
        return Response(report_detail_dict(report))

    if not IsAdmin().has_permission(request, None):
        raise PermissionDenied('Only administrators can delete inspection reports')
    return Response(service.delete_report(request, pk))


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsCaptainOrAdmin])
def inspection_pdf(request, pk: int):
    """Stream the report as a PDF attachment."""
    report = service.get_report(request, pk)
    content = pdf.render_report(report)
    filename = pdf.pdf_filename(report)
    logger.info('Rendered report %s as %s (%d bytes)', report.pk, filename, len(content))
    response = HttpResponse(content, content_type='application/pdf')
    response['Content-Disposition'] = f'attachment; filename="{filename}"'
    response['Content-Length'] = str(len(content))
    return response
