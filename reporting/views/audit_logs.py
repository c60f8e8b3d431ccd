"""
Audit log views.

``/api/audit-logs`` is scoped to the caller's organization and open to
administrators.  ``/api/platform/audit-logs`` spans every tenant and is
reserved to super administrators.
"""
from __future__ import annotations

from django.http import HttpResponse
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from reporting.permissions import IsAdmin, IsSuperAdmin, tenant_id
from reporting.serializers.audit import AuditEntityQuerySerializer
from reporting.services import audit


def _list(request, organization_id):
    qs = audit.filter_logs(request.query_params, organization_id)
    rows, total = audit.page(qs, request.query_params)
    return Response({'data': [audit.serialize(r) for r in rows], 'total': total})


def _csv(request, organization_id, filename):
    qs = audit.filter_logs(request.query_params, organization_id)
    response = HttpResponse(audit.export_csv(qs), content_type='text/csv; charset=utf-8')
    response['Content-Disposition'] = f'attachment; filename="{filename}"'
    return response


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdmin])
def audit_logs(request):
    return _list(request, tenant_id(request))


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdmin])
def audit_entity_history(request):
    """Full history of one entity, oldest first."""
    q = AuditEntityQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    qs = audit.filter_logs(q.validated_data, tenant_id(request)).order_by('created_at', 'id')
    return Response([audit.serialize(r) for r in qs])


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdmin])
def audit_export(request):
    return _csv(request, tenant_id(request), 'audit-logs.csv')


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdmin])
def audit_stats(request):
    return Response(audit.stats(tenant_id(request)))


# ---------------------------------------------------------------------
# Platform wide
# ---------------------------------------------------------------------
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsSuperAdmin])
def platform_audit_logs(request):
    return _list(request, None)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsSuperAdmin])
def platform_audit_stats(request):
    return Response(audit.stats(None))


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsSuperAdmin])
def platform_audit_export(request):
    return _csv(request, None, 'platform-audit-logs.csv')
