"""
Organization (tenant) views.

Super administrators create, list and delete organizations and read the
platform analytics; organization administrators read and edit their own
organization only.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from reporting.permissions import IsAdmin, IsSuperAdmin
from reporting.serializers.organization import (
    OrganizationCreateSerializer,
    OrganizationUpdateSerializer,
    organization_dict,
)
from reporting.serializers.user import user_dict
from reporting.services import organizations as service


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsSuperAdmin])
def organizations(request):
    if request.method == 'GET':
        return Response(service.list_organizations())

    s = OrganizationCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    org, admin = service.create_organization(request, s.validated_data)
    data = organization_dict(org)
    data['admin'] = user_dict(admin)
    return Response(data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def my_organization(request):
    return Response(service.get_my_organization(request))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def current_organization(request):
    """The organization the request operates on (``null`` for platform-wide)."""
    return Response(service.get_current_organization(request))


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsSuperAdmin])
def analytics(request):
    return Response(service.analytics())


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdmin])
def organization_detail(request, pk: int):
    if request.method == 'GET':
        return Response(service.get_organization(request, pk))

    if request.method == 'PATCH':
        s = OrganizationUpdateSerializer(data=request.data, partial=True)
        s.is_valid(raise_exception=True)
        return Response(service.update_organization(request, pk, s.validated_data))

    # deleting a tenant is a platform operation
    if not IsSuperAdmin().has_permission(request, None):
        raise PermissionDenied('Only super administrators can delete organizations')
    service.delete_organization(request, pk)
    return Response({'deleted': True, 'id': pk})
