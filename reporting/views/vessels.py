"""
Vessel views.

Captains can only read the vessel they command; changes to the fleet and
captain assignments are reserved for administrators.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from reporting.pagination import paginated_response
from reporting.permissions import IsAdmin, IsCaptainOrAdmin
from reporting.serializers.user import user_dict
from reporting.serializers.vessel import VesselCreateSerializer, VesselUpdateSerializer
from reporting.services import vessels as service

SORT_FIELDS = {'name': 'name', 'imoNumber': 'imo_number', 'flag': 'flag', 'createdAt': 'created_at'}


def _require_admin(request):
    if not IsAdmin().has_permission(request, None):
        raise PermissionDenied('Only administrators can manage vessels')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsCaptainOrAdmin])
def vessels(request):
    if request.method == 'GET':
        return paginated_response(request, service.list_vessels(request), service.vessel_summary, SORT_FIELDS)

    _require_admin(request)
    s = VesselCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vessel = service.create_vessel(request, s.validated_data)
    return Response(service.vessel_summary(vessel), status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsCaptainOrAdmin])
def my_vessel(request):
    return Response(service.my_vessel(request))


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsCaptainOrAdmin])
def vessel_detail(request, pk: int):
    if request.method == 'GET':
        return Response(service.get_vessel_detail(request, pk))

    _require_admin(request)
    if request.method == 'PATCH':
        s = VesselUpdateSerializer(data=request.data, partial=True)
        s.is_valid(raise_exception=True)
        vessel = service.update_vessel(request, pk, s.validated_data)
        return Response(service.vessel_summary(vessel))

    service.delete_vessel(request, pk)
    return Response({'deleted': True, 'id': pk})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdmin])
def assign_captain(request, pk: int, user_id: int):
    captain = service.assign_captain(request, pk, user_id)
    return Response(user_dict(captain, include_vessel=True))


@api_view(['DELETE'])
@permission_classes([IsAuthenticated, IsAdmin])
def remove_captain(request, pk: int):
    captain = service.remove_captain(request, pk)
    return Response({'removed': captain is not None, 'captainId': captain.id if captain else None})
