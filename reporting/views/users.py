"""
User management views.

Administrators manage the users of their organization.  Any user may
read their own profile and update the self-service fields on it.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from reporting.pagination import paginated_response
from reporting.permissions import IsAdmin
from reporting.serializers.user import (
    UserCreateSerializer,
    UserListQuerySerializer,
    UserUpdateSerializer,
    user_dict,
)
from reporting.services import users as service

SORT_FIELDS = {'name': 'name', 'email': 'email', 'role': 'role', 'createdAt': 'created_at'}


def _serialize(user):
    return user_dict(user, include_organization=True, include_vessel=True)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdmin])
def users(request):
    if request.method == 'POST':
        s = UserCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        user = service.create_user(request, s.validated_data)
        return Response(_serialize(user), status=status.HTTP_201_CREATED)

    q = UserListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    qs = service.list_users(
        request,
        role=q.validated_data.get('role'),
        search=q.validated_data.get('search') or '',
        include_inactive=q.validated_data['includeInactive'],
    )
    return paginated_response(request, qs, _serialize, SORT_FIELDS)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def me(request):
    return Response(service.profile(request.user))


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdmin])
def captain_activity(request):
    return Response(service.captain_activity(request))


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def user_detail(request, pk: int):
    """
    ``PATCH`` is open to every user for their own record; the service
    restricts non-administrators to the self-service fields.  Reading
    another user and deactivating users require an administrator.
    """
    if request.method == 'PATCH':
        s = UserUpdateSerializer(data=request.data, partial=True)
        s.is_valid(raise_exception=True)
        user = service.update_user(request, pk, s.validated_data)
        return Response(_serialize(user))

    if not IsAdmin().has_permission(request, None):
        if request.method == 'GET' and request.user.pk == pk:
            return Response(service.profile(request.user))
        raise PermissionDenied('You do not have permission to perform this action.')

    if request.method == 'GET':
        return Response(_serialize(service.get_scoped_user(request, pk)))

    service.deactivate_user(request, pk)
    return Response({'deleted': True, 'id': pk})


@api_view(['DELETE'])
@permission_classes([IsAuthenticated, IsAdmin])
def user_hard_delete(request, pk: int):
    service.hard_delete_user(request, pk)
    return Response({'deleted': True, 'id': pk})
