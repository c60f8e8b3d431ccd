"""
Authentication views.

Login, registration, profile, password management and token handling
for the SPA.  The authentication class itself lives in
``reporting.authentication`` so that DRF can import it without pulling
in these views.
"""
from __future__ import annotations

import hashlib
import logging
import secrets
from datetime import timedelta

from django.conf import settings
from django.contrib.auth.models import update_last_login
from django.db import transaction
from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.exceptions import AuthenticationFailed, ValidationError
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken, OutstandingToken
from rest_framework_simplejwt.tokens import RefreshToken

from reporting.models import User
from reporting.permissions import IsAdmin
from reporting.serializers.auth import (
    AccessQuerySerializer,
    ChangePasswordSerializer,
    ForgotPasswordSerializer,
    LoginSerializer,
    LogoutSerializer,
    RegisterSerializer,
    ResetPasswordSerializer,
)
from reporting.services import access
from reporting.services import email as email_service
from reporting.services import users as user_service
from reporting.services.audit import log_action

logger = logging.getLogger(__name__)

FORGOT_PASSWORD_MESSAGE = 'If an account with that email exists, a password reset link has been sent.'


def _token_pair(user: User) -> dict:
    refresh = RefreshToken.for_user(user)
    return {'access_token': str(refresh.access_token), 'refresh_token': str(refresh)}


def _hash_token(token: str) -> str:
    return hashlib.sha256(token.encode('utf-8')).hexdigest()


# ---------------------------------------------------------------------
# Email/password login
# ---------------------------------------------------------------------
@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([ScopedRateThrottle])
def login_view(request):
    """
    Exchange email and password for a bearer token pair.

    Every attempt is audited; failures record why they failed while the
    response only says the credentials are invalid.
    """
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    email = s.validated_data['email']
    password = s.validated_data['password']

    user = User.objects.select_related('organization', 'assigned_vessel').filter(email__iexact=email).first()
    if user is None:
        log_action(request=request, user=None, action='LOGIN_FAILED', entity_type='User', entity_id=email,
                   after={'email': email, 'reason': 'User not found'})
        raise AuthenticationFailed('Invalid credentials')
    if not user.is_active:
        log_action(request=request, user=user, action='LOGIN_FAILED', entity_type='User', entity_id=user.id,
                   after={'email': email, 'reason': 'Account disabled'})
        raise AuthenticationFailed('Account is disabled')
    if not user.check_password(password):
        log_action(request=request, user=user, action='LOGIN_FAILED', entity_type='User', entity_id=user.id,
                   after={'email': email, 'reason': 'Invalid password'})
        raise AuthenticationFailed('Invalid credentials')

    update_last_login(None, user)
    logger.info('User %s logged in (%s)', user.id, user.role)
    log_action(request=request, user=user, action='LOGIN', entity_type='User', entity_id=user.id,
               after={'email': user.email})
    payload = _token_pair(user)
    payload['user'] = user_service.profile(user)
    return Response(payload, status=200)

# ScopedRateThrottle reads throttle_scope from the wrapped view class
login_view.cls.throttle_scope = 'login'


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdmin])
def register_view(request):
    """Create a user (administrators only) and return a token pair for it."""
    s = RegisterSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    data = dict(s.validated_data)
    org_id = data.pop('organizationId', None)
    user = user_service.create_user(request, data, organization_id=org_id)
    payload = _token_pair(user)
    payload['user'] = user_service.profile(user)
    return Response(payload, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def me_view(request):
    return Response(user_service.profile(request.user))


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def change_password_view(request):
    s = ChangePasswordSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    user = request.user
    if not user.check_password(s.validated_data['currentPassword']):
        log_action(request=request, action='PASSWORD_CHANGE_FAILED', entity_type='User', entity_id=user.id,
                   after={'reason': 'Current password is incorrect'})
        raise AuthenticationFailed('Current password is incorrect')
    with transaction.atomic():
        user.set_password(s.validated_data['newPassword'])
        user.save(update_fields=['password', 'updated_at'])
        log_action(request=request, action='PASSWORD_CHANGE', entity_type='User', entity_id=user.id)
    return Response({'message': 'Password changed successfully'})


# ---------------------------------------------------------------------
# Forgotten password
# ---------------------------------------------------------------------
@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([ScopedRateThrottle])
def forgot_password_view(request):
    """Mail a one-time reset link.  The answer never reveals whether the email exists."""
    s = ForgotPasswordSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    user = User.objects.filter(email__iexact=s.validated_data['email'], is_active=True).first()
    if user is not None:
        token = secrets.token_urlsafe(32)
        ttl = settings.PASSWORD_RESET_TTL_MINUTES
        with transaction.atomic():
            user.password_reset_token = _hash_token(token)
            user.password_reset_expires = timezone.now() + timedelta(minutes=ttl)
            user.save(update_fields=['password_reset_token', 'password_reset_expires', 'updated_at'])
            log_action(request=request, user=user, action='PASSWORD_RESET_REQUESTED', entity_type='User',
                       entity_id=user.id)
        email_service.send_password_reset_email(
            user_name=user.name, user_email=user.email, token=token, expires_minutes=ttl,
        )
    return Response({'message': FORGOT_PASSWORD_MESSAGE})

forgot_password_view.cls.throttle_scope = 'password_reset'


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([ScopedRateThrottle])
def reset_password_view(request):
    s = ResetPasswordSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    user = User.objects.filter(
        password_reset_token=_hash_token(s.validated_data['token']),
        password_reset_expires__gt=timezone.now(),
        is_active=True,
    ).first()
    if user is None:
        raise ValidationError({'token': ['Invalid or expired reset token']})
    with transaction.atomic():
        user.set_password(s.validated_data['newPassword'])
        user.password_reset_token = None
        user.password_reset_expires = None
        user.save(update_fields=['password', 'password_reset_token', 'password_reset_expires', 'updated_at'])
        log_action(request=request, user=user, action='PASSWORD_RESET', entity_type='User', entity_id=user.id)
    return Response({'message': 'Password has been reset successfully'})

reset_password_view.cls.throttle_scope = 'password_reset'


# ---------------------------------------------------------------------
# JWT: refresh & logout
# ---------------------------------------------------------------------
@api_view(['POST'])
@permission_classes([AllowAny])
def jwt_refresh_view(request):
    """Return a new access token from a refresh token."""
    raw = request.data.get('refresh') or request.data.get('refresh_token')
    if not raw:
        raise ValidationError({'refresh': ['This field is required.']})
    try:
        refresh = RefreshToken(raw)
    except TokenError as exc:
        raise AuthenticationFailed(str(exc))
    return Response({'access_token': str(refresh.access_token)})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def jwt_logout_view(request):
    """Blacklist the given refresh token, or all of the user's tokens."""
    s = LogoutSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    raw = s.validated_data.get('refresh')
    count = 0
    if raw:
        try:
            RefreshToken(raw).blacklist()
        except TokenError as exc:
            raise ValidationError({'refresh': [str(exc)]})
        count = 1
    else:
        for token in OutstandingToken.objects.filter(user=request.user):
            _, created = BlacklistedToken.objects.get_or_create(token=token)
            count += int(created)
    log_action(request=request, action='LOGOUT', entity_type='User', entity_id=request.user.id,
               after={'blacklisted': count})
    return Response({'blacklisted': count})


# ---------------------------------------------------------------------
# Access rules for the SPA
# ---------------------------------------------------------------------
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def can_view(request):
    q = AccessQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    return Response(access.can(request.user, q.validated_data['resource'], q.validated_data['action']))
