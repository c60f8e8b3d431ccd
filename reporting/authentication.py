"""
Bearer token authentication for the API.

This module subclasses simplejwt's ``JWTAuthentication`` so that the
project settings reference a stable import path and deactivated
accounts are rejected with a clear message.  Keeping it apart from the
views avoids circular imports when DRF loads authentication classes.
"""
from __future__ import annotations

from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.authentication import JWTAuthentication


class BearerAuthentication(JWTAuthentication):
    """JWT authentication using the ``Authorization: Bearer <token>`` header."""

    def get_user(self, validated_token):
        user = super().get_user(validated_token)
        if not user.is_active:
            raise AuthenticationFailed('Account is disabled', code='user_inactive')
        return user
