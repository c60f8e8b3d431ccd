from rest_framework import serializers

from reporting.models import User
from .fields import CleanCharField


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField()

    def validate_email(self, v):
        return v.strip().lower()


class RegisterSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(min_length=6, write_only=True)
    name = CleanCharField(min_length=2, max_length=255)
    role = serializers.ChoiceField(choices=[r for r, _ in User.ROLE_CHOICES], required=False)
    organizationId = serializers.IntegerField(required=False, allow_null=True)
    assignedVesselId = serializers.IntegerField(required=False, allow_null=True)

    def validate_email(self, v):
        return v.strip().lower()


class ChangePasswordSerializer(serializers.Serializer):
    currentPassword = serializers.CharField()
    newPassword = serializers.CharField(min_length=6)


class ForgotPasswordSerializer(serializers.Serializer):
    email = serializers.EmailField()

    def validate_email(self, v):
        return v.strip().lower()


class ResetPasswordSerializer(serializers.Serializer):
    token = serializers.CharField()
    newPassword = serializers.CharField(
        min_length=8, error_messages={'min_length': 'Password must be at least 8 characters'}
    )


class LogoutSerializer(serializers.Serializer):
    refresh = serializers.CharField(required=False, allow_blank=True)


class AccessQuerySerializer(serializers.Serializer):
    resource = serializers.CharField()
    action = serializers.CharField(required=False, default='list')
