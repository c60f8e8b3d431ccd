from rest_framework import serializers

from reporting.models import User
from .fields import CleanCharField, iso

ROLE_VALUES = [r for r, _ in User.ROLE_CHOICES]


class UserCreateSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(min_length=6, write_only=True)
    name = CleanCharField(min_length=2, max_length=255)
    role = serializers.ChoiceField(choices=ROLE_VALUES, required=False)
    assignedVesselId = serializers.IntegerField(required=False, allow_null=True)
    isActive = serializers.BooleanField(required=False)

    def validate_email(self, v):
        return v.strip().lower()


class UserUpdateSerializer(serializers.Serializer):
    email = serializers.EmailField(required=False)
    password = serializers.CharField(required=False, min_length=6, write_only=True)
    name = CleanCharField(required=False, min_length=2, max_length=255)
    role = serializers.ChoiceField(choices=ROLE_VALUES, required=False)
    assignedVesselId = serializers.IntegerField(required=False, allow_null=True)
    isActive = serializers.BooleanField(required=False)
    signatureImage = serializers.CharField(required=False, allow_null=True, allow_blank=True, max_length=500)

    def validate_email(self, v):
        return v.strip().lower()


# fields a user may change on their own profile
SELF_SERVICE_FIELDS = {'name', 'password', 'signatureImage'}


class UserListQuerySerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=ROLE_VALUES, required=False)
    search = serializers.CharField(required=False, allow_blank=True)
    includeInactive = serializers.BooleanField(required=False, default=False)


def user_dict(user, *, include_organization: bool = False, include_vessel: bool = False) -> dict:
    data = {
        'id': user.id,
        'email': user.email,
        'name': user.name,
        'role': user.role,
        'isActive': user.is_active,
        'signatureImage': user.signature_image,
        'profileImage': user.profile_image,
        'organizationId': user.organization_id,
        'assignedVesselId': user.assigned_vessel_id,
        'lastLogin': iso(user.last_login),
        'createdAt': iso(user.created_at),
        'updatedAt': iso(user.updated_at),
    }
    if include_organization:
        org = user.organization
        data['organization'] = {'id': org.id, 'name': org.name, 'logo': org.logo} if org else None
    if include_vessel:
        vessel = user.assigned_vessel
        data['assignedVessel'] = (
            {'id': vessel.id, 'name': vessel.name, 'imoNumber': vessel.imo_number} if vessel else None
        )
    return data


def user_brief(user) -> dict | None:
    if user is None:
        return None
    return {'id': user.id, 'name': user.name, 'email': user.email}
