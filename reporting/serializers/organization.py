from rest_framework import serializers

from .fields import CleanCharField, iso


class OrganizationCreateSerializer(serializers.Serializer):
    name = CleanCharField(min_length=2, max_length=255)
    email = serializers.EmailField(required=False, allow_null=True)
    phone = serializers.CharField(required=False, allow_null=True, allow_blank=True, max_length=50)
    owner = CleanCharField(required=False, allow_null=True, allow_blank=True, max_length=255)
    logo = serializers.CharField(required=False, allow_null=True, allow_blank=True, max_length=500)
    defaultFormNo = serializers.CharField(required=False, allow_null=True, allow_blank=True, max_length=50)
    footerText = serializers.CharField(required=False, allow_null=True, allow_blank=True, max_length=500)
    adminPassword = serializers.CharField(min_length=6, write_only=True)


class OrganizationUpdateSerializer(serializers.Serializer):
    name = CleanCharField(required=False, min_length=2, max_length=255)
    email = serializers.EmailField(required=False, allow_null=True)
    phone = serializers.CharField(required=False, allow_null=True, allow_blank=True, max_length=50)
    owner = CleanCharField(required=False, allow_null=True, allow_blank=True, max_length=255)
    logo = serializers.CharField(required=False, allow_null=True, allow_blank=True, max_length=500)
    defaultFormNo = serializers.CharField(required=False, allow_null=True, allow_blank=True, max_length=50)
    footerText = serializers.CharField(required=False, allow_null=True, allow_blank=True, max_length=500)


# API name -> model attribute
FIELD_MAP = {
    'name': 'name',
    'email': 'email',
    'phone': 'phone',
    'owner': 'owner',
    'logo': 'logo',
    'defaultFormNo': 'default_form_no',
    'footerText': 'footer_text',
}


def organization_dict(org) -> dict:
    return {
        'id': org.id,
        'name': org.name,
        'email': org.email,
        'phone': org.phone,
        'owner': org.owner,
        'logo': org.logo,
        'defaultFormNo': org.default_form_no,
        'footerText': org.footer_text,
        'createdAt': iso(org.created_at),
        'updatedAt': iso(org.updated_at),
    }
