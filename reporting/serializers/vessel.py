from rest_framework import serializers

from .fields import CleanCharField, iso


class VesselCreateSerializer(serializers.Serializer):
    name = CleanCharField(min_length=2, max_length=255)
    imoNumber = serializers.CharField(required=False, allow_null=True, allow_blank=True, max_length=20)
    callSign = serializers.CharField(required=False, allow_null=True, allow_blank=True, max_length=20)
    flag = serializers.CharField(required=False, allow_null=True, allow_blank=True, max_length=100)
    shipFileNo = serializers.CharField(required=False, allow_null=True, allow_blank=True, max_length=50)

    def validate_imoNumber(self, v):
        # blank IMO numbers are stored as NULL so that uniqueness ignores them
        v = (v or '').strip()
        return v or None


class VesselUpdateSerializer(VesselCreateSerializer):
    name = CleanCharField(required=False, min_length=2, max_length=255)


FIELD_MAP = {
    'name': 'name',
    'imoNumber': 'imo_number',
    'callSign': 'call_sign',
    'flag': 'flag',
    'shipFileNo': 'ship_file_no',
}


def vessel_dict(vessel) -> dict:
    return {
        'id': vessel.id,
        'name': vessel.name,
        'imoNumber': vessel.imo_number,
        'callSign': vessel.call_sign,
        'flag': vessel.flag,
        'shipFileNo': vessel.ship_file_no,
        'organizationId': vessel.organization_id,
        'createdAt': iso(vessel.created_at),
        'updatedAt': iso(vessel.updated_at),
    }
