import bleach
from rest_framework import serializers


def clean_text(v):
    """Strip markup from short free-text values such as names."""
    return bleach.clean((v or '').strip(), tags=[], strip=True)


def iso(value):
    return value.isoformat() if value else None


class CleanCharField(serializers.CharField):
    def to_internal_value(self, data):
        return clean_text(super().to_internal_value(data))
