from rest_framework import serializers


class AuditEntityQuerySerializer(serializers.Serializer):
    entityType = serializers.CharField()
    entityId = serializers.CharField()
