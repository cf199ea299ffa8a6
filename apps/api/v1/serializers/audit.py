# apps/api/v1/serializers/audit.py
from rest_framework import serializers
from apps.audit.models import AuditLog


class AuditLogSerializer(serializers.ModelSerializer):

    class Meta:
        model = AuditLog
        fields = ['id', 'actor_id', 'actor_name', 'action', 'feature', 'description', 'timestamp']
        read_only_fields = fields
