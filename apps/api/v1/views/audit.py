# apps/api/v1/views/audit.py
"""Read-only audit trail."""
from rest_framework import viewsets, filters
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema, extend_schema_view

from apps.audit.models import AuditLog
from apps.api.permissions import IsAdmin
from apps.api.v1.serializers.audit import AuditLogSerializer


@extend_schema_view(
    list=extend_schema(tags=['audit'], summary='List audit log entries'),
    retrieve=extend_schema(tags=['audit'], summary='Get an audit log entry'),
)
class AuditLogViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = AuditLogSerializer
    permission_classes = [IsAdmin]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter]
    filterset_fields = ['action', 'feature', 'actor_id']
    search_fields = ['description', 'actor_name']

    def get_queryset(self):
        return AuditLog.objects.all()
