from django.contrib import admin
from .models import AuditLog


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ['timestamp', 'actor_name', 'action', 'feature', 'description']
    list_filter = ['action', 'feature']
    search_fields = ['actor_name', 'description']
    readonly_fields = ['actor_id', 'actor_name', 'action', 'feature', 'description', 'timestamp']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
