from django.contrib import admin
from .models import AuditRecord


@admin.register(AuditRecord)
class AuditRecordAdmin(admin.ModelAdmin):
    list_display = ("created_at", "event", "subject_type", "subject_id", "user", "tenant", "ip_address")
    list_filter = ("event", "subject_type")
    search_fields = ("audit_id", "subject_id")
    readonly_fields = (
        "id", "audit_id", "created_at", "user", "tenant", "event", "subject_type", "subject_id",
        "old_values", "new_values", "tags", "metadata", "url", "ip_address", "user_agent",
    )

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
