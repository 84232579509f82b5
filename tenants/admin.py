from django.contrib import admin
from .models import Domain, Tenant


class DomainInline(admin.TabularInline):
    model = Domain
    extra = 0


@admin.register(Tenant)
class TenantAdmin(admin.ModelAdmin):
    list_display = ("name", "subdomain", "isolation_mode", "status", "created_at", "deleted_at")
    list_filter = ("status", "isolation_mode")
    search_fields = ("name", "subdomain")
    readonly_fields = ("id", "subdomain", "schema_name", "created_at", "updated_at", "deleted_at")
    inlines = [DomainInline]

    def get_queryset(self, request):
        return Tenant.all_objects.all()
