"""URL configuration."""
from django.contrib import admin
from django.urls import include, path
from django.utils import timezone
from django.views.decorators.http import require_GET

from erp.responses import api_response


@require_GET
def health_view(request):
    return api_response({"timestamp": timezone.now()}, message="API is running")


urlpatterns = [
    path("api/health/", health_view, name="health"),
    path("api/audit/", include("auditlog.urls")),
    path("api/inventory/", include("inventory.urls")),
    path("django-admin/", admin.site.urls),
]
