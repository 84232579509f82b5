"""Row-level tenant isolation for business models."""
from django.db import models


class TenantScopedQuerySet(models.QuerySet):
    def for_context(self, context):
        """Rows owned by the context's tenant. Raises ``TenantRequired`` when empty."""
        return self.filter(tenant=context.require_tenant())


class TenantScopedModel(models.Model):
    tenant = models.ForeignKey(
        "tenants.Tenant", on_delete=models.PROTECT, related_name="+", editable=False
    )

    objects = TenantScopedQuerySet.as_manager()

    class Meta:
        abstract = True
