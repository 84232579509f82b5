"""Inventory models – tenant-scoped and audited."""
import uuid
from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models

from auditlog.auditable import Auditable
from tenants.scoping import TenantScopedModel


class Product(Auditable, TenantScopedModel):
    """A sellable item in one tenant's catalogue."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    sku = models.CharField(max_length=64)
    name = models.CharField(max_length=255)
    unit_price = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        app_label = "inventory"
        db_table = "inventory_product"
        ordering = ["sku"]
        constraints = [
            models.UniqueConstraint(fields=["tenant", "sku"], name="uniq_product_tenant_sku"),
        ]

    def __str__(self):
        return f"{self.sku} – {self.name}"
