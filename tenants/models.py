"""Tenant model for django-tenants backed multi-tenancy."""
import uuid

from django.db import models
from django.utils import timezone
from django_tenants.models import DomainMixin, TenantMixin

from auditlog.auditable import Auditable


def schema_name_for(subdomain):
    """Postgres schema name for a routing key (``acme-eu`` -> ``tenant_acme_eu``)."""
    return "tenant_" + subdomain.lower().replace("-", "_")


class TenantQuerySet(models.QuerySet):
    def alive(self):
        return self.filter(deleted_at__isnull=True)

    def active(self):
        return self.alive().filter(status=Tenant.Status.ACTIVE)


class TenantManager(models.Manager.from_queryset(TenantQuerySet)):
    """Default manager: soft-deleted tenants are invisible."""

    def get_queryset(self):
        return super().get_queryset().alive()


class Tenant(Auditable, TenantMixin):
    """An isolated customer organisation.

    Every tenant carries a ``schema_name`` from ``TenantMixin`` but it is only
    used when ``isolation_mode`` is ``schema``.
    """

    class IsolationMode(models.TextChoices):
        ROW_LEVEL = "row_level", "Row level"
        SCHEMA = "schema", "Schema per tenant"
        DATABASE = "database", "Database per tenant"

    class Status(models.TextChoices):
        ACTIVE = "active", "Active"
        INACTIVE = "inactive", "Inactive"
        SUSPENDED = "suspended", "Suspended"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255, help_text="Display name for the tenant org")
    subdomain = models.SlugField(max_length=63, unique=True, help_text="Routing key (subdomain)")
    isolation_mode = models.CharField(
        max_length=16, choices=IsolationMode.choices, default=IsolationMode.ROW_LEVEL
    )
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.ACTIVE)
    settings = models.JSONField(default=dict, blank=True)
    metadata = models.JSONField(default=dict, blank=True)
    trial_ends_at = models.DateTimeField(null=True, blank=True)
    subscription_ends_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    deleted_at = models.DateTimeField(null=True, blank=True)

    # Schemas are created explicitly by provisioning, only for schema tenants.
    auto_create_schema = False
    auto_drop_schema = False

    objects = TenantManager()
    all_objects = models.Manager.from_queryset(TenantQuerySet)()

    class Meta:
        app_label = "tenants"
        indexes = [
            models.Index(fields=["subdomain", "status"], name="idx_tenant_subdomain_status"),
        ]

    def __str__(self):
        return self.name

    @property
    def is_active(self):
        return self.status == self.Status.ACTIVE

    @property
    def is_deleted(self):
        return self.deleted_at is not None

    @property
    def uses_schema(self):
        return self.isolation_mode == self.IsolationMode.SCHEMA

    def has_valid_subscription(self):
        if self.subscription_ends_at is None:
            return True
        return self.subscription_ends_at > timezone.now()

    def is_in_trial(self):
        if self.trial_ends_at is None:
            return False
        return self.trial_ends_at > timezone.now()

    def save(self, *args, **kwargs):
        if not self.schema_name:
            self.schema_name = schema_name_for(self.subdomain)
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        """Soft delete: tenants are marked, never erased."""
        self.deleted_at = timezone.now()
        self.save(update_fields=["deleted_at", "updated_at"])


class Domain(DomainMixin):
    """Full host name registered for a tenant (e.g. a custom domain)."""

    class Meta:
        app_label = "tenants"

    def __str__(self):
        return self.domain
