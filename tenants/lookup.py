"""Tenant lookup store."""
import uuid

from django.db import DatabaseError

from erp.errors import TenantStoreUnavailable
from .models import Tenant


class TenantLookup:
    """Reads tenants from the database.

    Unknown identifiers return ``None``; a store failure raises
    ``TenantStoreUnavailable`` so callers never mistake an outage for
    "no tenant".
    """

    def __init__(self, queryset=None):
        self._queryset = queryset

    @property
    def queryset(self):
        if self._queryset is not None:
            return self._queryset.all()
        return Tenant.objects.all()

    def find_by_id(self, tenant_id):
        try:
            pk = uuid.UUID(str(tenant_id).strip())
        except ValueError:
            return None
        return self._first(self.queryset.filter(pk=pk))

    def find_by_routing_key(self, key, status=None):
        qs = self.queryset.filter(subdomain__iexact=key)
        if status is not None:
            qs = qs.filter(status=status)
        return self._first(qs)

    def _first(self, qs):
        try:
            return qs.first()
        except DatabaseError as exc:
            raise TenantStoreUnavailable() from exc
