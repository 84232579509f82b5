"""Tenant resolution for inbound requests.

Sources are tried strictly in order and the first match wins:

1. the tenant header (``X-Tenant-ID`` by default), looked up by id with no
   status filter;
2. the first label of a ``sub.domain.tld`` host, matched against an
   ``active`` tenant's routing key;
3. the authenticated user's tenant, with no status filter.

A source that yields nothing falls through to the next one. When every
source is exhausted the context is empty.
"""
import ipaddress
import logging

from django.db import DatabaseError

from erp.conf import erp_setting
from erp.errors import TenantStoreUnavailable
from .context import ResolutionSource, TenantContext
from .lookup import TenantLookup
from .models import Tenant

logger = logging.getLogger(__name__)


def extract_subdomain(host):
    """Return the routing key from ``host`` or ``None``.

    Only hosts with at least three dot-separated labels carry one.
    """
    host = host or ""
    if host.startswith("["):  # IPv6 literal
        return None
    host = host.rsplit(":", 1)[0]
    if not host:
        return None
    try:
        ipaddress.ip_address(host)
        return None
    except ValueError:
        pass
    labels = host.lower().split(".")
    if len(labels) >= 3 and labels[0]:
        return labels[0]
    return None


class TenantResolver:
    def __init__(self, lookup=None, header=None):
        self.lookup = lookup or TenantLookup()
        self.header = header or erp_setting("TENANCY", "HEADER")

    def resolve(self, request):
        for source, attempt in (
            (ResolutionSource.HEADER, self._from_header),
            (ResolutionSource.SUBDOMAIN, self._from_subdomain),
            (ResolutionSource.USER_AFFILIATION, self._from_user),
        ):
            tenant = attempt(request)
            if tenant is not None:
                return TenantContext(tenant=tenant, source=source)
        return TenantContext.empty()

    def _from_header(self, request):
        tenant_id = request.headers.get(self.header)
        if not tenant_id:
            return None
        tenant = self.lookup.find_by_id(tenant_id)
        if tenant is None:
            logger.info("Tenant header %s=%r matched no tenant", self.header, tenant_id)
        elif not tenant.is_active:
            # Header resolution does not filter by status.
            logger.warning("Tenant %s resolved by header while %s", tenant.pk, tenant.status)
        return tenant

    def _from_subdomain(self, request):
        subdomain = extract_subdomain(request.get_host())
        if subdomain is None:
            return None
        return self.lookup.find_by_routing_key(subdomain, status=Tenant.Status.ACTIVE)

    def _from_user(self, request):
        user = getattr(request, "user", None)
        if user is None or not user.is_authenticated:
            return None
        try:
            tenant = getattr(user, "tenant", None)
        except DatabaseError as exc:
            raise TenantStoreUnavailable() from exc
        if tenant is None or tenant.is_deleted:
            return None
        return tenant
