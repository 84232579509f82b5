"""Tenant resolution middleware – runs once per request, before any tenant-scoped view."""
import logging

from erp.conf import erp_setting
from erp.errors import TenantContextAlreadyResolved, TenantStoreUnavailable
from erp.middleware import render_api_exception
from .context import TenantContext
from .resolver import TenantResolver
from .schema import get_schema_redirector

logger = logging.getLogger(__name__)


def bind_tenant_context(request, context):
    """Attach ``context`` to ``request``. A request is bound at most once."""
    if getattr(request, "tenant_context", None) is not None:
        raise TenantContextAlreadyResolved("Tenant context is already set for this request")
    request.tenant_context = context
    request.tenant = context.tenant
    request.tenant_id = context.tenant_id


class TenantContextMiddleware:
    """Resolve the request's tenant and publish it on the request.

    Must be placed after ``AuthenticationMiddleware`` so user affiliation can
    be used as the last resolution source.
    """

    def __init__(self, get_response, resolver=None, redirector=None):
        self.get_response = get_response
        self.enabled = erp_setting("TENANCY", "ENABLED")
        self.resolver = resolver or TenantResolver()
        self.redirector = redirector or get_schema_redirector()

    def __call__(self, request):
        if not self.enabled:
            bind_tenant_context(request, TenantContext.empty())
            return self.get_response(request)

        try:
            context = self.resolver.resolve(request)
        except TenantStoreUnavailable as exc:
            logger.exception("Tenant lookup failed for %s", request.path)
            return render_api_exception(exc)

        bind_tenant_context(request, context)
        logger.debug("Tenant for %s: %s (source=%s)", request.path, context.tenant_id, context.source.value)

        if not context.is_resolved or not context.tenant.uses_schema:
            return self.get_response(request)

        self.redirector.activate(context.tenant)
        try:
            return self.get_response(request)
        finally:
            self.redirector.reset()
