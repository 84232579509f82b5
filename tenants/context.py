"""Request-scoped tenant context.

The context is built once per request by ``TenantContextMiddleware`` and is
passed explicitly to every tenant-scoped call. It is never stored globally.
"""
import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from erp.errors import TenantRequired

if TYPE_CHECKING:
    from .models import Tenant


class ResolutionSource(str, enum.Enum):
    HEADER = "header"
    SUBDOMAIN = "subdomain"
    USER_AFFILIATION = "user-affiliation"
    NONE = "none"


@dataclass(frozen=True)
class TenantContext:
    tenant: Optional["Tenant"] = None
    source: ResolutionSource = ResolutionSource.NONE

    @classmethod
    def empty(cls):
        return cls()

    @property
    def is_resolved(self):
        return self.tenant is not None

    @property
    def tenant_id(self):
        return self.tenant.pk if self.tenant is not None else None

    def require_tenant(self):
        """Return the tenant or raise ``TenantRequired``."""
        if self.tenant is None:
            raise TenantRequired()
        return self.tenant


def get_tenant_context(request):
    """The context attached to ``request``; empty if resolution never ran."""
    return getattr(request, "tenant_context", None) or TenantContext.empty()
