"""Who, where and for which tenant an audited change happened."""
from dataclasses import dataclass
from typing import Any, Optional

from tenants.context import get_tenant_context

USER_AGENT_MAX_LENGTH = 500


def get_client_ip(request):
    """Extract IP, respecting X-Forwarded-For from the load balancer."""
    xff = request.META.get("HTTP_X_FORWARDED_FOR")
    if xff:
        return xff.split(",")[0].strip()
    return request.META.get("REMOTE_ADDR")


@dataclass(frozen=True)
class AuditContext:
    user: Optional[Any] = None
    tenant: Optional[Any] = None
    url: str = ""
    ip_address: Optional[str] = None
    user_agent: str = ""

    @classmethod
    def from_request(cls, request):
        user = getattr(request, "user", None)
        return cls(
            user=user if user is not None and user.is_authenticated else None,
            tenant=get_tenant_context(request).tenant,
            url=request.build_absolute_uri(),
            ip_address=get_client_ip(request),
            user_agent=request.META.get("HTTP_USER_AGENT", "")[:USER_AGENT_MAX_LENGTH],
        )

    @classmethod
    def system(cls, tenant=None):
        """Context for changes made outside a request (commands, jobs)."""
        return cls(tenant=tenant)
