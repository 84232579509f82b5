"""Access control decorators."""
from functools import wraps

from erp.errors import PermissionDenied
from .context import get_tenant_context


def tenant_required(view_func):
    """Reject the request unless a tenant was resolved and the user may act in it.

    Authenticated users other than superusers must belong to the resolved
    tenant; a header naming another tenant is ``PermissionDenied``.
    """
    @wraps(view_func)
    def _wrapped(request, *args, **kwargs):
        tenant = get_tenant_context(request).require_tenant()
        user = getattr(request, "user", None)
        if user is not None and user.is_authenticated and not user.is_superuser:
            if user.tenant_id != tenant.pk:
                raise PermissionDenied("You do not belong to this tenant")
        return view_func(request, *args, **kwargs)
    return _wrapped
