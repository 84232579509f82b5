"""Access control decorators for API views."""
from functools import wraps

from erp.errors import NotAuthenticated, PermissionDenied


def api_login_required(view_func):
    """Reject anonymous requests with a 401 instead of a login redirect."""
    @wraps(view_func)
    def _wrapped(request, *args, **kwargs):
        if not request.user.is_authenticated:
            raise NotAuthenticated()
        return view_func(request, *args, **kwargs)
    return _wrapped


def permission_required(perm):
    """Restrict view to users holding ``perm``."""
    def decorator(view_func):
        @wraps(view_func)
        def _wrapped(request, *args, **kwargs):
            if not request.user.has_perm(perm):
                raise PermissionDenied(f"Access denied. Permission '{perm}' required.")
            return view_func(request, *args, **kwargs)
        return _wrapped
    return decorator


def tenant_admin_required(view_func):
    """Restrict view to tenant admins only."""
    @wraps(view_func)
    def _wrapped(request, *args, **kwargs):
        if not request.user.is_tenant_admin:
            raise PermissionDenied("Access denied. Tenant admin privileges required.")
        return view_func(request, *args, **kwargs)
    return _wrapped
