"""Error taxonomy shared by every app.

Each error carries the HTTP status it maps to, so the API error middleware can
render it without a lookup table.
"""


class ERPError(Exception):
    """Base class for errors that are rendered as a JSON error envelope."""

    status_code = 400
    code = "error"
    default_message = "Business logic error"

    def __init__(self, message=None, status_code=None, errors=None, code=None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code
        self.errors = errors or {}
        super().__init__(self.message)


class TenantRequired(ERPError):
    status_code = 400
    code = "tenant_required"
    default_message = "A tenant is required for this request"


class TenantStoreUnavailable(ERPError):
    status_code = 503
    code = "tenant_store_unavailable"
    default_message = "Tenant lookup is unavailable"


class TenantContextAlreadyResolved(RuntimeError):
    """Raised when code tries to resolve a tenant twice for one request."""


class AuditWriteFailed(ERPError):
    status_code = 503
    code = "audit_write_failed"
    default_message = "The audit trail could not be written"


class AuditRecordImmutable(ERPError):
    status_code = 409
    code = "audit_record_immutable"
    default_message = "Audit records cannot be modified or deleted"


class ValidationFailed(ERPError):
    status_code = 422
    code = "validation_failed"
    default_message = "Validation failed"


class ResourceNotFound(ERPError):
    status_code = 404
    code = "not_found"
    default_message = "Resource not found"


class PermissionDenied(ERPError):
    status_code = 403
    code = "forbidden"
    default_message = "Forbidden"


class NotAuthenticated(ERPError):
    status_code = 401
    code = "unauthenticated"
    default_message = "Unauthenticated"
