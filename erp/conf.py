"""Access to the ``ERP`` settings dict with defaults."""
from django.conf import settings

DEFAULTS = {
    "FEATURES": {
        "AUDIT_LOGGING": True,
    },
    "TENANCY": {
        "ENABLED": True,
        "HEADER": "X-Tenant-ID",
        "DEFAULT_ISOLATION": "row_level",
        "SCHEMA_REDIRECTOR": "tenants.schema.NullSchemaRedirector",
    },
    "AUDIT": {
        "REDACTED_FIELDS": [],
        "RETENTION_DAYS": 365,
        "STATS_WINDOW_DAYS": 30,
    },
    "LOCALIZATION": {
        "SUPPORTED_LOCALES": ["en"],
    },
}


def erp_setting(section, key):
    """Read ``settings.ERP[section][key]``, falling back to the built-in default."""
    configured = getattr(settings, "ERP", {}).get(section, {})
    if key in configured:
        return configured[key]
    return DEFAULTS[section][key]
