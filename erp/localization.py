"""Locale and timezone detection.

Both follow the same ordered fallback chain as tenant resolution:
explicit override, header, user preference, tenant default, system default.
"""
import zoneinfo

from django.conf import settings

from .conf import erp_setting


def is_supported_locale(locale):
    return bool(locale) and locale in erp_setting("LOCALIZATION", "SUPPORTED_LOCALES")


def parse_accept_language(header):
    """Return the first supported primary language in an Accept-Language value."""
    for part in header.split(","):
        lang = part.split(";")[0].strip()
        primary = lang.split("-")[0].lower()
        if is_supported_locale(primary):
            return primary
    return None


def _tenant_setting(request, key):
    tenant = getattr(request, "tenant", None)
    if tenant is None:
        return None
    return (tenant.settings or {}).get(key)


def _user_attr(request, attr):
    user = getattr(request, "user", None)
    if user is None or not user.is_authenticated:
        return None
    return getattr(user, attr, None) or None


def detect_locale(request):
    """Priority: ?locale= > X-Locale / Accept-Language > user > tenant > default."""
    override = request.GET.get("locale")
    if is_supported_locale(override):
        return override

    header = request.headers.get("X-Locale") or request.headers.get("Accept-Language")
    if header:
        locale = parse_accept_language(header)
        if locale:
            return locale

    for candidate in (_user_attr(request, "locale"), _tenant_setting(request, "default_locale")):
        if is_supported_locale(candidate):
            return candidate

    return settings.LANGUAGE_CODE


def is_valid_timezone(name):
    if not name:
        return False
    try:
        zoneinfo.ZoneInfo(name)
    except (zoneinfo.ZoneInfoNotFoundError, ValueError):
        return False
    return True


def detect_timezone(request):
    """Priority: X-Timezone > user > tenant > default."""
    candidates = (
        request.headers.get("X-Timezone"),
        _user_attr(request, "timezone"),
        _tenant_setting(request, "default_timezone"),
    )
    for candidate in candidates:
        if is_valid_timezone(candidate):
            return candidate
    return settings.TIME_ZONE
