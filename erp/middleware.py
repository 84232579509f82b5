"""Project-wide middleware: request logging, localization, API error rendering."""
import logging
import time
import uuid
import zoneinfo

from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.http import Http404
from django.utils import timezone, translation
from django_ratelimit.exceptions import Ratelimited

from .errors import ERPError
from .localization import detect_locale, detect_timezone
from .responses import api_error

logger = logging.getLogger("erp.api")

API_PREFIX = "/api/"


def render_api_exception(exc):
    """Turn an ``ERPError`` into the JSON error envelope."""
    return api_error(exc.message, status=exc.status_code, errors=exc.errors, code=exc.code)


class RequestLoggingMiddleware:
    """Structured request/response logging with an ``X-Request-ID`` echo."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        started = time.monotonic()
        request_id = request.headers.get("X-Request-ID") or f"req_{uuid.uuid4().hex[:16]}"
        request.request_id = request_id

        logger.info(
            "API request %s %s",
            request.method, request.path,
            extra={
                "request_id": request_id,
                "ip": request.META.get("REMOTE_ADDR"),
                "user_agent": request.headers.get("User-Agent", ""),
            },
        )

        response = self.get_response(request)

        user = getattr(request, "user", None)
        logger.info(
            "API response %s %s -> %s in %.2fms",
            request.method, request.path, response.status_code,
            (time.monotonic() - started) * 1000,
            extra={
                "request_id": request_id,
                "user_id": str(user.pk) if user is not None and user.is_authenticated else None,
                "tenant_id": str(getattr(request, "tenant_id", None) or "") or None,
            },
        )
        response["X-Request-ID"] = request_id
        return response


class LocaleMiddleware:
    """Activate the request locale. Must run after tenant resolution."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        locale = detect_locale(request)
        request.locale = locale
        translation.activate(locale)
        request.LANGUAGE_CODE = locale
        try:
            response = self.get_response(request)
        finally:
            translation.deactivate()
        response.headers.setdefault("Content-Language", locale)
        return response


class TimezoneMiddleware:
    """Activate the request timezone. Must run after tenant resolution."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        tz_name = detect_timezone(request)
        request.timezone = tz_name
        timezone.activate(zoneinfo.ZoneInfo(tz_name))
        try:
            return self.get_response(request)
        finally:
            timezone.deactivate()


class ApiErrorMiddleware:
    """Render view exceptions on ``/api/`` paths as JSON error envelopes.

    Exceptions this middleware does not recognise are left to Django.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        return self.get_response(request)

    def process_exception(self, request, exception):
        if not request.path.startswith(API_PREFIX):
            return None
        if isinstance(exception, ERPError):
            level = logging.ERROR if exception.status_code >= 500 else logging.INFO
            logger.log(level, "API error %s on %s: %s", exception.code, request.path, exception.message)
            return render_api_exception(exception)
        if isinstance(exception, Ratelimited):
            return api_error("Too many requests", status=429, code="rate_limited")
        if isinstance(exception, Http404):
            return api_error("Resource not found", status=404, code="not_found")
        if isinstance(exception, DjangoPermissionDenied):
            return api_error(str(exception) or "Forbidden", status=403, code="forbidden")
        return None
