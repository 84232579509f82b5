"""Bearer-token authentication for API clients."""
import logging

logger = logging.getLogger(__name__)

BEARER_PREFIX = "bearer "


class ApiTokenAuthenticationMiddleware:
    """Authenticate ``Authorization: Bearer <token>`` requests.

    Runs after ``AuthenticationMiddleware``; a session user always wins.
    Token-authenticated requests carry no session cookie, so CSRF checks are
    skipped for them.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if not request.user.is_authenticated:
            header = request.headers.get("Authorization", "")
            if header.lower().startswith(BEARER_PREFIX):
                from .models import User

                user = User.objects.get_by_api_token(header[len(BEARER_PREFIX):])
                if user is not None:
                    request.user = user
                    request._dont_enforce_csrf_checks = True
                else:
                    logger.info("Rejected API token from %s", request.META.get("REMOTE_ADDR"))

        return self.get_response(request)
