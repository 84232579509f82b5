"""Consistent JSON envelope for API responses."""
from django.core.serializers.json import DjangoJSONEncoder
from django.http import JsonResponse


def api_response(data=None, message="Success", status=200):
    return JsonResponse(
        {"success": True, "message": message, "data": data},
        status=status,
        encoder=DjangoJSONEncoder,
    )


def api_error(message, status=400, errors=None, code=None):
    body = {"success": False, "message": message}
    if code:
        body["code"] = code
    if errors:
        body["errors"] = errors
    return JsonResponse(body, status=status, encoder=DjangoJSONEncoder)


def paginated_response(page, items, message="Success"):
    """Wrap a Django ``Page`` whose objects were serialized into ``items``."""
    paginator = page.paginator
    return JsonResponse(
        {
            "success": True,
            "message": message,
            "data": items,
            "pagination": {
                "total": paginator.count,
                "per_page": paginator.per_page,
                "current_page": page.number,
                "last_page": paginator.num_pages,
                "has_next": page.has_next(),
            },
        },
        encoder=DjangoJSONEncoder,
    )
