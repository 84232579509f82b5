"""Product API – every read is tenant-gated, every write is audited."""
import json

from django.views.decorators.http import require_http_methods

from accounts.decorators import api_login_required, tenant_admin_required
from auditlog.auditable import AuditedWriter
from auditlog.context import AuditContext
from erp.errors import ResourceNotFound, ValidationFailed
from erp.responses import api_response
from tenants.context import get_tenant_context
from tenants.decorators import tenant_required
from .forms import ProductForm
from .models import Product


def _json_body(request):
    if not request.body:
        return {}
    try:
        data = json.loads(request.body)
    except (ValueError, UnicodeDecodeError):
        raise ValidationFailed("Request body must be valid JSON")
    if not isinstance(data, dict):
        raise ValidationFailed("Request body must be a JSON object")
    return data


def _get_product(request, product_id):
    product = Product.objects.for_context(get_tenant_context(request)).filter(pk=product_id).first()
    if product is None:
        raise ResourceNotFound("Product not found")
    return product


def serialize_product(product):
    return {
        "id": str(product.pk),
        "sku": product.sku,
        "name": product.name,
        "unit_price": str(product.unit_price),
        "active": product.active,
        "created_at": product.created_at,
        "updated_at": product.updated_at,
    }


@require_http_methods(["GET", "POST"])
@api_login_required
@tenant_required
def product_collection_view(request):
    context = get_tenant_context(request)

    if request.method == "GET":
        products = Product.objects.for_context(context)
        if request.GET.get("active") in ("true", "false"):
            products = products.filter(active=request.GET["active"] == "true")
        return api_response([serialize_product(p) for p in products])

    form = ProductForm({"active": True, **_json_body(request)}, tenant=context.tenant)
    if not form.is_valid():
        raise ValidationFailed(errors=form.errors.get_json_data())
    writer = AuditedWriter(AuditContext.from_request(request))
    product = writer.create(Product, tenant=context.tenant, **form.cleaned_data)
    return api_response(serialize_product(product), message="Product created", status=201)


@require_http_methods(["GET", "PATCH", "DELETE"])
@api_login_required
@tenant_required
def product_detail_view(request, product_id):
    product = _get_product(request, product_id)

    if request.method == "GET":
        return api_response(serialize_product(product))

    if request.method == "DELETE":
        return _delete_product(request, product)

    data = {field: getattr(product, field) for field in ProductForm.Meta.fields}
    data.update(_json_body(request))
    form = ProductForm(data, instance=Product.objects.get(pk=product.pk), tenant=product.tenant)
    if not form.is_valid():
        raise ValidationFailed(errors=form.errors.get_json_data())
    changes = {k: v for k, v in form.cleaned_data.items() if getattr(product, k) != v}
    if changes:
        AuditedWriter(AuditContext.from_request(request)).update(product, **changes)
    return api_response(serialize_product(product), message="Product updated")


@tenant_admin_required
def _delete_product(request, product):
    AuditedWriter(AuditContext.from_request(request)).delete(product)
    return api_response(None, message="Product deleted")
