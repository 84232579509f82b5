"""Tests for the product API: tenant isolation and audited writes."""
import pytest

from accounts.models import User
from auditlog.models import AuditRecord
from inventory.models import Product

PRODUCTS = "/api/inventory/products/"


@pytest.fixture
def anvil(tenant):
    return Product.objects.create(tenant=tenant, sku="A-1", name="Anvil")


def test_create_is_audited(api_client, tenant, admin_user):
    response = api_client.post(PRODUCTS, {"sku": " rk-9 ", "name": "Rocket kit", "unit_price": "120.50"})

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["sku"] == "RK-9"
    assert data["active"] is True

    product = Product.objects.get(pk=data["id"])
    assert product.tenant == tenant
    record = product.latest_audit_record()
    assert record.event == "created"
    assert record.user == admin_user
    assert record.tenant == tenant
    assert record.new_values["unit_price"] == "120.50"


def test_list_only_shows_own_tenant(api_client, anvil, make_tenant):
    Product.objects.create(tenant=make_tenant("globex"), sku="G-1", name="Gadget")
    Product.objects.create(tenant=anvil.tenant, sku="B-1", name="Bolt", active=False)

    response = api_client.get(PRODUCTS)
    assert [p["sku"] for p in response.json()["data"]] == ["A-1", "B-1"]

    response = api_client.get(PRODUCTS, {"active": "false"})
    assert [p["sku"] for p in response.json()["data"]] == ["B-1"]


def test_other_tenants_product_is_not_found(api_client, make_tenant):
    foreign = Product.objects.create(tenant=make_tenant("globex"), sku="G-1", name="Gadget")
    response = api_client.get(f"{PRODUCTS}{foreign.pk}/")
    assert response.status_code == 404
    assert not AuditRecord.objects.exists()


def test_validation_errors_are_422(api_client, anvil):
    response = api_client.post(PRODUCTS, {"sku": "a-1", "name": "Duplicate", "unit_price": "1"})
    assert response.status_code == 422
    body = response.json()
    assert body["code"] == "validation_failed"
    assert "sku" in body["errors"]

    response = api_client.post(PRODUCTS, {"sku": "N-1", "name": "Negative", "unit_price": "-1"})
    assert response.status_code == 422
    assert "unit_price" in response.json()["errors"]
    assert not AuditRecord.objects.exists()


def test_malformed_json_is_422(api_client):
    response = api_client.client.post(
        PRODUCTS, "{not json", content_type="application/json", **api_client._headers({})
    )
    assert response.status_code == 422


def test_patch_audits_only_real_changes(api_client, anvil):
    url = f"{PRODUCTS}{anvil.pk}/"

    response = api_client.patch(url, {"unit_price": "12.00"})
    assert response.status_code == 200
    assert response.json()["data"]["unit_price"] == "12.00"

    api_client.patch(url, {"name": "Anvil"})

    records = list(anvil.audit_history())
    assert [r.event for r in records] == ["updated"]
    assert records[0].changes()["unit_price"] == {"old": "0.00", "new": "12.00"}


def test_delete_requires_tenant_admin(make_api_client, make_user, tenant, anvil):
    clerk = make_api_client(make_user(tenant), tenant)
    response = clerk.delete(f"{PRODUCTS}{anvil.pk}/")
    assert response.status_code == 403
    assert Product.objects.filter(pk=anvil.pk).exists()


def test_delete_is_audited(api_client, anvil):
    product_id = anvil.pk
    response = api_client.delete(f"{PRODUCTS}{product_id}/")

    assert response.status_code == 200
    assert not Product.objects.filter(pk=product_id).exists()
    record = AuditRecord.objects.for_subject("inventory.Product", product_id).get()
    assert record.event == "deleted"
    assert record.old_values["name"] == "Anvil"


def test_tenant_is_required(make_api_client, make_user):
    drifter = make_api_client(make_user(None))
    response = drifter.get(PRODUCTS)
    assert response.status_code == 400
    assert response.json()["code"] == "tenant_required"


@pytest.fixture
def acme_admin(make_user, tenant):
    return make_user(tenant, role=User.Role.TENANT_ADMIN)


def test_header_for_another_tenant_is_forbidden(make_api_client, acme_admin, make_tenant):
    globex = make_tenant("globex")
    gadget = Product.objects.create(tenant=globex, sku="G-1", name="Gadget")
    client = make_api_client(acme_admin, globex)

    response = client.get(PRODUCTS)
    assert response.status_code == 403
    assert response.json()["code"] == "forbidden"

    response = client.delete(f"{PRODUCTS}{gadget.pk}/")
    assert response.status_code == 403
    assert Product.objects.filter(pk=gadget.pk).exists()
    assert not AuditRecord.objects.exists()


def test_superuser_may_use_any_tenant_header(make_api_client, admin_user, make_tenant):
    globex = make_tenant("globex")
    Product.objects.create(tenant=globex, sku="G-1", name="Gadget")
    response = make_api_client(admin_user, globex).get(PRODUCTS)
    assert response.status_code == 200
    assert [p["sku"] for p in response.json()["data"]] == ["G-1"]
