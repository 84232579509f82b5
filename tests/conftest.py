import itertools

import pytest
from django.contrib.auth.models import AnonymousUser

from accounts.models import User
from tenants.models import Tenant

PASSWORD = "correct-horse-battery"


@pytest.fixture
def make_tenant(db):
    def _make(subdomain="acme", **kwargs):
        kwargs.setdefault("name", subdomain.title())
        return Tenant.objects.create(subdomain=subdomain, **kwargs)
    return _make


@pytest.fixture
def tenant(make_tenant):
    return make_tenant("acme")


@pytest.fixture
def make_user(db):
    counter = itertools.count()

    def _make(tenant=None, **kwargs):
        email = kwargs.pop("email", f"user{next(counter)}@example.com")
        return User.objects.create_user(email=email, password=PASSWORD, tenant=tenant, **kwargs)
    return _make


@pytest.fixture
def admin_user(make_user, tenant):
    return make_user(
        tenant, email="admin@acme.test", first_name="Ada", last_name="Admin",
        role=User.Role.TENANT_ADMIN, is_staff=True, is_superuser=True,
    )


@pytest.fixture
def anonymous_request(rf):
    """Factory for RequestFactory requests with an anonymous user attached."""
    def _make(path="/api/health/", **extra):
        request = rf.get(path, **extra)
        request.user = AnonymousUser()
        return request
    return _make


class ApiClient:
    """Django test client that sends a bearer token and tenant header."""

    def __init__(self, client, token, tenant=None):
        self.client = client
        self.token = token
        self.tenant = tenant

    def _headers(self, extra):
        headers = {"HTTP_AUTHORIZATION": f"Bearer {self.token}"}
        if self.tenant is not None:
            headers["HTTP_X_TENANT_ID"] = str(self.tenant.pk)
        headers.update(extra)
        return headers

    def get(self, path, data=None, **extra):
        return self.client.get(path, data or {}, **self._headers(extra))

    def post(self, path, payload, **extra):
        return self.client.post(path, payload, content_type="application/json", **self._headers(extra))

    def patch(self, path, payload, **extra):
        return self.client.patch(path, payload, content_type="application/json", **self._headers(extra))

    def delete(self, path, **extra):
        return self.client.delete(path, **self._headers(extra))


@pytest.fixture
def make_api_client(client):
    def _make(user, tenant=None):
        return ApiClient(client, user.issue_api_token(), tenant)
    return _make


@pytest.fixture
def api_client(make_api_client, admin_user, tenant):
    return make_api_client(admin_user, tenant)
