"""Tests for the ordered tenant resolution chain."""
import uuid
from unittest import mock

import pytest
from django.db import DatabaseError

from erp.errors import TenantRequired, TenantStoreUnavailable
from tenants.context import ResolutionSource, TenantContext
from tenants.lookup import TenantLookup
from tenants.models import Tenant
from tenants.resolver import TenantResolver, extract_subdomain


@pytest.mark.parametrize("host,expected", [
    ("acme.erp.local", "acme"),
    ("ACME.erp.local", "acme"),
    ("acme.erp.local:8000", "acme"),
    ("eu.acme.erp.local", "eu"),
    ("erp.local", None),
    ("localhost", None),
    ("localhost:8000", None),
    ("10.0.0.12", None),
    ("[::1]:8000", None),
    ("", None),
])
def test_extract_subdomain(host, expected):
    assert extract_subdomain(host) == expected


class TestHeaderSource:
    def test_header_resolves_tenant(self, tenant, anonymous_request):
        request = anonymous_request(HTTP_X_TENANT_ID=str(tenant.pk))
        context = TenantResolver().resolve(request)
        assert context.tenant == tenant
        assert context.source is ResolutionSource.HEADER

    def test_header_ignores_tenant_status(self, make_tenant, anonymous_request):
        suspended = make_tenant("t1", status=Tenant.Status.SUSPENDED)
        request = anonymous_request(HTTP_X_TENANT_ID=str(suspended.pk))
        context = TenantResolver().resolve(request)
        assert context.tenant == suspended
        assert context.source is ResolutionSource.HEADER

    def test_header_wins_over_subdomain(self, make_tenant, anonymous_request):
        by_header = make_tenant("globex")
        make_tenant("acme")
        request = anonymous_request(HTTP_X_TENANT_ID=str(by_header.pk), HTTP_HOST="acme.erp.local")
        assert TenantResolver().resolve(request).tenant == by_header

    def test_unknown_header_falls_through_to_subdomain(self, tenant, anonymous_request):
        request = anonymous_request(HTTP_X_TENANT_ID=str(uuid.uuid4()), HTTP_HOST="acme.erp.local")
        context = TenantResolver().resolve(request)
        assert context.tenant == tenant
        assert context.source is ResolutionSource.SUBDOMAIN

    def test_malformed_header_falls_through(self, db, anonymous_request):
        request = anonymous_request(HTTP_X_TENANT_ID="not-a-uuid")
        assert TenantResolver().resolve(request) == TenantContext.empty()

    def test_soft_deleted_tenant_is_not_resolved(self, tenant, anonymous_request):
        tenant.delete()
        request = anonymous_request(HTTP_X_TENANT_ID=str(tenant.pk))
        assert not TenantResolver().resolve(request).is_resolved

    def test_custom_header_name(self, tenant, anonymous_request):
        request = anonymous_request(HTTP_X_ORG=str(tenant.pk))
        context = TenantResolver(header="X-Org").resolve(request)
        assert context.tenant == tenant


class TestSubdomainSource:
    def test_active_tenant_matches(self, tenant, anonymous_request):
        context = TenantResolver().resolve(anonymous_request(HTTP_HOST="acme.erp.local"))
        assert context.tenant == tenant
        assert context.source is ResolutionSource.SUBDOMAIN

    @pytest.mark.parametrize("status", [Tenant.Status.INACTIVE, Tenant.Status.SUSPENDED])
    def test_non_active_tenant_falls_through(self, make_tenant, anonymous_request, status):
        make_tenant("acme", status=status)
        context = TenantResolver().resolve(anonymous_request(HTTP_HOST="acme.erp.local"))
        assert context == TenantContext.empty()

    def test_non_active_tenant_falls_through_to_user(self, make_tenant, make_user, anonymous_request):
        make_tenant("acme", status=Tenant.Status.SUSPENDED)
        home = make_tenant("globex")
        request = anonymous_request(HTTP_HOST="acme.erp.local")
        request.user = make_user(home)
        context = TenantResolver().resolve(request)
        assert context.tenant == home
        assert context.source is ResolutionSource.USER_AFFILIATION

    def test_two_label_host_has_no_routing_key(self, tenant, anonymous_request):
        context = TenantResolver().resolve(anonymous_request(HTTP_HOST="erp.local"))
        assert not context.is_resolved


class TestUserAffiliationSource:
    def test_user_tenant_is_used(self, tenant, make_user, anonymous_request):
        request = anonymous_request()
        request.user = make_user(tenant)
        context = TenantResolver().resolve(request)
        assert context.tenant == tenant
        assert context.source is ResolutionSource.USER_AFFILIATION

    def test_user_tenant_has_no_status_filter(self, make_tenant, make_user, anonymous_request):
        inactive = make_tenant("dormant", status=Tenant.Status.INACTIVE)
        request = anonymous_request()
        request.user = make_user(inactive)
        assert TenantResolver().resolve(request).tenant == inactive

    def test_user_without_tenant(self, make_user, anonymous_request):
        request = anonymous_request()
        request.user = make_user(None)
        assert TenantResolver().resolve(request) == TenantContext.empty()


def test_nothing_matches_gives_empty_context(db, anonymous_request):
    context = TenantResolver().resolve(anonymous_request(HTTP_HOST="localhost"))
    assert context.source is ResolutionSource.NONE
    assert context.tenant is None
    with pytest.raises(TenantRequired):
        context.require_tenant()


def test_lookup_failure_propagates(anonymous_request):
    queryset = mock.Mock()
    queryset.all.return_value.filter.return_value.first.side_effect = DatabaseError("down")
    resolver = TenantResolver(lookup=TenantLookup(queryset=queryset))
    request = anonymous_request(HTTP_X_TENANT_ID=str(uuid.uuid4()))
    with pytest.raises(TenantStoreUnavailable):
        resolver.resolve(request)


def test_context_is_frozen(tenant):
    context = TenantContext(tenant=tenant, source=ResolutionSource.HEADER)
    with pytest.raises(Exception):
        context.tenant = None
    assert context.tenant_id == tenant.pk
