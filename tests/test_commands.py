"""Tests for the tenant provisioning command."""
import io

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from accounts.models import User
from auditlog.models import AuditRecord
from tenants.models import Domain, Tenant


def _provision(**overrides):
    options = {
        "name": "Globex Corp",
        "subdomain": "Globex-EU",
        "admin_email": "Ops@Globex.test",
        "admin_password": "correct-horse-battery",
        "stdout": io.StringIO(),
    }
    options.update(overrides)
    call_command("provision_tenant", **options)
    return options["stdout"].getvalue()


def test_provisions_row_level_tenant(db):
    output = _provision()

    tenant = Tenant.objects.get(subdomain="globex-eu")
    assert tenant.isolation_mode == Tenant.IsolationMode.ROW_LEVEL
    assert tenant.schema_name == "tenant_globex_eu"
    assert tenant.is_active

    admin = User.objects.get(email="ops@globex.test")
    assert admin.tenant == tenant
    assert admin.is_tenant_admin
    assert admin.check_password("correct-horse-battery")
    assert str(tenant.pk) in output


def test_provisioning_is_audited(db):
    _provision()
    tenant = Tenant.objects.get(subdomain="globex-eu")
    admin = User.objects.get(email="ops@globex.test")

    created = tenant.latest_audit_record()
    assert created.event == "created"
    assert created.user is None
    assert created.new_values["subdomain"] == "globex-eu"

    user_record = admin.latest_audit_record()
    assert user_record.event == "created"
    assert user_record.tenant == tenant
    assert user_record.tags == ["provisioning"]
    assert "password" not in user_record.new_values


def test_duplicate_subdomain_is_rejected(tenant):
    with pytest.raises(CommandError):
        _provision(subdomain="acme")
    assert not User.objects.filter(email="ops@globex.test").exists()


def test_schema_isolation_needs_tenant_backend(db):
    with pytest.raises(CommandError):
        _provision(isolation="schema")
    assert not Tenant.all_objects.exists()
    assert not AuditRecord.objects.exists()


def test_custom_domain_is_registered(db):
    _provision(domain="ERP.Globex.test")
    domain = Domain.objects.get(domain="erp.globex.test")
    assert domain.is_primary
    assert domain.tenant.subdomain == "globex-eu"

    with pytest.raises(CommandError):
        _provision(subdomain="globex-us", admin_email="us@globex.test", domain="erp.globex.test")
