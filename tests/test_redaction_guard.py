"""Every audited model must keep credential-like attributes out of the trail."""
import pytest
from django.apps import apps

from auditlog.auditable import Auditable
from auditlog.redaction import redacted_names

SENSITIVE_MARKERS = ("password", "token", "secret")

AUDITED_MODELS = [model for model in apps.get_models() if issubclass(model, Auditable)]


def test_audited_models_are_registered():
    labels = {model._meta.label for model in AUDITED_MODELS}
    assert {"tenants.Tenant", "accounts.User", "inventory.Product"} <= labels


@pytest.mark.parametrize("model", AUDITED_MODELS, ids=lambda m: m._meta.label)
def test_sensitive_fields_are_redacted(model):
    redacted = redacted_names(model.audit_hidden_fields)
    for field in model._meta.concrete_fields:
        if any(marker in field.attname for marker in SENSITIVE_MARKERS):
            assert field.attname in redacted, f"{model._meta.label}.{field.attname} would be audited"
