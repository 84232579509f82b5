"""Schema redirect for ``schema`` isolation tenants."""
import logging

from django.db import connection
from django.utils.module_loading import import_string

from erp.conf import erp_setting

logger = logging.getLogger(__name__)


class SchemaRedirector:
    """Point subsequent storage operations of this request at a tenant namespace."""

    def activate(self, tenant):
        raise NotImplementedError

    def reset(self):
        raise NotImplementedError


class NullSchemaRedirector(SchemaRedirector):
    """For storage engines without schemas."""

    def activate(self, tenant):
        logger.debug("Schema redirect skipped for tenant %s (null redirector)", tenant.pk)

    def reset(self):
        pass


class DjangoTenantsSchemaRedirector(SchemaRedirector):
    """Sets the Postgres ``search_path`` through the django-tenants backend."""

    def __init__(self, conn=None):
        self.connection = conn or connection

    def activate(self, tenant):
        # search_path becomes "<schema>, public"
        self.connection.set_schema(tenant.schema_name, include_public=True)
        logger.debug("search_path set to %s for tenant %s", tenant.schema_name, tenant.pk)

    def reset(self):
        self.connection.set_schema_to_public()


def get_schema_redirector():
    return import_string(erp_setting("TENANCY", "SCHEMA_REDIRECTOR"))()
