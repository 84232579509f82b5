"""Test settings: SQLite instead of the django-tenants Postgres backend."""
from .settings import *  # noqa: F401,F403

DEBUG = False
SECRET_KEY = "test-secret-key"
ALLOWED_HOSTS = ["*"]

INSTALLED_APPS = [app for app in INSTALLED_APPS if app != "django_tenants"]  # noqa: F405

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}
DATABASE_ROUTERS = ()

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

SECURE_SSL_REDIRECT = False
SESSION_COOKIE_SECURE = False
CSRF_COOKIE_SECURE = False

STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.FileSystemStorage"},
    "staticfiles": {"BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage"},
}

ERP["TENANCY"]["SCHEMA_REDIRECTOR"] = "tenants.schema.NullSchemaRedirector"  # noqa: F405
ERP["FEATURES"]["AUDIT_LOGGING"] = True  # noqa: F405

RATELIMIT_ENABLE = False
