"""Custom User model – the acting identity for tenant resolution and auditing."""
import hashlib
import secrets
import uuid

from django.conf import settings
from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.db import models

from auditlog.auditable import Auditable


def hash_api_token(token):
    return hashlib.sha256(token.strip().encode()).hexdigest()


class UserManager(BaseUserManager):
    """Custom manager for email-based authentication."""

    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError("Email is required")
        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("role", User.Role.TENANT_ADMIN)
        return self.create_user(email, password, **extra_fields)

    def get_by_api_token(self, token):
        """Active user owning ``token``, or ``None``."""
        if not token:
            return None
        return self.filter(api_token=hash_api_token(token), is_active=True).select_related("tenant").first()


class User(Auditable, AbstractBaseUser, PermissionsMixin):
    """User affiliated with at most one tenant."""

    class Role(models.TextChoices):
        TENANT_ADMIN = "admin", "Tenant Admin"
        TENANT_USER = "user", "Tenant User"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(unique=True)
    first_name = models.CharField(max_length=150, blank=True)
    last_name = models.CharField(max_length=150, blank=True)
    tenant = models.ForeignKey(
        "tenants.Tenant", on_delete=models.PROTECT, null=True, blank=True, related_name="users"
    )
    role = models.CharField(max_length=10, choices=Role.choices, default=Role.TENANT_USER)
    locale = models.CharField(max_length=10, blank=True, default="")
    timezone = models.CharField(max_length=64, blank=True, default="")
    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)
    date_joined = models.DateTimeField(auto_now_add=True)

    # sha256 digest; the plaintext is shown once by issue_api_token()
    api_token = models.CharField(max_length=64, blank=True, default="", db_index=True)

    audit_hidden_fields = ("last_login",)

    objects = UserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["first_name", "last_name"]

    class Meta:
        app_label = "accounts"

    def __str__(self):
        return self.email

    @property
    def is_tenant_admin(self):
        return self.role == self.Role.TENANT_ADMIN

    @property
    def display_name(self):
        if self.first_name:
            return f"{self.first_name} {self.last_name}".strip()
        return self.email

    def issue_api_token(self):
        """Generate a fresh API token. Returns the plaintext token."""
        token = secrets.token_urlsafe(40)
        self.api_token = hash_api_token(token)
        self.save(update_fields=["api_token"])
        return token

    def revoke_api_token(self):
        self.api_token = ""
        self.save(update_fields=["api_token"])

    def preferred_locale(self):
        return self.locale or settings.LANGUAGE_CODE
