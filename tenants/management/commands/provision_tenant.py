"""
Management command to provision a new tenant.

Usage:
    python manage.py provision_tenant \\
        --name "Acme Corp" \\
        --subdomain acme \\
        --domain erp.acme.com \\
        --isolation schema \\
        --admin-email admin@acme.com \\
        --admin-password "SecureP@ss123"

This will:
1. Create the tenant record (and its custom domain, if given)
2. For schema isolation, create the Postgres schema and run migrations in it
3. Create the initial admin user affiliated with the tenant
4. Record the provisioning in the audit trail
"""
import getpass

from django.core.management.base import BaseCommand, CommandError
from django.db import connection, transaction

from accounts.models import User
from auditlog.auditable import AuditedWriter
from auditlog.context import AuditContext
from erp.conf import erp_setting
from tenants.models import Domain, Tenant


class Command(BaseCommand):
    help = "Provision a new tenant with its initial admin user."

    def add_arguments(self, parser):
        parser.add_argument("--name", required=True, help="Tenant display name")
        parser.add_argument("--subdomain", required=True, help="Routing key (e.g. 'acme')")
        parser.add_argument("--domain", default=None, help="Optional custom host name (e.g. erp.acme.com)")
        parser.add_argument(
            "--isolation",
            choices=Tenant.IsolationMode.values,
            default=None,
            help="Isolation mode (defaults to ERP TENANCY.DEFAULT_ISOLATION)",
        )
        parser.add_argument("--admin-email", required=True, help="Initial admin user email")
        parser.add_argument("--admin-password", required=False, help="Admin password (prompted if omitted)")
        parser.add_argument("--admin-first-name", default="Admin", help="Admin first name")
        parser.add_argument("--admin-last-name", default="User", help="Admin last name")

    def handle(self, *args, **options):
        subdomain = options["subdomain"].lower().strip()
        name = options["name"].strip()
        isolation = options["isolation"] or erp_setting("TENANCY", "DEFAULT_ISOLATION")
        domain = (options["domain"] or "").lower().strip()
        admin_email = options["admin_email"].lower().strip()
        admin_password = options.get("admin_password")

        if not admin_password:
            admin_password = getpass.getpass("Enter admin password: ")
            confirm = getpass.getpass("Confirm admin password: ")
            if admin_password != confirm:
                raise CommandError("Passwords do not match.")

        if Tenant.all_objects.filter(subdomain=subdomain).exists():
            raise CommandError(f"Tenant with subdomain '{subdomain}' already exists.")
        if User.objects.filter(email=admin_email).exists():
            raise CommandError(f"User {admin_email} already exists.")
        if domain and Domain.objects.filter(domain=domain).exists():
            raise CommandError(f"Domain {domain} is already registered.")

        if isolation == Tenant.IsolationMode.SCHEMA and not hasattr(connection, "set_schema"):
            raise CommandError("Schema isolation requires the django-tenants database backend.")

        self.stdout.write(f"Creating tenant '{name}' ({isolation})...")
        writer = AuditedWriter(AuditContext.system())
        tenant = writer.create(Tenant, name=name, subdomain=subdomain, isolation_mode=isolation)
        if domain:
            Domain.objects.create(domain=domain, tenant=tenant, is_primary=True)
            self.stdout.write(self.style.SUCCESS(f"Domain {domain} registered."))

        if tenant.uses_schema:
            tenant.create_schema(check_if_exists=True, verbosity=options["verbosity"])
            self.stdout.write(self.style.SUCCESS(f"Schema '{tenant.schema_name}' created and migrated."))

        writer = AuditedWriter(AuditContext.system(tenant=tenant))
        with transaction.atomic():
            user = User.objects.create_user(
                email=admin_email,
                password=admin_password,
                first_name=options["admin_first_name"],
                last_name=options["admin_last_name"],
                role=User.Role.TENANT_ADMIN,
                tenant=tenant,
                is_staff=True,
            )
            writer.log(user, "created", tags=["provisioning"], snapshot=True)

        self.stdout.write(self.style.SUCCESS(
            f"Admin user {admin_email} created in tenant '{name}'.\n"
            f"\n"
            f"NEXT STEPS:\n"
            f"  1. DNS: point {subdomain}.<your domain> at the API server\n"
            f"  2. API clients may instead send the header "
            f"{erp_setting('TENANCY', 'HEADER')}: {tenant.pk}\n"
            f"  3. Issue an API token for the admin from the Django admin or shell.\n"
        ))
