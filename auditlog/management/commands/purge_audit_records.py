"""
Management command to apply the audit retention policy.

Usage:
    python manage.py purge_audit_records --operator security@example.com --days 365

The operator must hold the ``auditlog.purge_auditrecord`` permission
(superusers do). This is the only path that deletes audit records.
"""
from django.core.management.base import BaseCommand, CommandError

from accounts.models import User
from auditlog import services
from erp.conf import erp_setting
from erp.errors import ERPError


class Command(BaseCommand):
    help = "Delete audit records older than the retention horizon."

    def add_arguments(self, parser):
        parser.add_argument("--operator", required=True, help="Email of the privileged user running the purge")
        parser.add_argument(
            "--days",
            type=int,
            default=None,
            help="Retention horizon in days (defaults to ERP AUDIT.RETENTION_DAYS)",
        )

    def handle(self, *args, **options):
        days = options["days"]
        if days is None:
            days = erp_setting("AUDIT", "RETENTION_DAYS")
        operator = User.objects.filter(email=options["operator"].lower().strip()).first()
        if operator is None:
            raise CommandError(f"No user with email {options['operator']}.")

        try:
            deleted = services.purge_expired(days, actor=operator)
        except ERPError as exc:
            raise CommandError(exc.message) from exc

        self.stdout.write(self.style.SUCCESS(f"Purged {deleted} audit record(s) older than {days} days."))
