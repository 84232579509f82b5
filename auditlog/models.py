"""Audit trail – immutable, append-only records of entity lifecycle events."""
import uuid

from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from django.db import models
from django.utils import timezone

from erp.errors import AuditRecordImmutable


class InsertOnlyQuerySet(models.QuerySet):
    def update(self, **kwargs):
        raise AuditRecordImmutable()

    def delete(self):
        raise AuditRecordImmutable()


class InsertOnlyModel(models.Model):
    """Rows are written once; saving an existing row or deleting one raises."""

    class Meta:
        abstract = True

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise AuditRecordImmutable()
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise AuditRecordImmutable()


class AuditRecordQuerySet(InsertOnlyQuerySet):

    def purge_older_than(self, cutoff):
        """Delete records created before ``cutoff``. The retention purge only.

        Returns the number of audit records removed (tag rows not counted).
        """
        expired = self.filter(created_at__lt=cutoff)
        _, per_model = models.QuerySet.delete(expired)
        return per_model.get(self.model._meta.label, 0)

    def for_subject(self, subject_type, subject_id):
        return self.filter(subject_type=subject_type, subject_id=str(subject_id))

    def with_tag(self, tag):
        return self.filter(tag_entries__name=tag).distinct()


class AuditRecord(InsertOnlyModel):
    """Immutable audit trail entry.

    ``user`` and ``tenant`` are back-references only: no database constraint
    and no cascade, so deleting either never touches audit history.
    """

    class Event(models.TextChoices):
        CREATED = "created", "Created"
        UPDATED = "updated", "Updated"
        DELETED = "deleted", "Deleted"

    id = models.BigAutoField(primary_key=True)
    audit_id = models.UUIDField(default=uuid.uuid4, unique=True, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.DO_NOTHING, db_constraint=False,
        null=True, blank=True, related_name="+",
    )
    tenant = models.ForeignKey(
        "tenants.Tenant", on_delete=models.DO_NOTHING, db_constraint=False,
        null=True, blank=True, related_name="+",
    )
    event = models.CharField(max_length=50)
    subject_type = models.CharField(max_length=150)
    subject_id = models.CharField(max_length=64)
    old_values = models.JSONField(null=True, blank=True, encoder=DjangoJSONEncoder)
    new_values = models.JSONField(null=True, blank=True, encoder=DjangoJSONEncoder)
    url = models.TextField(blank=True, default="")
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.TextField(blank=True, default="")
    tags = models.JSONField(default=list, blank=True)
    metadata = models.JSONField(default=dict, blank=True, encoder=DjangoJSONEncoder)
    created_at = models.DateTimeField(default=timezone.now, editable=False, db_index=True)

    objects = AuditRecordQuerySet.as_manager()

    class Meta:
        app_label = "auditlog"
        db_table = "audit_log"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["subject_type", "subject_id"], name="idx_audit_subject"),
            models.Index(fields=["user", "created_at"], name="idx_audit_user_ts"),
            models.Index(fields=["tenant", "created_at"], name="idx_audit_tenant_ts"),
            models.Index(fields=["event"], name="idx_audit_event"),
        ]
        permissions = [
            ("purge_auditrecord", "Can purge audit records past retention"),
        ]

    def __str__(self):
        return f"{self.created_at} [{self.event}] {self.subject_type}#{self.subject_id}"

    def changes(self):
        """Field-level diff as ``{field: {"old": ..., "new": ...}}``.

        Only computed when both snapshots exist. A key present on one side only
        is compared against ``None``.
        """
        if self.old_values is None or self.new_values is None:
            return {}
        diff = {}
        keys = list(self.new_values) + [k for k in self.old_values if k not in self.new_values]
        for key in keys:
            old = self.old_values.get(key)
            new = self.new_values.get(key)
            if old != new:
                diff[key] = {"old": old, "new": new}
        return diff

    @property
    def actor_name(self):
        if self.user_id is None:
            return "System"
        user = self.user
        return user.display_name if user is not None else str(self.user_id)

    @property
    def description(self):
        actor = self.actor_name
        subject = f"{self.subject_type} #{self.subject_id}"
        if self.event in (self.Event.CREATED, self.Event.UPDATED, self.Event.DELETED, "viewed"):
            return f"{actor} {self.event} {subject}"
        if self.event == "exported":
            return f"{actor} exported {self.subject_type} data"
        return f"{actor} performed {self.event} on {subject}"


class AuditTag(InsertOnlyModel):
    """Tag index for filtering records by tag on any database engine.

    Insert-only like its record; rows go away only through the purge cascade.
    """
    id = models.BigAutoField(primary_key=True)
    record = models.ForeignKey(AuditRecord, on_delete=models.CASCADE, related_name="tag_entries")
    name = models.CharField(max_length=100, db_index=True)

    objects = InsertOnlyQuerySet.as_manager()

    class Meta:
        app_label = "auditlog"
        db_table = "audit_log_tag"
        unique_together = [("record", "name")]

    def __str__(self):
        return self.name
