"""Explicit audited writes.

Business code mutates observed models through ``AuditedWriter`` instead of
relying on model signals. Each mutation and its audit record share one
transaction, so a record is only ever committed together with the change it
describes, and a failed audit write undoes the change.
"""
import json

from django.core.serializers.json import DjangoJSONEncoder
from django.db import transaction

from .recorder import AuditRecorder


class Auditable:
    """Mixin for models whose lifecycle is written to the audit trail."""

    #: Extra attribute names never written to the audit trail.
    audit_hidden_fields = ()

    @classmethod
    def audit_subject_type(cls):
        return cls._meta.label

    def audit_snapshot(self):
        """Concrete field values keyed by attribute name, as JSON-safe data."""
        values = {field.attname: getattr(self, field.attname) for field in self._meta.concrete_fields}
        return json.loads(json.dumps(values, cls=DjangoJSONEncoder))

    def audit_history(self):
        from .models import AuditRecord
        return AuditRecord.objects.for_subject(self.audit_subject_type(), self.pk).order_by("-created_at", "-id")

    def latest_audit_record(self):
        return self.audit_history().first()


class AuditedWriter:
    def __init__(self, context, recorder=None):
        self.context = context
        self.recorder = recorder or AuditRecorder()

    def create(self, model, **fields):
        with transaction.atomic():
            instance = model(**fields)
            instance.save()
            self._record(instance, "created", new=instance.audit_snapshot())
        return instance

    def update(self, instance, **changes):
        with transaction.atomic():
            before = self._stored(instance).audit_snapshot()
            for name, value in changes.items():
                setattr(instance, name, value)
            instance.save()
            self._record(instance, "updated", old=before, new=instance.audit_snapshot())
        return instance

    def delete(self, instance):
        with transaction.atomic():
            stored = self._stored(instance)
            before = stored.audit_snapshot()
            pk = stored.pk
            instance.delete()
            self._record(instance, "deleted", old=before, subject_id=pk)

    def log(self, instance, event, tags=None, metadata=None, snapshot=False):
        """Record a free-form event such as ``exported`` or ``approved``."""
        return self._record(
            instance, event,
            new=instance.audit_snapshot() if snapshot else None,
            tags=tags, metadata=metadata,
        )

    def _stored(self, instance):
        manager = type(instance)._base_manager
        return manager.select_for_update().get(pk=instance.pk)

    def _record(self, instance, event, old=None, new=None, subject_id=None, tags=None, metadata=None):
        return self.recorder.record(
            self.context,
            event,
            instance.audit_subject_type(),
            subject_id if subject_id is not None else instance.pk,
            old=old,
            new=new,
            hidden=instance.audit_hidden_fields,
            tags=tags,
            metadata=metadata,
        )
