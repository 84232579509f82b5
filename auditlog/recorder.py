"""Audit Recorder – writes one immutable record per lifecycle event."""
import logging
import uuid

from django.db import DatabaseError, transaction

from erp.conf import erp_setting
from erp.errors import AuditWriteFailed
from .models import AuditRecord, AuditTag
from .redaction import redact

logger = logging.getLogger(__name__)


class AuditRecorder:
    """Synchronous, append-only audit writer.

    A failed write raises ``AuditWriteFailed``; there are no retries. When
    called inside the mutation's transaction the failure rolls the mutation
    back with it.
    """

    def record(self, context, event, subject_type, subject_id, *, old=None, new=None,
               hidden=(), tags=None, metadata=None):
        if not erp_setting("FEATURES", "AUDIT_LOGGING"):
            return None

        tags = list(dict.fromkeys(tags or []))
        record = AuditRecord(
            audit_id=uuid.uuid4(),
            user=context.user,
            tenant=context.tenant,
            event=event,
            subject_type=subject_type,
            subject_id=str(subject_id),
            old_values=redact(old, hidden),
            new_values=redact(new, hidden),
            url=context.url,
            ip_address=context.ip_address,
            user_agent=context.user_agent,
            tags=tags,
            metadata=metadata or {},
        )
        try:
            with transaction.atomic():
                record.save(force_insert=True)
                AuditTag.objects.bulk_create([AuditTag(record=record, name=tag) for tag in tags])
        except DatabaseError as exc:
            logger.exception("Audit write failed for %s %s#%s", event, subject_type, subject_id)
            raise AuditWriteFailed() from exc

        logger.debug("Audited %s %s#%s as %s", event, subject_type, subject_id, record.audit_id)
        return record
