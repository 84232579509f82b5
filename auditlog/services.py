"""Read side of the audit trail: filtering, history, statistics, export, retention."""
import logging
import uuid
from dataclasses import dataclass, fields
from datetime import datetime, time, timedelta
from typing import Optional

from django.conf import settings
from django.core.paginator import Paginator
from django.db.models import Count
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from erp.conf import erp_setting
from erp.errors import PermissionDenied, ValidationFailed
from .models import AuditRecord

logger = logging.getLogger(__name__)

PURGE_PERMISSION = "auditlog.purge_auditrecord"

EXPORT_COLUMNS = ["Date/Time", "User", "Event", "Subject", "ID", "Description", "IP Address"]


def _parse_moment(value, end_of_day=False):
    """Accept an ISO datetime or a plain date; dates cover the whole day."""
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        moment = value
    else:
        # parse_date first: parse_datetime also accepts a bare date (as midnight).
        # Both return None for unknown formats and raise for impossible dates.
        try:
            day = parse_date(value)
            moment = parse_datetime(value) if day is None else None
        except ValueError:
            day = moment = None
        if day is not None:
            moment = datetime.combine(day, time.max if end_of_day else time.min)
        elif moment is None:
            raise ValidationFailed(errors={"date": [f"Invalid date: {value!r}"]})
    if timezone.is_naive(moment):
        moment = timezone.make_aware(moment)
    return moment


def _parse_uuid(name, value):
    try:
        return uuid.UUID(str(value))
    except ValueError as exc:
        raise ValidationFailed(errors={name: [f"Invalid identifier: {value!r}"]}) from exc


@dataclass
class AuditFilters:
    user_id: Optional[uuid.UUID] = None
    tenant_id: Optional[uuid.UUID] = None
    event: Optional[str] = None
    subject_type: Optional[str] = None
    subject_id: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    tag: Optional[str] = None

    @classmethod
    def from_query(cls, query):
        """Build filters from a request ``QueryDict``; blank values are ignored."""
        values = {f.name: query.get(f.name) or None for f in fields(cls)}
        values["start_date"] = _parse_moment(values["start_date"])
        values["end_date"] = _parse_moment(values["end_date"], end_of_day=True)
        for name in ("user_id", "tenant_id"):
            if values[name]:
                values[name] = _parse_uuid(name, values[name])
        return cls(**values)

    def apply(self, qs):
        if self.user_id:
            qs = qs.filter(user_id=self.user_id)
        if self.tenant_id:
            qs = qs.filter(tenant_id=self.tenant_id)
        if self.event:
            qs = qs.filter(event=self.event)
        if self.subject_type:
            qs = qs.filter(subject_type=self.subject_type)
        if self.subject_id:
            qs = qs.filter(subject_id=str(self.subject_id))
        if self.start_date:
            qs = qs.filter(created_at__gte=self.start_date)
        if self.end_date:
            qs = qs.filter(created_at__lte=self.end_date)
        if self.tag:
            qs = qs.with_tag(self.tag)
        return qs


def _newest_first(qs):
    return qs.select_related("user").order_by("-created_at", "-id")


def list_records(filters=None, page=1, page_size=None):
    """One page of records matching ``filters``, newest first."""
    page_size = min(page_size or settings.DEFAULT_PAGE_SIZE, settings.MAX_PAGE_SIZE)
    qs = _newest_first((filters or AuditFilters()).apply(AuditRecord.objects.all()))
    return Paginator(qs, page_size).get_page(page)


def subject_history(subject_type, subject_id, tenant_id=None):
    qs = AuditRecord.objects.for_subject(subject_type, subject_id)
    if tenant_id:
        qs = qs.filter(tenant_id=tenant_id)
    return list(_newest_first(qs))


def _since(days):
    return timezone.now() - timedelta(days=days)


def user_activity(user_id, days=30):
    return list(_newest_first(AuditRecord.objects.filter(user_id=user_id, created_at__gte=_since(days))))


def tenant_activity(tenant_id, days=30):
    return list(_newest_first(AuditRecord.objects.filter(tenant_id=tenant_id, created_at__gte=_since(days))))


def _grouped(qs, field):
    rows = qs.values(field).annotate(count=Count("id")).order_by("-count", field)
    return {str(row[field]): row["count"] for row in rows}


def activity_stats(tenant_id=None, start=None, end=None, top_n=10):
    """Counts by event, by subject type and top acting users.

    ``start`` and ``end`` bound the window independently. Without either the
    window is the last ``STATS_WINDOW_DAYS`` days.
    """
    qs = AuditRecord.objects.all()
    if tenant_id:
        qs = qs.filter(tenant_id=tenant_id)
    if start or end:
        if start:
            qs = qs.filter(created_at__gte=start)
        if end:
            qs = qs.filter(created_at__lte=end)
    else:
        qs = qs.filter(created_at__gte=_since(erp_setting("AUDIT", "STATS_WINDOW_DAYS")))

    top_users = (
        qs.filter(user__isnull=False)
        .values("user_id")
        .annotate(count=Count("id"))
        .order_by("-count", "user_id")[:top_n]
    )
    return {
        "total_events": qs.count(),
        "events_by_type": _grouped(qs, "event"),
        "events_by_subject": _grouped(qs, "subject_type"),
        "top_users": {str(row["user_id"]): row["count"] for row in top_users},
    }


def export_rows(filters=None, max_rows=None):
    """Rows for CSV export plus the total match count.

    Returns ``(rows, total, exceeded)``; no rows are built when the match count
    exceeds ``max_rows``.
    """
    max_rows = max_rows or settings.CSV_EXPORT_MAX_ROWS
    qs = _newest_first((filters or AuditFilters()).apply(AuditRecord.objects.all()))
    total = qs.count()
    if total > max_rows:
        return [], total, True
    rows = [
        [
            record.created_at.isoformat(),
            record.actor_name,
            record.event,
            record.subject_type,
            record.subject_id,
            record.description,
            record.ip_address or "",
        ]
        for record in qs.iterator()
    ]
    return rows, total, False


def purge_expired(retention_days=None, *, actor):
    """Delete records older than ``retention_days``. Requires the purge permission."""
    if actor is None or not actor.is_active or not actor.has_perm(PURGE_PERMISSION):
        raise PermissionDenied("Purging the audit trail requires elevated privileges")
    if retention_days is None:
        retention_days = erp_setting("AUDIT", "RETENTION_DAYS")
    if retention_days < 0:
        raise ValidationFailed(errors={"retention_days": ["Must not be negative"]})

    cutoff = _since(retention_days)
    deleted = AuditRecord.objects.purge_older_than(cutoff)
    logger.warning("Audit purge by %s removed %d record(s) older than %s", actor.pk, deleted, cutoff)
    return deleted
