"""Audit trail API – read-only, always scoped to the request's tenant."""
import csv

from django.http import HttpResponse
from django.views.decorators.http import require_GET
from django_ratelimit.decorators import ratelimit

from accounts.decorators import api_login_required, permission_required
from erp.errors import ResourceNotFound
from erp.responses import api_error, api_response, paginated_response
from tenants.decorators import tenant_required
from . import services
from .context import AuditContext
from .models import AuditRecord
from .recorder import AuditRecorder

VIEW_PERMISSION = "auditlog.view_auditrecord"


def _parse_int(value, default, minimum=1, maximum=None):
    try:
        v = int(value)
        v = max(v, minimum)
        if maximum:
            v = min(v, maximum)
        return v
    except (TypeError, ValueError):
        return default


def _tenant_filters(request):
    filters = services.AuditFilters.from_query(request.GET)
    filters.tenant_id = request.tenant_id
    return filters


def serialize_record(record, with_changes=False):
    data = {
        "id": record.id,
        "audit_id": str(record.audit_id),
        "event": record.event,
        "subject_type": record.subject_type,
        "subject_id": record.subject_id,
        "user_id": str(record.user_id) if record.user_id else None,
        "user": record.actor_name,
        "tenant_id": str(record.tenant_id) if record.tenant_id else None,
        "old_values": record.old_values,
        "new_values": record.new_values,
        "tags": record.tags,
        "metadata": record.metadata,
        "url": record.url,
        "ip_address": record.ip_address,
        "user_agent": record.user_agent,
        "description": record.description,
        "created_at": record.created_at,
    }
    if with_changes:
        data["changes"] = record.changes()
    return data


@require_GET
@api_login_required
@permission_required(VIEW_PERMISSION)
@tenant_required
def record_list_view(request):
    page = services.list_records(
        _tenant_filters(request),
        page=_parse_int(request.GET.get("page"), 1),
        page_size=_parse_int(request.GET.get("per_page"), None),
    )
    return paginated_response(page, [serialize_record(r) for r in page.object_list])


@require_GET
@api_login_required
@permission_required(VIEW_PERMISSION)
@tenant_required
def record_detail_view(request, audit_id):
    record = (
        AuditRecord.objects.select_related("user")
        .filter(audit_id=audit_id, tenant_id=request.tenant_id)
        .first()
    )
    if record is None:
        raise ResourceNotFound("Audit record not found")
    return api_response(serialize_record(record, with_changes=True))


@require_GET
@api_login_required
@permission_required(VIEW_PERMISSION)
@tenant_required
def subject_history_view(request, subject_type, subject_id):
    records = services.subject_history(subject_type, subject_id, tenant_id=request.tenant_id)
    return api_response([serialize_record(r, with_changes=True) for r in records])


@require_GET
@api_login_required
@permission_required(VIEW_PERMISSION)
@tenant_required
def stats_view(request):
    filters = services.AuditFilters.from_query(request.GET)
    stats = services.activity_stats(
        tenant_id=request.tenant_id,
        start=filters.start_date,
        end=filters.end_date,
        top_n=_parse_int(request.GET.get("top"), 10, maximum=100),
    )
    return api_response(stats)


@ratelimit(key="user_or_ip", rate="10/m", method="GET", block=True)
@require_GET
@api_login_required
@permission_required(VIEW_PERMISSION)
@tenant_required
def export_csv_view(request):
    """Export filtered audit records as CSV."""
    rows, total, exceeded = services.export_rows(_tenant_filters(request))
    recorder = AuditRecorder()
    context = AuditContext.from_request(request)

    if exceeded:
        return api_error(
            f"Export exceeds the row limit ({total:,} rows matched). Please narrow the date range.",
            status=400,
            code="export_too_large",
        )

    recorder.record(context, "exported", AuditRecord._meta.label, "-", metadata={"rows": total})

    response = HttpResponse(content_type="text/csv")
    response["Content-Disposition"] = 'attachment; filename="audit_log.csv"'
    writer = csv.writer(response)
    writer.writerow(services.EXPORT_COLUMNS)
    for row in rows:
        writer.writerow(row)
    return response
