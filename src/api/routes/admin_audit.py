"""
Admin Audit Log Routes

Read-only browsing of the audit trail. Entries are never edited or deleted
through the API.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import Response

from src.api.guards import AdminContext
from src.api.utils.admin_auth import admin_access
from src.api.utils.dispatch import outcome_of, raise_for_error, respond
from src.app.repositories.audit_log_repository import AuditLogFilter
from src.app.services.audit_recorder import AuditAction, AuditRecorder, result_fields
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.audit import GetAuditLogsUseCase
from src.depends import get_audit_recorder, get_unit_of_work
from src.domain.base import as_naive_utc, utcnow

router = APIRouter(prefix="/admin/audit-logs", tags=["Admin Audit"])

AUDIT_EXPORT = AuditAction("audit.export", "audit_log", changes=result_fields("rows"))


def audit_filters(
    admin_id: Optional[UUID] = Query(None),
    action: Optional[str] = Query(None, max_length=100, description="Substring match"),
    target_type: Optional[str] = Query(None, max_length=50),
    date_from: Optional[datetime] = Query(None),
    date_to: Optional[datetime] = Query(None),
) -> AuditLogFilter:
    return AuditLogFilter(
        admin_id=admin_id,
        action=action,
        target_type=target_type,
        date_from=as_naive_utc(date_from),
        date_to=as_naive_utc(date_to),
    )


@router.get("")
async def list_audit_logs(
    filters: AuditLogFilter = Depends(audit_filters),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100),
    sort_by: str = Query("created_at", pattern="^(created_at|action|target_type|admin_id)$"),
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
    admin: AdminContext = Depends(admin_access("audit.view")),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    result = await GetAuditLogsUseCase(uow).list_logs(
        filters, page=page, limit=limit, sort_by=sort_by, sort_order=sort_order
    )
    return respond(result)


@router.get("/export")
async def export_audit_logs(
    filters: AuditLogFilter = Depends(audit_filters),
    admin: AdminContext = Depends(admin_access("audit.export")),
    uow: UnitOfWork = Depends(get_unit_of_work),
    recorder: AuditRecorder = Depends(get_audit_recorder),
):
    """CSV download of the filtered trail"""
    result = await GetAuditLogsUseCase(uow).export_csv(filters)
    await recorder.record(AUDIT_EXPORT, admin.audit_input(), outcome_of(result, {}))
    raise_for_error(result, {})

    filename = f"audit-logs-{utcnow().strftime('%Y%m%d-%H%M%S')}.csv"
    return Response(
        content=result.value["csv"],
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/user/{user_id}")
async def list_user_audit_logs(
    user_id: UUID,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100),
    admin: AdminContext = Depends(admin_access("audit.view")),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """Entries whose target is the given user"""
    return respond(await GetAuditLogsUseCase(uow).list_for_user(user_id, page=page, limit=limit))


@router.get("/{log_id}")
async def get_audit_log(
    log_id: UUID,
    admin: AdminContext = Depends(admin_access("audit.view")),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    result = await GetAuditLogsUseCase(uow).get_log(log_id)
    return respond(result, {"AUDIT_LOG_NOT_FOUND": status.HTTP_404_NOT_FOUND})
