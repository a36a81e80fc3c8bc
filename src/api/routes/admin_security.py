"""
Admin Security Routes

Security alert review and IP block list management.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from src.api.guards import AdminContext
from src.api.utils.admin_auth import admin_access
from src.api.utils.dispatch import dispatch_audited, respond
from src.app.services.audit_recorder import (
    AuditAction,
    AuditRecorder,
    accepted_fields,
    first_of,
    from_body,
    from_path,
    from_result,
    result_fields,
)
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.security import BlockedIPsUseCase, SecurityAlertsUseCase
from src.depends import get_audit_recorder, get_unit_of_work

router = APIRouter(prefix="/admin/security", tags=["Admin Security"])

ALERT_REVIEW = AuditAction("alert.review", "security_alert", target_id=from_path("alert_id"))
ALERT_REVIEW_ALL = AuditAction(
    "alert.review_all", "security_alert", changes=result_fields("reviewed_count")
)
IP_BLOCK = AuditAction(
    "ip.block",
    "blocked_ip",
    target_id=first_of(from_result("blocked_ip", "id"), from_body("ip_address")),
    changes=accepted_fields("ip_address", "reason", "expires_at"),
)
IP_UPDATE = AuditAction(
    "ip.update",
    "blocked_ip",
    target_id=from_path("blocked_id"),
    changes=accepted_fields("reason", "expires_at", "clear_expiry"),
)
IP_UNBLOCK = AuditAction(
    "ip.unblock", "blocked_ip", target_id=from_path("blocked_id"), changes=result_fields("ip_address")
)
IP_CLEANUP = AuditAction("ip.cleanup", "blocked_ip", changes=result_fields("deleted_count"))

BLOCK_ERRORS = {
    "INVALID_IP_ADDRESS": status.HTTP_400_BAD_REQUEST,
    "INVALID_EXPIRY": status.HTTP_400_BAD_REQUEST,
    "INVALID_STATE": status.HTTP_400_BAD_REQUEST,
    "NO_FIELDS_TO_UPDATE": status.HTTP_400_BAD_REQUEST,
    "IP_ALREADY_BLOCKED": status.HTTP_409_CONFLICT,
    "BLOCKED_IP_NOT_FOUND": status.HTTP_404_NOT_FOUND,
}


class BlockIPRequest(BaseModel):
    ip_address: str = Field(..., min_length=1, max_length=64)
    reason: str = Field(..., min_length=1, max_length=500)
    expires_at: Optional[datetime] = Field(None, description="Omit to block indefinitely")


class UpdateBlockedIPRequest(BaseModel):
    reason: Optional[str] = Field(None, min_length=1, max_length=500)
    expires_at: Optional[datetime] = None
    clear_expiry: bool = Field(False, description="Make the block indefinite")


@router.get("/alerts")
async def list_alerts(
    alert_type: Optional[str] = Query(
        None, alias="type", pattern="^(brute_force|suspicious_login|multiple_sessions)$"
    ),
    severity: Optional[str] = Query(None, pattern="^(low|medium|high)$"),
    reviewed: Optional[bool] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    admin: AdminContext = Depends(admin_access("security.view_alerts")),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """Unreviewed first, then by severity, newest first"""
    result = await SecurityAlertsUseCase(uow).list_alerts(
        alert_type=alert_type, severity=severity, reviewed=reviewed, page=page, limit=limit
    )
    return respond(result)


@router.get("/alerts/stats")
async def alert_stats(
    admin: AdminContext = Depends(admin_access("security.view_alerts")),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    return respond(await SecurityAlertsUseCase(uow).stats())


@router.post("/alerts/review-all")
async def review_all_alerts(
    admin: AdminContext = Depends(admin_access("security.review_alerts")),
    uow: UnitOfWork = Depends(get_unit_of_work),
    recorder: AuditRecorder = Depends(get_audit_recorder),
):
    use_case = SecurityAlertsUseCase(uow)
    return await dispatch_audited(
        recorder,
        ALERT_REVIEW_ALL,
        admin,
        lambda: use_case.review_all(admin.user_id),
        message="Alerts marked as reviewed",
    )


@router.post("/alerts/{alert_id}/review")
async def review_alert(
    alert_id: UUID,
    admin: AdminContext = Depends(admin_access("security.review_alerts")),
    uow: UnitOfWork = Depends(get_unit_of_work),
    recorder: AuditRecorder = Depends(get_audit_recorder),
):
    """One-way: an already reviewed alert answers 404 ALERT_NOT_FOUND"""
    use_case = SecurityAlertsUseCase(uow)
    return await dispatch_audited(
        recorder,
        ALERT_REVIEW,
        admin,
        lambda: use_case.review(alert_id, admin.user_id),
        error_status={"ALERT_NOT_FOUND": status.HTTP_404_NOT_FOUND},
        message="Alert marked as reviewed",
    )


@router.get("/blocked-ips")
async def list_blocked_ips(
    state: str = Query("active", pattern="^(active|expired|all)$"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    admin: AdminContext = Depends(admin_access("security.view_alerts")),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    result = await BlockedIPsUseCase(uow).list_blocked(state=state, page=page, limit=limit)
    return respond(result, BLOCK_ERRORS)


@router.post("/blocked-ips", status_code=status.HTTP_201_CREATED)
async def block_ip(
    request: BlockIPRequest,
    admin: AdminContext = Depends(admin_access("security.block_ip")),
    uow: UnitOfWork = Depends(get_unit_of_work),
    recorder: AuditRecorder = Depends(get_audit_recorder),
):
    use_case = BlockedIPsUseCase(uow)
    return await dispatch_audited(
        recorder,
        IP_BLOCK,
        admin,
        lambda: use_case.block(
            request.ip_address, request.reason, admin.user_id, expires_at=request.expires_at
        ),
        error_status=BLOCK_ERRORS,
        success_status=status.HTTP_201_CREATED,
        message="IP address blocked successfully",
    )


@router.post("/blocked-ips/cleanup")
async def cleanup_blocked_ips(
    admin: AdminContext = Depends(admin_access("security.block_ip")),
    uow: UnitOfWork = Depends(get_unit_of_work),
    recorder: AuditRecorder = Depends(get_audit_recorder),
):
    """Delete every block whose expiry has passed"""
    use_case = BlockedIPsUseCase(uow)
    return await dispatch_audited(
        recorder,
        IP_CLEANUP,
        admin,
        use_case.cleanup,
        message="Expired blocks removed",
    )


@router.put("/blocked-ips/{blocked_id}")
async def update_blocked_ip(
    blocked_id: UUID,
    request: UpdateBlockedIPRequest,
    admin: AdminContext = Depends(admin_access("security.block_ip")),
    uow: UnitOfWork = Depends(get_unit_of_work),
    recorder: AuditRecorder = Depends(get_audit_recorder),
):
    use_case = BlockedIPsUseCase(uow)
    return await dispatch_audited(
        recorder,
        IP_UPDATE,
        admin,
        lambda: use_case.update(
            blocked_id,
            reason=request.reason,
            expires_at=request.expires_at,
            clear_expiry=request.clear_expiry,
        ),
        error_status=BLOCK_ERRORS,
        message="Blocked IP updated successfully",
    )


@router.delete("/blocked-ips/{blocked_id}")
async def unblock_ip(
    blocked_id: UUID,
    admin: AdminContext = Depends(admin_access("security.unblock_ip")),
    uow: UnitOfWork = Depends(get_unit_of_work),
    recorder: AuditRecorder = Depends(get_audit_recorder),
):
    use_case = BlockedIPsUseCase(uow)
    return await dispatch_audited(
        recorder,
        IP_UNBLOCK,
        admin,
        lambda: use_case.unblock(blocked_id),
        error_status=BLOCK_ERRORS,
        message="IP address unblocked successfully",
    )
