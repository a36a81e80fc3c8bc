"""
Admin User Routes

Every endpoint runs the admin guard pipeline; mutating endpoints are
dispatched through the audit recorder.
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, EmailStr, Field

from src.api.guards import AdminContext, path_param
from src.api.utils.admin_auth import admin_access
from src.api.utils.dispatch import dispatch_audited, respond
from src.app.services.audit_recorder import (
    AuditAction,
    AuditRecorder,
    accepted_fields,
    from_path,
    from_result,
    result_fields,
    with_path,
)
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.users import (
    MIN_PASSWORD_LENGTH,
    CreateUserUseCase,
    DeleteUserUseCase,
    GetUserUseCase,
    ListUsersUseCase,
    LockUserUseCase,
    ResetPasswordUseCase,
    UpdateUserUseCase,
    UserSessionsUseCase,
)
from src.depends import get_audit_recorder, get_unit_of_work

router = APIRouter(prefix="/admin/users", tags=["Admin Users"])

USER_CREATE = AuditAction(
    "user.create",
    "user",
    target_id=from_result("user", "id"),
    changes=accepted_fields("email", "full_name", "role_ids"),
)
USER_UPDATE = AuditAction(
    "user.update", "user", target_id=from_path("user_id"), changes=accepted_fields("email", "full_name")
)
USER_DELETE = AuditAction(
    "user.delete", "user", target_id=from_path("user_id"), changes=result_fields("email", "revoked_sessions")
)
USER_LOCK = AuditAction(
    "user.lock", "user", target_id=from_path("user_id"), changes=accepted_fields("reason")
)
USER_UNLOCK = AuditAction("user.unlock", "user", target_id=from_path("user_id"))
USER_RESET_PASSWORD = AuditAction(
    "user.reset_password", "user", target_id=from_path("user_id"), changes=result_fields("revoked_sessions")
)
SESSION_REVOKE = AuditAction(
    "session.revoke", "session", target_id=from_path("session_id"), changes=with_path(user_id="user_id")
)

NOT_FOUND = {"USER_NOT_FOUND": status.HTTP_404_NOT_FOUND}


class CreateUserRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH)
    full_name: Optional[str] = Field(None, max_length=255)
    role_ids: List[UUID] = Field(default_factory=list)


class UpdateUserRequest(BaseModel):
    email: Optional[EmailStr] = None
    full_name: Optional[str] = Field(None, max_length=255)


class LockUserRequest(BaseModel):
    reason: str = Field(..., min_length=1, max_length=500)


class ResetPasswordRequest(BaseModel):
    new_password: str = Field(..., min_length=MIN_PASSWORD_LENGTH)


@router.get("")
async def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: Optional[str] = Query(None, max_length=255),
    account_status: Optional[str] = Query(None, alias="status", pattern="^(active|locked)$"),
    sort_by: str = Query("created_at", pattern="^(created_at|email|full_name|last_login_at)$"),
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
    admin: AdminContext = Depends(admin_access("users.view")),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    result = await ListUsersUseCase(uow).execute(
        page=page,
        limit=limit,
        search=search,
        status=account_status,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return respond(result)


@router.get("/{user_id}")
async def get_user(
    user_id: UUID,
    admin: AdminContext = Depends(admin_access("users.view")),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    return respond(await GetUserUseCase(uow).execute(user_id), NOT_FOUND)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_user(
    request: CreateUserRequest,
    admin: AdminContext = Depends(admin_access("users.create")),
    uow: UnitOfWork = Depends(get_unit_of_work),
    recorder: AuditRecorder = Depends(get_audit_recorder),
):
    """
    Create a user with its initial roles in one transaction.

    Raises:
        - 404 Not Found: ROLE_NOT_FOUND
        - 409 Conflict: EMAIL_ALREADY_EXISTS
    """
    use_case = CreateUserUseCase(uow)
    return await dispatch_audited(
        recorder,
        USER_CREATE,
        admin,
        lambda: use_case.execute(
            email=request.email,
            password=request.password,
            admin_id=admin.user_id,
            full_name=request.full_name,
            role_ids=request.role_ids,
        ),
        error_status={
            "EMAIL_ALREADY_EXISTS": status.HTTP_409_CONFLICT,
            "ROLE_NOT_FOUND": status.HTTP_404_NOT_FOUND,
        },
        success_status=status.HTTP_201_CREATED,
        message="User created successfully",
    )


@router.put("/{user_id}")
async def update_user(
    user_id: UUID,
    request: UpdateUserRequest,
    admin: AdminContext = Depends(admin_access("users.edit")),
    uow: UnitOfWork = Depends(get_unit_of_work),
    recorder: AuditRecorder = Depends(get_audit_recorder),
):
    use_case = UpdateUserUseCase(uow)
    return await dispatch_audited(
        recorder,
        USER_UPDATE,
        admin,
        lambda: use_case.execute(user_id, email=request.email, full_name=request.full_name),
        error_status={
            **NOT_FOUND,
            "EMAIL_ALREADY_EXISTS": status.HTTP_409_CONFLICT,
            "NO_FIELDS_TO_UPDATE": status.HTTP_400_BAD_REQUEST,
        },
        message="User updated successfully",
    )


@router.delete("/{user_id}")
async def delete_user(
    user_id: UUID,
    admin: AdminContext = Depends(admin_access("users.delete", self_target=path_param("user_id"))),
    uow: UnitOfWork = Depends(get_unit_of_work),
    recorder: AuditRecorder = Depends(get_audit_recorder),
):
    use_case = DeleteUserUseCase(uow)
    return await dispatch_audited(
        recorder,
        USER_DELETE,
        admin,
        lambda: use_case.execute(user_id),
        error_status=NOT_FOUND,
        message="User deleted successfully",
    )


@router.post("/{user_id}/lock")
async def lock_user(
    user_id: UUID,
    request: LockUserRequest,
    admin: AdminContext = Depends(admin_access("users.lock", self_target=path_param("user_id"))),
    uow: UnitOfWork = Depends(get_unit_of_work),
    recorder: AuditRecorder = Depends(get_audit_recorder),
):
    """Lock an account and revoke all of its sessions"""
    use_case = LockUserUseCase(uow)
    return await dispatch_audited(
        recorder,
        USER_LOCK,
        admin,
        lambda: use_case.lock(user_id, request.reason),
        error_status=NOT_FOUND,
        message="User locked successfully",
    )


@router.post("/{user_id}/unlock")
async def unlock_user(
    user_id: UUID,
    admin: AdminContext = Depends(admin_access("users.lock")),
    uow: UnitOfWork = Depends(get_unit_of_work),
    recorder: AuditRecorder = Depends(get_audit_recorder),
):
    use_case = LockUserUseCase(uow)
    return await dispatch_audited(
        recorder,
        USER_UNLOCK,
        admin,
        lambda: use_case.unlock(user_id),
        error_status={**NOT_FOUND, "USER_NOT_LOCKED": status.HTTP_409_CONFLICT},
        message="User unlocked successfully",
    )


@router.post("/{user_id}/reset-password")
async def reset_password(
    user_id: UUID,
    request: ResetPasswordRequest,
    admin: AdminContext = Depends(admin_access("users.edit")),
    uow: UnitOfWork = Depends(get_unit_of_work),
    recorder: AuditRecorder = Depends(get_audit_recorder),
):
    use_case = ResetPasswordUseCase(uow)
    return await dispatch_audited(
        recorder,
        USER_RESET_PASSWORD,
        admin,
        lambda: use_case.execute(user_id, request.new_password),
        error_status={**NOT_FOUND, "PASSWORD_TOO_SHORT": status.HTTP_400_BAD_REQUEST},
        message="Password reset successfully",
    )


@router.get("/{user_id}/sessions")
async def list_user_sessions(
    user_id: UUID,
    admin: AdminContext = Depends(admin_access("users.view")),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    return respond(await UserSessionsUseCase(uow).list_sessions(user_id), NOT_FOUND)


@router.delete("/{user_id}/sessions/{session_id}")
async def revoke_user_session(
    user_id: UUID,
    session_id: UUID,
    admin: AdminContext = Depends(admin_access("users.edit")),
    uow: UnitOfWork = Depends(get_unit_of_work),
    recorder: AuditRecorder = Depends(get_audit_recorder),
):
    use_case = UserSessionsUseCase(uow)
    return await dispatch_audited(
        recorder,
        SESSION_REVOKE,
        admin,
        lambda: use_case.revoke_session(user_id, session_id),
        error_status={"SESSION_NOT_FOUND": status.HTTP_404_NOT_FOUND},
        message="Session revoked successfully",
    )
