"""
Admin Role Routes

Role CRUD, role assignment and the permission catalogue.
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

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
from src.app.use_cases.roles import RoleAssignmentUseCase, RoleManagementUseCase
from src.depends import get_audit_recorder, get_unit_of_work

router = APIRouter(prefix="/admin", tags=["Admin Roles"])

ROLE_CREATE = AuditAction(
    "role.create",
    "role",
    target_id=from_result("role", "id"),
    changes=accepted_fields("name", "description", "permissions"),
)
ROLE_UPDATE = AuditAction(
    "role.update",
    "role",
    target_id=from_path("role_id"),
    changes=accepted_fields("name", "description", "permissions"),
)
ROLE_DELETE = AuditAction(
    "role.delete", "role", target_id=from_path("role_id"), changes=result_fields("name")
)
ROLE_ASSIGN = AuditAction(
    "role.assign",
    "user",
    target_id=from_path("user_id"),
    changes=with_path(result_fields("role_name"), role_id="role_id"),
)
ROLE_REMOVE = AuditAction(
    "role.remove", "user", target_id=from_path("user_id"), changes=with_path(role_id="role_id")
)

ROLE_ERRORS = {
    "ROLE_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "ROLE_NAME_TAKEN": status.HTTP_409_CONFLICT,
    "UNKNOWN_PERMISSION": status.HTTP_400_BAD_REQUEST,
    "SYSTEM_ROLE_IMMUTABLE": status.HTTP_403_FORBIDDEN,
    "ROLE_IN_USE": status.HTTP_409_CONFLICT,
}

ASSIGNMENT_ERRORS = {
    "USER_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "ROLE_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "ROLE_ALREADY_ASSIGNED": status.HTTP_409_CONFLICT,
    "ROLE_NOT_ASSIGNED": status.HTTP_404_NOT_FOUND,
    "LAST_ROLE": status.HTTP_400_BAD_REQUEST,
}


class CreateRoleRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    description: Optional[str] = Field(None, max_length=255)
    permissions: List[str] = Field(default_factory=list)


class UpdateRoleRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    description: Optional[str] = Field(None, max_length=255)
    permissions: Optional[List[str]] = None


@router.get("/roles")
async def list_roles(
    admin: AdminContext = Depends(admin_access("roles.view")),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    return respond(await RoleManagementUseCase(uow).list_roles())


@router.get("/roles/{role_id}")
async def get_role(
    role_id: UUID,
    admin: AdminContext = Depends(admin_access("roles.view")),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    return respond(await RoleManagementUseCase(uow).get_role(role_id), ROLE_ERRORS)


@router.post("/roles", status_code=status.HTTP_201_CREATED)
async def create_role(
    request: CreateRoleRequest,
    admin: AdminContext = Depends(admin_access("roles.create")),
    uow: UnitOfWork = Depends(get_unit_of_work),
    recorder: AuditRecorder = Depends(get_audit_recorder),
):
    use_case = RoleManagementUseCase(uow)
    return await dispatch_audited(
        recorder,
        ROLE_CREATE,
        admin,
        lambda: use_case.create_role(request.name, request.description, request.permissions),
        error_status=ROLE_ERRORS,
        success_status=status.HTTP_201_CREATED,
        message="Role created successfully",
    )


@router.put("/roles/{role_id}")
async def update_role(
    role_id: UUID,
    request: UpdateRoleRequest,
    admin: AdminContext = Depends(admin_access("roles.edit")),
    uow: UnitOfWork = Depends(get_unit_of_work),
    recorder: AuditRecorder = Depends(get_audit_recorder),
):
    use_case = RoleManagementUseCase(uow)
    return await dispatch_audited(
        recorder,
        ROLE_UPDATE,
        admin,
        lambda: use_case.update_role(
            role_id,
            name=request.name,
            description=request.description,
            permissions=request.permissions,
        ),
        error_status=ROLE_ERRORS,
        message="Role updated successfully",
    )


@router.delete("/roles/{role_id}")
async def delete_role(
    role_id: UUID,
    admin: AdminContext = Depends(admin_access("roles.delete")),
    uow: UnitOfWork = Depends(get_unit_of_work),
    recorder: AuditRecorder = Depends(get_audit_recorder),
):
    use_case = RoleManagementUseCase(uow)
    return await dispatch_audited(
        recorder,
        ROLE_DELETE,
        admin,
        lambda: use_case.delete_role(role_id),
        error_status=ROLE_ERRORS,
        message="Role deleted successfully",
    )


@router.post("/users/{user_id}/roles/{role_id}")
async def assign_role(
    user_id: UUID,
    role_id: UUID,
    admin: AdminContext = Depends(admin_access("roles.assign")),
    uow: UnitOfWork = Depends(get_unit_of_work),
    recorder: AuditRecorder = Depends(get_audit_recorder),
):
    use_case = RoleAssignmentUseCase(uow)
    return await dispatch_audited(
        recorder,
        ROLE_ASSIGN,
        admin,
        lambda: use_case.assign(user_id, role_id, admin.user_id),
        error_status=ASSIGNMENT_ERRORS,
        message="Role assigned successfully",
    )


@router.delete("/users/{user_id}/roles/{role_id}")
async def remove_role(
    user_id: UUID,
    role_id: UUID,
    admin: AdminContext = Depends(admin_access("roles.assign", self_target=path_param("user_id"))),
    uow: UnitOfWork = Depends(get_unit_of_work),
    recorder: AuditRecorder = Depends(get_audit_recorder),
):
    """A user's last remaining role cannot be removed (400 LAST_ROLE)"""
    use_case = RoleAssignmentUseCase(uow)
    return await dispatch_audited(
        recorder,
        ROLE_REMOVE,
        admin,
        lambda: use_case.remove(user_id, role_id),
        error_status=ASSIGNMENT_ERRORS,
        message="Role removed successfully",
    )


@router.get("/permissions")
async def list_permissions(
    admin: AdminContext = Depends(admin_access("roles.view")),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    return respond(await RoleManagementUseCase(uow).list_permissions())
