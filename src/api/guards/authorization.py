import logging
from typing import Any, Callable, Optional
from uuid import UUID

from fastapi import status
from sqlalchemy.exc import SQLAlchemyError

from src.api.error import AuthorizationError, PersistenceError
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import ADMIN_ROLE_NAMES
from src.libs.result import Error

from .base import ALLOW, Decision, Deny, Guard, GuardContext, RoleGrant

logger = logging.getLogger(__name__)

TargetExtractor = Callable[[GuardContext], Optional[Any]]


class RequireAdmin(Guard):
    """Resolves the caller's admin-capable roles and attaches them to the context."""

    name = "RequireAdmin"

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def check(self, ctx: GuardContext) -> Decision:
        try:
            async with self.uow:
                roles = await self.uow.roles.get_roles_for_user(ctx.user_id, names=ADMIN_ROLE_NAMES)
                grants = [RoleGrant(role.name, tuple(role.permissions or [])) for role in roles]
        except SQLAlchemyError:
            logger.exception(f"Role lookup failed for user {ctx.user_id}")
            return Deny(PersistenceError(Error("ROLE_CHECK_FAILED", "Unable to verify roles")))

        if not grants:
            return Deny(AuthorizationError(Error("ADMIN_REQUIRED", "Admin access required")))

        ctx.roles = grants
        return ALLOW


class RequirePermission(Guard):
    """Must run after RequireAdmin."""

    name = "RequirePermission"

    def __init__(self, permission: str):
        self.permission = permission

    async def check(self, ctx: GuardContext) -> Decision:
        if not ctx.roles:
            return Deny(AuthorizationError(Error("ADMIN_REQUIRED", "Admin access required")))
        if any(self.permission in role.permissions for role in ctx.roles):
            return ALLOW
        return Deny(
            AuthorizationError(
                Error("PERMISSION_DENIED", f"Missing permission: {self.permission}")
            )
        )


def path_param(name: str) -> TargetExtractor:
    return lambda ctx: ctx.path_params.get(name)


def body_field(name: str) -> TargetExtractor:
    return lambda ctx: ctx.body.get(name)


def _same_id(target: Any, actor_id: UUID) -> bool:
    try:
        return UUID(str(target)) == actor_id
    except ValueError:
        return False


class SelfTargetGuard(Guard):
    """Blocks destructive actions aimed at the caller's own account."""

    name = "SelfTargetGuard"

    def __init__(self, extractor: TargetExtractor):
        self.extractor = extractor

    async def check(self, ctx: GuardContext) -> Decision:
        target = self.extractor(ctx)
        if target is not None and _same_id(target, ctx.user_id):
            return Deny(
                AuthorizationError(
                    Error("SELF_TARGET_FORBIDDEN", "Cannot perform this action on your own account"),
                    status_code=status.HTTP_400_BAD_REQUEST,
                )
            )
        return ALLOW
