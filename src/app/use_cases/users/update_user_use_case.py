from typing import Any, Dict, Optional
from uuid import UUID

from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.serializers import user_dict
from src.domain.base import utcnow
from src.libs.result import Error, Result, Return


class UpdateUserUseCase:
    """Edits email and full name. A taken email is rejected."""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, user_id: UUID, email: Optional[str] = None, full_name: Optional[str] = None
    ) -> Result[Dict[str, Any]]:
        if email is None and full_name is None:
            return Return.err(Error("NO_FIELDS_TO_UPDATE", "No fields to update"))

        async with self.uow:
            user = await self.uow.users.get_active_by_id(user_id)
            if user is None:
                return Return.err(Error("USER_NOT_FOUND", "User not found"))

            if email is not None:
                email = email.strip().lower()
                if email != user.email:
                    existing = await self.uow.users.get_by_email(email)
                    if existing is not None:
                        return Return.err(Error("EMAIL_ALREADY_EXISTS", "Email already exists"))
                    user.email = email

            if full_name is not None:
                user.full_name = full_name

            user.updated_at = utcnow()
            await self.uow.users.update(user)
            roles = await self.uow.roles.get_roles_for_user(user.id)
            await self.uow.commit()

            return Return.ok({"user": user_dict(user, roles)})


class DeleteUserUseCase:
    """Soft delete: the row stays, every live session is revoked."""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, user_id: UUID) -> Result[Dict[str, Any]]:
        async with self.uow:
            user = await self.uow.users.get_active_by_id(user_id)
            if user is None:
                return Return.err(Error("USER_NOT_FOUND", "User not found"))

            now = utcnow()
            user.deleted_at = now
            user.updated_at = now
            await self.uow.users.update(user)
            revoked = await self.uow.sessions.revoke_all_by_user_id(user.id, now)
            await self.uow.commit()

            return Return.ok(
                {"user_id": str(user.id), "email": user.email, "revoked_sessions": revoked}
            )
