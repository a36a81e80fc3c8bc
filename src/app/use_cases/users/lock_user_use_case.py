"""
Lock / Unlock User Use Case

A locked account is refused by the account-lock gate on every request; all
of its live sessions are revoked at lock time.
"""

from typing import Any, Dict
from uuid import UUID

from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.serializers import user_dict
from src.domain.base import utcnow
from src.libs.result import Error, Result, Return


class LockUserUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def lock(self, user_id: UUID, reason: str) -> Result[Dict[str, Any]]:
        async with self.uow:
            user = await self.uow.users.get_active_by_id(user_id)
            if user is None:
                return Return.err(Error("USER_NOT_FOUND", "User not found"))

            now = utcnow()
            user.locked_at = now
            user.lock_reason = reason
            user.updated_at = now
            await self.uow.users.update(user)
            revoked = await self.uow.sessions.revoke_all_by_user_id(user.id, now)
            roles = await self.uow.roles.get_roles_for_user(user.id)
            await self.uow.commit()

            return Return.ok({"user": user_dict(user, roles), "revoked_sessions": revoked})

    async def unlock(self, user_id: UUID) -> Result[Dict[str, Any]]:
        async with self.uow:
            user = await self.uow.users.get_active_by_id(user_id)
            if user is None:
                return Return.err(Error("USER_NOT_FOUND", "User not found"))
            if not user.is_locked:
                return Return.err(Error("USER_NOT_LOCKED", "User is not locked"))

            user.locked_at = None
            user.lock_reason = None
            user.updated_at = utcnow()
            await self.uow.users.update(user)
            roles = await self.uow.roles.get_roles_for_user(user.id)
            await self.uow.commit()

            return Return.ok({"user": user_dict(user, roles)})
