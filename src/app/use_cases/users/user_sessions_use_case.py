"""
User Sessions Use Case

Lists and revokes another user's sessions from the admin console.
"""

from typing import Any, Dict
from uuid import UUID

from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.serializers import session_dict
from src.domain.base import utcnow
from src.libs.result import Error, Result, Return


class UserSessionsUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def list_sessions(self, user_id: UUID) -> Result[Dict[str, Any]]:
        """Valid sessions only, newest first"""
        async with self.uow:
            user = await self.uow.users.get_by_id(user_id)
            if user is None:
                return Return.err(Error("USER_NOT_FOUND", "User not found"))

            sessions = await self.uow.sessions.list_active_by_user(user_id, utcnow())
            return Return.ok({"sessions": [session_dict(s) for s in sessions]})

    async def revoke_session(self, user_id: UUID, session_id: UUID) -> Result[Dict[str, Any]]:
        async with self.uow:
            revoked = await self.uow.sessions.revoke_for_user(session_id, user_id, utcnow())
            if not revoked:
                return Return.err(
                    Error("SESSION_NOT_FOUND", "Session not found or already revoked")
                )
            await self.uow.commit()
            return Return.ok({"session_id": str(session_id), "user_id": str(user_id)})
