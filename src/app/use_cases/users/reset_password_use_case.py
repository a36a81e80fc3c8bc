from typing import Any, Dict
from uuid import UUID

import bcrypt

from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.libs.result import Error, Result, Return

MIN_PASSWORD_LENGTH = 6


class ResetPasswordUseCase:
    """
    Admin-initiated password reset.

    Business Rules:
    - New password has at least MIN_PASSWORD_LENGTH characters
    - Every live session of the user is revoked
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, user_id: UUID, new_password: str) -> Result[Dict[str, Any]]:
        if len(new_password) < MIN_PASSWORD_LENGTH:
            return Return.err(
                Error(
                    "PASSWORD_TOO_SHORT",
                    f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
                )
            )

        async with self.uow:
            user = await self.uow.users.get_active_by_id(user_id)
            if user is None:
                return Return.err(Error("USER_NOT_FOUND", "User not found"))

            now = utcnow()
            user.password_hash = bcrypt.hashpw(new_password.encode(), bcrypt.gensalt(12)).decode()
            user.updated_at = now
            await self.uow.users.update(user)
            revoked = await self.uow.sessions.revoke_all_by_user_id(user.id, now)
            await self.uow.commit()

            return Return.ok({"user_id": str(user.id), "revoked_sessions": revoked})
