from uuid import UUID

from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.libs.result import Result, Return

from .dtos import LogoutResponse


class LogoutUseCase:
    """Revokes the caller's current session"""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, user_id: UUID, session_id: UUID) -> Result[LogoutResponse]:
        async with self.uow:
            revoked = await self.uow.sessions.revoke_for_user(session_id, user_id, utcnow())
            await self.uow.commit()
            return Return.ok(LogoutResponse(session_id=str(session_id), revoked=revoked))
