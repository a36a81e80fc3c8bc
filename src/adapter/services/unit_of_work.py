from sqlalchemy import text
from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.repositories.audit_log_repository import AuditLogRepository
from src.adapter.repositories.blocked_ip_repository import BlockedIPRepository
from src.adapter.repositories.role_repository import RoleRepository
from src.adapter.repositories.security_alert_repository import SecurityAlertRepository
from src.adapter.repositories.session_repository import SessionRepository
from src.adapter.repositories.user_repository import UserRepository
from src.app.services.unit_of_work import UnitOfWork


class SqlAlchemyUnitOfWork(UnitOfWork):
    """SQLAlchemy implementation of UnitOfWork pattern"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def __aenter__(self):
        # Initialize all repositories with the session
        self.users = UserRepository(self.session)
        self.sessions = SessionRepository(self.session)
        self.roles = RoleRepository(self.session)
        self.audit_logs = AuditLogRepository(self.session)
        self.security_alerts = SecurityAlertRepository(self.session)
        self.blocked_ips = BlockedIPRepository(self.session)
        return self

    async def __aexit__(self, *args):
        await self.rollback()

    async def commit(self):
        await self.session.commit()

    async def rollback(self):
        await self.session.rollback()

    async def ping(self):
        await self.session.execute(text("SELECT 1"))


class SessionScopedUnitOfWork(SqlAlchemyUnitOfWork):
    """UnitOfWork that owns its session and closes it on exit"""

    async def __aexit__(self, *args):
        try:
            await self.rollback()
        finally:
            await self.session.close()
