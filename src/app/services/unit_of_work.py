from abc import ABC, abstractmethod

from src.app.repositories.audit_log_repository import IAuditLogRepository
from src.app.repositories.blocked_ip_repository import IBlockedIPRepository
from src.app.repositories.role_repository import IRoleRepository
from src.app.repositories.security_alert_repository import ISecurityAlertRepository
from src.app.repositories.session_repository import ISessionRepository
from src.app.repositories.user_repository import IUserRepository


class UnitOfWork(ABC):
    """Abstract UnitOfWork - defines repository access and transaction management"""

    # Repository properties (initialized in __aenter__)
    users: IUserRepository
    sessions: ISessionRepository
    roles: IRoleRepository
    audit_logs: IAuditLogRepository
    security_alerts: ISecurityAlertRepository
    blocked_ips: IBlockedIPRepository

    @abstractmethod
    async def __aenter__(self):
        pass

    @abstractmethod
    async def __aexit__(self, *args):
        pass

    @abstractmethod
    async def commit(self):
        pass

    @abstractmethod
    async def rollback(self):
        pass

    @abstractmethod
    async def ping(self):
        """Round-trip to the backing store; raises when it is unreachable"""
        pass
