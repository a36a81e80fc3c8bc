from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from src.domain.entities import AuditLog


@dataclass(frozen=True)
class AuditLogFilter:
    """Optional filters for audit log queries"""

    admin_id: Optional[UUID] = None
    action: Optional[str] = None  # substring match
    target_type: Optional[str] = None
    target_id: Optional[str] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None


class IAuditLogRepository(ABC):
    """AuditLog repository interface - application layer.

    Entries are append-only: there is no update or delete.
    """

    @abstractmethod
    async def create(self, entry: AuditLog) -> AuditLog:
        """Append a new audit entry (immutable)"""
        pass

    @abstractmethod
    async def get_by_id(self, entry_id: UUID) -> Optional[AuditLog]:
        """Get one audit entry"""
        pass

    @abstractmethod
    async def list_paginated(
        self,
        filters: AuditLogFilter,
        sort_by: str = "created_at",
        sort_order: str = "desc",
        limit: int = 50,
        offset: int = 0,
    ) -> Tuple[List[AuditLog], int]:
        """
        List audit entries matching filters.

        Returns:
            Tuple of (entries page, total matching entries)
        """
        pass

    @abstractmethod
    async def list_all(self, filters: AuditLogFilter, limit: int) -> List[AuditLog]:
        """Newest-first entries for export, capped at limit"""
        pass

    @abstractmethod
    async def count_distinct_ips(self, admin_id: UUID, action: str, since: datetime) -> int:
        """Distinct source addresses of an actor's entries for action since a point in time"""
        pass

    @abstractmethod
    async def daily_activity(self, since: datetime) -> List[Dict[str, Any]]:
        """
        Entries per calendar day since a point in time, oldest day first.

        Each row carries `date`, `user_actions`, `role_actions`,
        `security_actions` and `total_actions`.
        """
        pass

    @abstractmethod
    async def top_actions(self, since: datetime, limit: int = 10) -> List[Tuple[str, int]]:
        """Most frequent actions since a point in time"""
        pass
