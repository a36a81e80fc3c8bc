from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import case, func, or_
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.audit_log_repository import AuditLogFilter, IAuditLogRepository
from src.domain.entities import AuditLog

SORTABLE_COLUMNS = {
    "created_at": AuditLog.created_at,
    "action": AuditLog.action,
    "target_type": AuditLog.target_type,
    "admin_id": AuditLog.admin_id,
}


def _conditions(filters: AuditLogFilter) -> list:
    conditions = []
    if filters.admin_id:
        conditions.append(AuditLog.admin_id == filters.admin_id)
    if filters.action:
        conditions.append(func.lower(AuditLog.action).like(f"%{filters.action.lower()}%"))
    if filters.target_type:
        conditions.append(AuditLog.target_type == filters.target_type)
    if filters.target_id:
        conditions.append(AuditLog.target_id == filters.target_id)
    if filters.date_from:
        conditions.append(AuditLog.created_at >= filters.date_from)
    if filters.date_to:
        conditions.append(AuditLog.created_at <= filters.date_to)
    return conditions


class AuditLogRepository(IAuditLogRepository):
    """AuditLog repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, entry: AuditLog) -> AuditLog:
        """Append a new audit entry (immutable)"""
        self.session.add(entry)
        await self.session.flush()
        await self.session.refresh(entry)
        return entry

    async def get_by_id(self, entry_id: UUID) -> Optional[AuditLog]:
        stmt = select(AuditLog).where(AuditLog.id == entry_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_paginated(
        self,
        filters: AuditLogFilter,
        sort_by: str = "created_at",
        sort_order: str = "desc",
        limit: int = 50,
        offset: int = 0,
    ) -> Tuple[List[AuditLog], int]:
        conditions = _conditions(filters)

        count_stmt = select(func.count()).select_from(AuditLog).where(*conditions)
        total = (await self.session.execute(count_stmt)).scalar_one()

        column = SORTABLE_COLUMNS.get(sort_by, AuditLog.created_at)
        ordering = column.asc() if sort_order.lower() == "asc" else column.desc()
        stmt = (
            select(AuditLog)
            .where(*conditions)
            .order_by(ordering)
            .limit(limit)
            .offset(offset)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total

    async def list_all(self, filters: AuditLogFilter, limit: int) -> List[AuditLog]:
        stmt = (
            select(AuditLog)
            .where(*_conditions(filters))
            .order_by(AuditLog.created_at.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_distinct_ips(self, admin_id: UUID, action: str, since: datetime) -> int:
        stmt = select(func.count(func.distinct(AuditLog.ip_address))).where(
            AuditLog.admin_id == admin_id,
            AuditLog.action == action,
            AuditLog.created_at > since,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def daily_activity(self, since: datetime) -> List[Dict[str, Any]]:
        def tally(condition):
            return func.sum(case((condition, 1), else_=0))

        day = func.date(AuditLog.created_at)
        stmt = (
            select(
                day,
                tally(AuditLog.action.like("user.%")),
                tally(AuditLog.action.like("role.%")),
                tally(or_(AuditLog.action.like("alert.%"), AuditLog.action.like("ip.%"))),
                func.count(),
            )
            .where(AuditLog.created_at > since)
            .group_by(day)
            .order_by(day.asc())
        )
        result = await self.session.execute(stmt)
        return [
            {
                "date": str(date),
                "user_actions": user_actions,
                "role_actions": role_actions,
                "security_actions": security_actions,
                "total_actions": total,
            }
            for date, user_actions, role_actions, security_actions, total in result.all()
        ]

    async def top_actions(self, since: datetime, limit: int = 10) -> List[Tuple[str, int]]:
        count = func.count().label("count")
        stmt = (
            select(AuditLog.action, count)
            .where(AuditLog.created_at > since)
            .group_by(AuditLog.action)
            .order_by(count.desc(), AuditLog.action.asc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return [(action, total) for action, total in result.all()]
