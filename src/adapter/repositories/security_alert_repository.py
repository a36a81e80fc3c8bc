from datetime import datetime
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import case, func, update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.security_alert_repository import ISecurityAlertRepository
from src.domain.entities import AlertSeverity, AlertType, SecurityAlert


class SecurityAlertRepository(ISecurityAlertRepository):
    """SecurityAlert repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, alert: SecurityAlert) -> SecurityAlert:
        self.session.add(alert)
        await self.session.flush()
        await self.session.refresh(alert)
        return alert

    async def get_by_id(self, alert_id: UUID) -> Optional[SecurityAlert]:
        stmt = select(SecurityAlert).where(SecurityAlert.id == alert_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_paginated(
        self,
        alert_type: Optional[str] = None,
        severity: Optional[str] = None,
        reviewed: Optional[bool] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Tuple[List[SecurityAlert], int]:
        conditions = []
        if alert_type:
            conditions.append(SecurityAlert.type == AlertType(alert_type))
        if severity:
            conditions.append(SecurityAlert.severity == AlertSeverity(severity))
        if reviewed is True:
            conditions.append(SecurityAlert.reviewed_at.is_not(None))
        elif reviewed is False:
            conditions.append(SecurityAlert.reviewed_at.is_(None))

        count_stmt = select(func.count()).select_from(SecurityAlert).where(*conditions)
        total = (await self.session.execute(count_stmt)).scalar_one()

        unreviewed_first = case((SecurityAlert.reviewed_at.is_(None), 0), else_=1)
        severity_rank = case(
            (SecurityAlert.severity == AlertSeverity.high, 1),
            (SecurityAlert.severity == AlertSeverity.medium, 2),
            else_=3,
        )
        stmt = (
            select(SecurityAlert)
            .where(*conditions)
            .order_by(unreviewed_first, severity_rank, SecurityAlert.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total

    async def stats(self) -> Dict[str, int]:
        stmt = select(
            SecurityAlert.type,
            SecurityAlert.severity,
            SecurityAlert.reviewed_at.is_(None),
            func.count(),
        ).group_by(
            SecurityAlert.type, SecurityAlert.severity, SecurityAlert.reviewed_at.is_(None)
        )
        result = await self.session.execute(stmt)

        stats = {"total": 0, "unreviewed": 0}
        for severity in AlertSeverity:
            stats[f"{severity.value}_severity"] = 0
        for alert_type in AlertType:
            stats[alert_type.value] = 0

        for alert_type, severity, unreviewed, count in result.all():
            stats["total"] += count
            if unreviewed:
                stats["unreviewed"] += count
            stats[f"{AlertSeverity(severity).value}_severity"] += count
            stats[AlertType(alert_type).value] += count
        return stats

    async def mark_reviewed(
        self, alert_id: UUID, reviewer_id: UUID, now: datetime
    ) -> Optional[SecurityAlert]:
        """Single conditional UPDATE so a concurrent second review cannot win"""
        stmt = (
            update(SecurityAlert)
            .where(SecurityAlert.id == alert_id, SecurityAlert.reviewed_at.is_(None))
            .values(reviewed_by=reviewer_id, reviewed_at=now)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        if result.rowcount == 0:
            return None
        alert = await self.get_by_id(alert_id)
        await self.session.refresh(alert)
        return alert

    async def mark_all_reviewed(self, reviewer_id: UUID, now: datetime) -> int:
        stmt = (
            update(SecurityAlert)
            .where(SecurityAlert.reviewed_at.is_(None))
            .values(reviewed_by=reviewer_id, reviewed_at=now)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def count_created_since(self, since: datetime) -> int:
        stmt = select(func.count()).select_from(SecurityAlert).where(
            SecurityAlert.created_at > since
        )
        result = await self.session.execute(stmt)
        return result.scalar_one()
