from datetime import datetime
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import case, delete, func, or_
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.blocked_ip_repository import IBlockedIPRepository
from src.domain.entities import BlockedIP


def _active(now: datetime):
    return or_(BlockedIP.expires_at.is_(None), BlockedIP.expires_at > now)


def _expired(now: datetime):
    return BlockedIP.expires_at.is_not(None) & (BlockedIP.expires_at <= now)


class BlockedIPRepository(IBlockedIPRepository):
    """BlockedIP repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_active_by_ip(self, ip_address: str, now: datetime) -> Optional[BlockedIP]:
        stmt = (
            select(BlockedIP)
            .where(BlockedIP.ip_address == ip_address, _active(now))
            .order_by(BlockedIP.created_at.desc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_by_id(self, blocked_id: UUID) -> Optional[BlockedIP]:
        stmt = select(BlockedIP).where(BlockedIP.id == blocked_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_paginated(
        self, state: str, now: datetime, limit: int = 20, offset: int = 0
    ) -> Tuple[List[BlockedIP], int]:
        conditions = []
        if state == "active":
            conditions.append(_active(now))
        elif state == "expired":
            conditions.append(_expired(now))

        count_stmt = select(func.count()).select_from(BlockedIP).where(*conditions)
        total = (await self.session.execute(count_stmt)).scalar_one()

        # Indefinite blocks first, then still-active, then expired
        state_rank = case(
            (BlockedIP.expires_at.is_(None), 0),
            (BlockedIP.expires_at > now, 1),
            else_=2,
        )
        stmt = (
            select(BlockedIP)
            .where(*conditions)
            .order_by(state_rank, BlockedIP.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total

    async def create(self, blocked: BlockedIP) -> BlockedIP:
        self.session.add(blocked)
        await self.session.flush()
        await self.session.refresh(blocked)
        return blocked

    async def update(self, blocked: BlockedIP) -> BlockedIP:
        self.session.add(blocked)
        await self.session.flush()
        await self.session.refresh(blocked)
        return blocked

    async def delete(self, blocked: BlockedIP) -> None:
        await self.session.delete(blocked)
        await self.session.flush()

    async def delete_expired(self, now: datetime) -> int:
        stmt = delete(BlockedIP).where(_expired(now))
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def count_active(self, now: datetime) -> int:
        stmt = select(func.count()).select_from(BlockedIP).where(_active(now))
        result = await self.session.execute(stmt)
        return result.scalar_one()
