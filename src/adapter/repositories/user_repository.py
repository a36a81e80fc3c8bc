from datetime import datetime, timedelta
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import case, func, or_
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.user_repository import IUserRepository
from src.domain.entities import User

SORTABLE_COLUMNS = {
    "created_at": User.created_at,
    "email": User.email,
    "full_name": User.full_name,
    "last_login_at": User.last_login_at,
}


class UserRepository(IUserRepository):
    """User repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email address"""
        stmt = select(User).where(User.email == email)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """Get user by ID"""
        stmt = select(User).where(User.id == user_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_active_by_id(self, user_id: UUID) -> Optional[User]:
        """Get non-deleted user by ID"""
        stmt = select(User).where(User.id == user_id, User.deleted_at.is_(None))
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def lock_for_update(self, user_id: UUID) -> Optional[User]:
        stmt = select(User).where(User.id == user_id).with_for_update()
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_paginated(
        self,
        search: Optional[str] = None,
        status: Optional[str] = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
        limit: int = 20,
        offset: int = 0,
    ) -> Tuple[List[User], int]:
        conditions = [User.deleted_at.is_(None)]
        if search:
            pattern = f"%{search.lower()}%"
            conditions.append(
                or_(
                    func.lower(User.email).like(pattern),
                    func.lower(User.full_name).like(pattern),
                )
            )
        if status == "locked":
            conditions.append(User.locked_at.is_not(None))
        elif status == "active":
            conditions.append(User.locked_at.is_(None))

        count_stmt = select(func.count()).select_from(User).where(*conditions)
        total = (await self.session.execute(count_stmt)).scalar_one()

        column = SORTABLE_COLUMNS.get(sort_by, User.created_at)
        ordering = column.asc() if sort_order.lower() == "asc" else column.desc()
        stmt = select(User).where(*conditions).order_by(ordering).limit(limit).offset(offset)
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total

    async def create(self, user: User) -> User:
        """Create a new user"""
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)
        return user

    async def update(self, user: User) -> User:
        """Update existing user"""
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)
        return user

    async def status_counts(self, now: datetime) -> Dict[str, int]:
        def tally(condition):
            return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)

        stmt = select(
            func.count(),
            tally(User.created_at > now - timedelta(days=7)),
            tally(User.created_at > now - timedelta(days=30)),
            tally(User.locked_at.is_not(None) & User.deleted_at.is_(None)),
            tally(User.deleted_at.is_not(None)),
        ).select_from(User)
        total, new_7d, new_30d, locked, deleted = (await self.session.execute(stmt)).one()
        return {
            "total_users": total,
            "new_users_7d": new_7d,
            "new_users_30d": new_30d,
            "locked_users": locked,
            "deleted_users": deleted,
        }
