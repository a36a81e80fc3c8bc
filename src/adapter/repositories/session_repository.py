from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy import func, update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.session_repository import ISessionRepository
from src.domain.entities import Session


class SessionRepository(ISessionRepository):
    """Session repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, session_id: UUID) -> Optional[Session]:
        """Get session by ID"""
        stmt = select(Session).where(Session.id == session_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_token_hash(self, token_hash: str) -> Optional[Session]:
        """
        Find session by token hash.

        Revoked/expired rows are returned too so the caller can report the
        precise reason.
        """
        stmt = select(Session).where(Session.token_hash == token_hash)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, session_obj: Session) -> Session:
        """Create a new session"""
        self.session.add(session_obj)
        await self.session.flush()
        await self.session.refresh(session_obj)
        return session_obj

    async def update(self, session_obj: Session) -> Session:
        """Update existing session"""
        self.session.add(session_obj)
        await self.session.flush()
        await self.session.refresh(session_obj)
        return session_obj

    async def list_active_by_user(self, user_id: UUID, now: datetime) -> List[Session]:
        """Get all valid sessions for a user, newest first"""
        stmt = (
            select(Session)
            .where(
                Session.user_id == user_id,
                Session.revoked_at.is_(None),
                Session.expires_at > now,
            )
            .order_by(Session.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_active_by_user(self, user_id: UUID, now: datetime) -> int:
        """Count valid sessions for a user"""
        stmt = select(func.count()).select_from(Session).where(
            Session.user_id == user_id,
            Session.revoked_at.is_(None),
            Session.expires_at > now,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def revoke_all_by_user_id(self, user_id: UUID, now: datetime) -> int:
        """Revoke all valid sessions for a user"""
        stmt = (
            update(Session)
            .where(
                Session.user_id == user_id,
                Session.revoked_at.is_(None),
                Session.expires_at > now,
            )
            .values(revoked_at=now)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def revoke_for_user(self, session_id: UUID, user_id: UUID, now: datetime) -> bool:
        """Revoke a specific session of a user"""
        stmt = (
            update(Session)
            .where(
                Session.id == session_id,
                Session.user_id == user_id,
                Session.revoked_at.is_(None),
            )
            .values(revoked_at=now)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0

    async def active_totals(self, now: datetime) -> Dict[str, int]:
        stmt = select(func.count(), func.count(func.distinct(Session.user_id))).where(
            Session.revoked_at.is_(None),
            Session.expires_at > now,
        )
        total, unique_users = (await self.session.execute(stmt)).one()
        return {"total_sessions": total, "unique_users": unique_users}
