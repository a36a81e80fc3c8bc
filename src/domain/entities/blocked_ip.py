"""
BlockedIP Entity

Source addresses denied access to the admin console.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow


class BlockedIP(SQLModel, table=True):
    """
    BlockedIP entity.

    Business Rules:
    - Active iff expires_at IS NULL OR expires_at > now
    - expires_at NULL means the block is indefinite
    - Expired rows are deleted by cleanup, there is no inactive state
    """

    __tablename__ = "blocked_ips"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    ip_address: str = Field(max_length=64, index=True)
    reason: str = Field(max_length=500)
    blocked_by: Optional[UUID] = Field(default=None, foreign_key="users.id")
    expires_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (Index("idx_blocked_ips_expires_at", "expires_at"),)

    def is_active(self, now: datetime) -> bool:
        return self.expires_at is None or self.expires_at > now
