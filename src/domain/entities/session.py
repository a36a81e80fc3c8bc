"""
Session Entity

Binds an issued access token to a user, an expiry and a revocation state.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow


class Session(SQLModel, table=True):
    """
    Session entity.

    Business Rules:
    - Only the SHA-256 hash of the token is stored
    - Valid iff revoked_at IS NULL AND expires_at > now
    - Revocation is terminal; rows are never deleted by this service
    """

    __tablename__ = "sessions"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    user_id: UUID = Field(foreign_key="users.id", nullable=False, index=True)
    token_hash: str = Field(unique=True, index=True, max_length=64)  # SHA-256 hex

    ip_address: Optional[str] = Field(default=None, max_length=64)
    user_agent: Optional[str] = Field(default=None, max_length=500)

    revoked_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    expires_at: datetime = Field(sa_column=Column(DateTime, nullable=False))

    __table_args__ = (
        Index("idx_session_expires_at", "expires_at"),
        Index("idx_session_user_revoked", "user_id", "revoked_at"),
    )

    def is_valid(self, now: datetime) -> bool:
        return self.revoked_at is None and self.expires_at > now
