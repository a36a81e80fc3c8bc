"""
User Entity

Represents a person who can sign in to the tools site and, with the right
role assignments, the admin console.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow


class User(SQLModel, table=True):
    """
    User entity.

    Business Rules:
    - Email must be unique across all users
    - Password stored as bcrypt hash
    - locked_at set => every gated request is rejected until unlocked
    - Soft delete: deleted_at marks deletion, rows are never removed
    - Roles live in user_roles; there is no writable role column
    """

    __tablename__ = "users"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    email: str = Field(unique=True, index=True, max_length=255)
    full_name: Optional[str] = Field(default=None, max_length=255)
    password_hash: str = Field(max_length=60)  # Bcrypt output is 60 chars

    # Account lock
    locked_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    lock_reason: Optional[str] = Field(default=None, max_length=500)

    # Soft delete
    deleted_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    updated_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    last_login_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_user_locked_at", "locked_at"),
        Index("idx_user_deleted_at", "deleted_at"),
    )

    @property
    def is_locked(self) -> bool:
        return self.locked_at is not None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None
