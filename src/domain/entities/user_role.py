"""
UserRole Entity

Many-to-many assignment of roles to users.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow


class UserRole(SQLModel, table=True):
    """
    UserRole entity.

    Business Rules:
    - (user_id, role_id) is unique
    - A user always keeps at least one assignment
    """

    __tablename__ = "user_roles"

    user_id: UUID = Field(foreign_key="users.id", primary_key=True)
    role_id: UUID = Field(foreign_key="roles.id", primary_key=True)

    assigned_by: Optional[UUID] = Field(default=None, foreign_key="users.id")
    assigned_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (Index("idx_user_roles_role_id", "role_id"),)
