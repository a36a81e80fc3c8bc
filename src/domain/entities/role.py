"""
Role Entity

A named bundle of permission strings.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID, uuid4

from sqlmodel import JSON, Column, DateTime, Field, SQLModel

from src.domain.base import utcnow


class Role(SQLModel, table=True):
    """
    Role entity.

    Business Rules:
    - Name is unique
    - System roles (is_system) cannot be edited or deleted
    - Permissions keep their insertion order and contain no duplicates
    """

    __tablename__ = "roles"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(unique=True, index=True, max_length=50)
    description: Optional[str] = Field(default=None, max_length=255)
    permissions: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    is_system: bool = Field(default=False)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    updated_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    def grants(self, permission: str) -> bool:
        return permission in (self.permissions or [])
