"""
AuditLog Entity

Immutable record of one successful mutating admin action.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, JSON, SQLModel

from src.domain.base import utcnow


class AuditLog(SQLModel, table=True):
    """
    AuditLog entity.

    Business Rules:
    - Append-only: never updated or deleted
    - admin_id is the acting identity (the user itself for auth.login)
    - changes holds a shallow diff of the accepted input fields
    """

    __tablename__ = "audit_logs"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    admin_id: UUID = Field(nullable=False, index=True)
    action: str = Field(max_length=100)  # e.g., "user.lock", "ip.block"

    target_type: Optional[str] = Field(default=None, max_length=50)
    target_id: Optional[str] = Field(default=None, max_length=100)
    changes: Optional[dict] = Field(default=None, sa_column=Column(JSON))

    ip_address: Optional[str] = Field(default=None, max_length=64)
    user_agent: Optional[str] = Field(default=None, max_length=500)

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_audit_logs_created_at", "created_at"),
        Index("idx_audit_logs_action", "action"),
        Index("idx_audit_logs_target", "target_type", "target_id"),
    )
