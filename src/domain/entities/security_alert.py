"""
SecurityAlert Entity

Notice of a heuristically detected risky pattern.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, JSON, SQLModel

from src.domain.base import utcnow

from .enums import AlertSeverity, AlertType


class SecurityAlert(SQLModel, table=True):
    """
    SecurityAlert entity.

    Business Rules:
    - unreviewed -> reviewed is one-way (reviewed_by/reviewed_at are set once)
    - Alerts are created only by the security heuristics
    """

    __tablename__ = "security_alerts"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    type: AlertType = Field(nullable=False)
    severity: AlertSeverity = Field(nullable=False)
    message: str = Field(max_length=500)
    alert_metadata: Optional[dict] = Field(default=None, sa_column=Column("metadata", JSON))

    reviewed_by: Optional[UUID] = Field(default=None, foreign_key="users.id")
    reviewed_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_security_alerts_type", "type"),
        Index("idx_security_alerts_reviewed_at", "reviewed_at"),
    )

    @property
    def is_reviewed(self) -> bool:
        return self.reviewed_at is not None
