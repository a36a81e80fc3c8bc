from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from src.domain.entities import SecurityAlert


class ISecurityAlertRepository(ABC):
    """SecurityAlert repository interface - application layer"""

    @abstractmethod
    async def create(self, alert: SecurityAlert) -> SecurityAlert:
        """Create a new alert"""
        pass

    @abstractmethod
    async def get_by_id(self, alert_id: UUID) -> Optional[SecurityAlert]:
        """Get alert by ID"""
        pass

    @abstractmethod
    async def list_paginated(
        self,
        alert_type: Optional[str] = None,
        severity: Optional[str] = None,
        reviewed: Optional[bool] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Tuple[List[SecurityAlert], int]:
        """
        List alerts: unreviewed first, then by severity (high first), newest first.

        Returns:
            Tuple of (alerts page, total matching alerts)
        """
        pass

    @abstractmethod
    async def stats(self) -> Dict[str, int]:
        """Counts per severity/type plus total and unreviewed"""
        pass

    @abstractmethod
    async def mark_reviewed(
        self, alert_id: UUID, reviewer_id: UUID, now: datetime
    ) -> Optional[SecurityAlert]:
        """Review an unreviewed alert. Returns None if missing or already reviewed."""
        pass

    @abstractmethod
    async def mark_all_reviewed(self, reviewer_id: UUID, now: datetime) -> int:
        """Review every unreviewed alert. Returns count."""
        pass

    @abstractmethod
    async def count_created_since(self, since: datetime) -> int:
        pass
