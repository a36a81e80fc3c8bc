"""
Security Alerts Use Case

Browsing and reviewing alerts raised by the security heuristics. Review is
one-way: a reviewed alert cannot be reviewed again or reopened.
"""

import logging
from typing import Any, Dict, Optional
from uuid import UUID

from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.serializers import alert_dict, pagination
from src.domain.base import utcnow
from src.libs.result import Error, Result, Return

logger = logging.getLogger(__name__)


class SecurityAlertsUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def list_alerts(
        self,
        alert_type: Optional[str] = None,
        severity: Optional[str] = None,
        reviewed: Optional[bool] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Result[Dict[str, Any]]:
        async with self.uow:
            alerts, total = await self.uow.security_alerts.list_paginated(
                alert_type=alert_type,
                severity=severity,
                reviewed=reviewed,
                limit=limit,
                offset=(page - 1) * limit,
            )
            return Return.ok(
                {
                    "alerts": [alert_dict(alert) for alert in alerts],
                    "pagination": pagination(page, limit, total),
                }
            )

    async def stats(self) -> Result[Dict[str, Any]]:
        async with self.uow:
            return Return.ok({"stats": await self.uow.security_alerts.stats()})

    async def review(self, alert_id: UUID, reviewer_id: UUID) -> Result[Dict[str, Any]]:
        async with self.uow:
            alert = await self.uow.security_alerts.mark_reviewed(alert_id, reviewer_id, utcnow())
            if alert is None:
                return Return.err(
                    Error("ALERT_NOT_FOUND", "Alert not found or already reviewed")
                )
            await self.uow.commit()
            return Return.ok({"alert": alert_dict(alert)})

    async def review_all(self, reviewer_id: UUID) -> Result[Dict[str, Any]]:
        async with self.uow:
            count = await self.uow.security_alerts.mark_all_reviewed(reviewer_id, utcnow())
            await self.uow.commit()
            logger.info(f"{reviewer_id} reviewed {count} alert(s)")
            return Return.ok({"reviewed_count": count})
