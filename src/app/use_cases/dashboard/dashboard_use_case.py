"""
Dashboard Use Case

Read-only overview of users, roles, sessions, security state and admin
activity, plus a storage health check.
"""

import logging
from datetime import timedelta
from typing import Any, Dict

from sqlalchemy.exc import SQLAlchemyError

from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.serializers import iso
from src.domain.base import utcnow
from src.libs.result import Result, Return

logger = logging.getLogger(__name__)

RECENT_ACTIVITY_DAYS = 7
TOP_ACTIONS_DAYS = 30
TOP_ACTIONS_LIMIT = 10


class DashboardUseCase:
    """
    Business Rules:
    - Locked users exclude soft-deleted ones; deleted users are counted apart
    - Only sessions that are neither revoked nor expired count as active
    - Activity is grouped per calendar day (UTC)
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def stats(self) -> Result[Dict[str, Any]]:
        now = utcnow()
        async with self.uow:
            users = await self.uow.users.status_counts(now)

            user_counts = await self.uow.roles.count_users_by_role()
            roles = sorted(
                (
                    {"name": role.name, "user_count": user_counts.get(role.id, 0)}
                    for role in await self.uow.roles.list_all()
                ),
                key=lambda row: (-row["user_count"], row["name"]),
            )

            alert_stats = await self.uow.security_alerts.stats()
            security = {
                "unreviewed_alerts": alert_stats["unreviewed"],
                "high_severity_alerts": alert_stats["high_severity"],
                "active_ip_blocks": await self.uow.blocked_ips.count_active(now),
                "alerts_24h": await self.uow.security_alerts.count_created_since(
                    now - timedelta(hours=24)
                ),
            }

            sessions = await self.uow.sessions.active_totals(now)

            recent = await self.uow.audit_logs.daily_activity(
                now - timedelta(days=RECENT_ACTIVITY_DAYS)
            )
            top = await self.uow.audit_logs.top_actions(
                now - timedelta(days=TOP_ACTIONS_DAYS), limit=TOP_ACTIONS_LIMIT
            )

            return Return.ok(
                {
                    "users": users,
                    "roles": roles,
                    "security": security,
                    "sessions": sessions,
                    "recent_activity": [
                        {"date": row["date"], "action_count": row["total_actions"]}
                        for row in reversed(recent)
                    ],
                    "top_actions": [{"action": action, "count": count} for action, count in top],
                }
            )

    async def activity_chart(self, days: int = 30) -> Result[Dict[str, Any]]:
        """Per-day action counts split by area, oldest day first"""
        async with self.uow:
            activity = await self.uow.audit_logs.daily_activity(utcnow() - timedelta(days=days))
            return Return.ok({"activity": activity})

    async def system_health(self) -> Result[Dict[str, Any]]:
        """Never fails: an unreachable store is reported as database=False"""
        health = {"database": False, "timestamp": iso(utcnow())}
        async with self.uow:
            try:
                await self.uow.ping()
                health["database"] = True
            except SQLAlchemyError:
                logger.exception("Database health check failed")
        return Return.ok({"health": health})
