"""
Security Heuristics

Best-effort detectors that inspect recent activity and raise SecurityAlerts.
They run after the response is produced; any failure inside them is logged
and swallowed.
"""

import logging
import time
from dataclasses import dataclass
from datetime import timedelta
from typing import Callable, Optional
from uuid import UUID

from src.app.services.counter_store import IFailureCounter
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import AlertSeverity, AlertType, SecurityAlert

logger = logging.getLogger(__name__)

UnitOfWorkFactory = Callable[[], UnitOfWork]

LOGIN_ACTION = "auth.login"


@dataclass(frozen=True)
class HeuristicsSettings:
    brute_force_threshold: int = 5
    brute_force_window_minutes: float = 15
    suspicious_login_ip_threshold: int = 3
    suspicious_login_window_minutes: float = 60
    multi_session_threshold: int = 3


async def _store_alert(uow: UnitOfWork, alert: SecurityAlert) -> SecurityAlert:
    await uow.security_alerts.create(alert)
    await uow.commit()
    logger.warning(f"[SECURITY] {alert.severity.value.upper()}: {alert.message}")
    return alert


class BruteForceDetector:
    """
    Counts failed logins per source address.

    A streak starts at the first failure and expires `window_minutes` later.
    The alert fires once, when the streak reaches the threshold; further
    failures in the same streak stay silent. A successful login resets it.
    """

    def __init__(
        self,
        counter: IFailureCounter,
        uow_factory: UnitOfWorkFactory,
        threshold: int = 5,
        window_minutes: float = 15,
        clock: Callable[[], float] = time.time,
    ):
        self.counter = counter
        self.uow_factory = uow_factory
        self.threshold = threshold
        self.window_seconds = window_minutes * 60
        self.clock = clock

    @staticmethod
    def key_for(ip_address: str) -> str:
        return f"login-failures:{ip_address}"

    async def record_failure(
        self, ip_address: str, user_agent: Optional[str] = None
    ) -> Optional[SecurityAlert]:
        attempts = await self.counter.increment(
            self.key_for(ip_address), self.clock(), self.window_seconds
        )
        if attempts != self.threshold:
            return None

        alert = SecurityAlert(
            type=AlertType.brute_force,
            severity=AlertSeverity.high,
            message=f"Brute force attempt detected from IP {ip_address}",
            alert_metadata={
                "ip_address": ip_address,
                "attempts": attempts,
                "user_agent": user_agent,
            },
        )
        uow = self.uow_factory()
        async with uow:
            return await _store_alert(uow, alert)

    async def record_success(self, ip_address: str) -> None:
        await self.counter.reset(self.key_for(ip_address))


class SuspiciousLoginDetector:
    """Flags a user whose logins in the trailing window came from many addresses."""

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        threshold: int = 3,
        window_minutes: float = 60,
    ):
        self.uow_factory = uow_factory
        self.threshold = threshold
        self.window = timedelta(minutes=window_minutes)

    async def inspect(
        self, user_id: UUID, ip_address: Optional[str], user_agent: Optional[str] = None
    ) -> Optional[SecurityAlert]:
        uow = self.uow_factory()
        async with uow:
            ip_count = await uow.audit_logs.count_distinct_ips(
                user_id, LOGIN_ACTION, since=utcnow() - self.window
            )
            if ip_count < self.threshold:
                return None

            alert = SecurityAlert(
                type=AlertType.suspicious_login,
                severity=AlertSeverity.medium,
                message=f"User {user_id} logged in from multiple IPs",
                alert_metadata={
                    "user_id": str(user_id),
                    "ip_count": ip_count,
                    "current_ip": ip_address,
                    "user_agent": user_agent,
                },
            )
            return await _store_alert(uow, alert)


class MultiSessionDetector:
    """Flags a user holding many valid sessions at once."""

    def __init__(self, uow_factory: UnitOfWorkFactory, threshold: int = 3):
        self.uow_factory = uow_factory
        self.threshold = threshold

    async def inspect(
        self, user_id: UUID, ip_address: Optional[str] = None
    ) -> Optional[SecurityAlert]:
        uow = self.uow_factory()
        async with uow:
            session_count = await uow.sessions.count_active_by_user(user_id, utcnow())
            if session_count < self.threshold:
                return None

            alert = SecurityAlert(
                type=AlertType.multiple_sessions,
                severity=AlertSeverity.low,
                message=f"User {user_id} has {session_count} active sessions",
                alert_metadata={
                    "user_id": str(user_id),
                    "session_count": session_count,
                    "current_ip": ip_address,
                },
            )
            return await _store_alert(uow, alert)


class SecurityHeuristics:
    """Runs the detectors as fire-and-forget side channels of authentication."""

    def __init__(
        self,
        brute_force: BruteForceDetector,
        suspicious_login: SuspiciousLoginDetector,
        multi_session: MultiSessionDetector,
    ):
        self.brute_force = brute_force
        self.suspicious_login = suspicious_login
        self.multi_session = multi_session

    @classmethod
    def build(
        cls,
        counter: IFailureCounter,
        uow_factory: UnitOfWorkFactory,
        settings: HeuristicsSettings,
        clock: Callable[[], float] = time.time,
    ) -> "SecurityHeuristics":
        return cls(
            BruteForceDetector(
                counter,
                uow_factory,
                threshold=settings.brute_force_threshold,
                window_minutes=settings.brute_force_window_minutes,
                clock=clock,
            ),
            SuspiciousLoginDetector(
                uow_factory,
                threshold=settings.suspicious_login_ip_threshold,
                window_minutes=settings.suspicious_login_window_minutes,
            ),
            MultiSessionDetector(uow_factory, threshold=settings.multi_session_threshold),
        )

    async def _safely(self, name: str, func, *args) -> None:
        try:
            await func(*args)
        except Exception:
            logger.exception(f"{name} detection failed")

    async def on_login_failure(self, ip_address: str, user_agent: Optional[str] = None) -> None:
        await self._safely("Brute force", self.brute_force.record_failure, ip_address, user_agent)

    async def on_login_success(
        self, user_id: UUID, ip_address: str, user_agent: Optional[str] = None
    ) -> None:
        await self._safely("Brute force reset", self.brute_force.record_success, ip_address)
        await self._safely(
            "Suspicious login", self.suspicious_login.inspect, user_id, ip_address, user_agent
        )
        await self._safely("Multiple sessions", self.multi_session.inspect, user_id, ip_address)
