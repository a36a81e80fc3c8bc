import time
from typing import Callable

from fastapi import Depends
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.adapter.services.memory_counters import InMemoryFailureCounter, InMemoryRateWindowStore
from src.adapter.services.unit_of_work import SessionScopedUnitOfWork, SqlAlchemyUnitOfWork
from src.app.services.audit_recorder import AuditRecorder
from src.app.services.counter_store import IFailureCounter, IRateWindowStore
from src.app.services.rate_limiter import RateLimitPolicy
from src.app.services.security_heuristics import (
    HeuristicsSettings,
    SecurityHeuristics,
    UnitOfWorkFactory,
)
from src.app.services.unit_of_work import UnitOfWork

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

# Process-wide counters; swap these dependencies for a shared-store
# implementation when running more than one worker.
rate_window_store = InMemoryRateWindowStore()
login_failure_counter = InMemoryFailureCounter()


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


def get_uow_factory() -> UnitOfWorkFactory:
    """Factory for work that outlives the request (background tasks)"""
    return lambda: SessionScopedUnitOfWork(AsyncSessionLocal())


def get_clock() -> Callable[[], float]:
    return time.time


def get_rate_window_store() -> IRateWindowStore:
    return rate_window_store


def get_login_failure_counter() -> IFailureCounter:
    return login_failure_counter


def get_admin_rate_limit_policy() -> RateLimitPolicy:
    return RateLimitPolicy(
        max_actions=ApplicationConfig.ADMIN_RATE_LIMIT_MAX_ACTIONS,
        window_minutes=ApplicationConfig.ADMIN_RATE_LIMIT_WINDOW_MINUTES,
        scope="admin",
    )


def get_login_rate_limit_policy() -> RateLimitPolicy:
    return RateLimitPolicy(
        max_actions=ApplicationConfig.LOGIN_RATE_LIMIT_MAX_ACTIONS,
        window_minutes=ApplicationConfig.LOGIN_RATE_LIMIT_WINDOW_MINUTES,
        scope="login",
    )


def get_heuristics_settings() -> HeuristicsSettings:
    return HeuristicsSettings(
        brute_force_threshold=ApplicationConfig.BRUTE_FORCE_THRESHOLD,
        brute_force_window_minutes=ApplicationConfig.BRUTE_FORCE_WINDOW_MINUTES,
        suspicious_login_ip_threshold=ApplicationConfig.SUSPICIOUS_LOGIN_IP_THRESHOLD,
        suspicious_login_window_minutes=ApplicationConfig.SUSPICIOUS_LOGIN_WINDOW_MINUTES,
        multi_session_threshold=ApplicationConfig.MULTI_SESSION_THRESHOLD,
    )


def get_security_heuristics(
    counter: IFailureCounter = Depends(get_login_failure_counter),
    uow_factory: UnitOfWorkFactory = Depends(get_uow_factory),
    settings: HeuristicsSettings = Depends(get_heuristics_settings),
    clock: Callable[[], float] = Depends(get_clock),
) -> SecurityHeuristics:
    return SecurityHeuristics.build(counter, uow_factory, settings, clock=clock)


def get_audit_recorder(uow: UnitOfWork = Depends(get_unit_of_work)) -> AuditRecorder:
    return AuditRecorder(uow)
