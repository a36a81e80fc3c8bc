import pytest
from unittest.mock import AsyncMock, MagicMock

from src.app.services.rate_limiter import RateLimitPolicy


@pytest.fixture
def mock_uow():
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()
    uow.ping = AsyncMock()

    # Every repository method is awaitable
    uow.users = AsyncMock()
    uow.sessions = AsyncMock()
    uow.roles = AsyncMock()
    uow.audit_logs = AsyncMock()
    uow.security_alerts = AsyncMock()
    uow.blocked_ips = AsyncMock()
    return uow


@pytest.fixture
def uow_factory(mock_uow):
    return lambda: mock_uow


class StepClock:
    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return StepClock()


@pytest.fixture
def small_policy():
    return RateLimitPolicy(max_actions=3, window_minutes=1)
