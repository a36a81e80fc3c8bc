import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.adapter.services.memory_counters import InMemoryFailureCounter, InMemoryRateWindowStore
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.use_cases.roles import SeedSystemRolesUseCase
from src.depends import (
    get_clock,
    get_login_failure_counter,
    get_rate_window_store,
    get_unit_of_work,
    get_uow_factory,
)
from tests.fixtures.factories import bearer, create_user, open_session


class FakeClock:
    """Epoch-seconds clock that only moves when told to"""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite:///./test.db")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine):
    Session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with Session() as session:
        await SeedSystemRolesUseCase(SqlAlchemyUnitOfWork(session)).execute()
        yield session


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def rate_store():
    return InMemoryRateWindowStore()


@pytest.fixture
def failure_counter():
    return InMemoryFailureCounter()


@pytest_asyncio.fixture
async def app(db_session, clock, rate_store, failure_counter):
    from src.api.app import create_app

    app = create_app(ApplicationConfig)

    async def override_get_unit_of_work():
        yield SqlAlchemyUnitOfWork(db_session)

    app.dependency_overrides[get_unit_of_work] = override_get_unit_of_work
    app.dependency_overrides[get_uow_factory] = lambda: (lambda: SqlAlchemyUnitOfWork(db_session))
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_rate_window_store] = lambda: rate_store
    app.dependency_overrides[get_login_failure_counter] = lambda: failure_counter
    return app


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def admin(db_session):
    """(user id, auth headers) of a signed-in admin"""
    admin_id = await create_user(db_session, "admin@example.com", roles=("admin",))
    token = await open_session(db_session, admin_id, email="admin@example.com")
    return admin_id, bearer(token)


@pytest_asyncio.fixture
async def moderator(db_session):
    moderator_id = await create_user(db_session, "mod@example.com", roles=("moderator",))
    token = await open_session(db_session, moderator_id, email="mod@example.com")
    return moderator_id, bearer(token)
