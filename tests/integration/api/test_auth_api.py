import pytest
from httpx import ASGITransport, AsyncClient
from sqlmodel import select

from config import ApplicationConfig
from src.depends import get_clock
from src.domain.entities import AuditLog, Session
from tests.fixtures.factories import API, TEST_PASSWORD, bearer, create_user, open_session


@pytest.mark.asyncio
async def test_login_opens_session_and_sets_cookie(client: AsyncClient, db_session):
    """
    Given an active user
    When they log in with the right password
    Then a token is returned in the body and an httpOnly cookie
    And a session row holds only the token hash
    And an auth.login audit entry is written
    """
    user_id = await create_user(db_session, "jane@example.com", roles=("moderator",))

    response = await client.post(
        f"{API}/auth/login", json={"email": "Jane@Example.com", "password": TEST_PASSWORD}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    data = body["data"]
    assert data["user"]["email"] == "jane@example.com"
    assert data["user"]["role"] == "moderator"
    assert data["token"]

    set_cookie = response.headers["set-cookie"]
    assert set_cookie.startswith(f"{ApplicationConfig.AUTH_COOKIE_NAME}=")
    assert "httponly" in set_cookie.lower()

    sessions = (await db_session.execute(select(Session).where(Session.user_id == user_id))).scalars().all()
    assert len(sessions) == 1
    assert sessions[0].token_hash != data["token"]

    logins = (
        await db_session.execute(select(AuditLog).where(AuditLog.action == "auth.login"))
    ).scalars().all()
    assert len(logins) == 1
    assert logins[0].target_id == str(user_id)


@pytest.mark.asyncio
async def test_login_invalid_credentials(client: AsyncClient, db_session):
    await create_user(db_session, "jane@example.com")

    wrong_password = await client.post(
        f"{API}/auth/login", json={"email": "jane@example.com", "password": "nope"}
    )
    unknown_email = await client.post(
        f"{API}/auth/login", json={"email": "ghost@example.com", "password": TEST_PASSWORD}
    )

    for response in (wrong_password, unknown_email):
        assert response.status_code == 401
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "INVALID_CREDENTIALS"

    sessions = (await db_session.execute(select(Session))).scalars().all()
    assert sessions == []


@pytest.mark.asyncio
async def test_login_refused_for_locked_account(client: AsyncClient, db_session):
    await create_user(db_session, "locked@example.com", locked_reason="Chargeback")

    response = await client.post(
        f"{API}/auth/login", json={"email": "locked@example.com", "password": TEST_PASSWORD}
    )

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "ACCOUNT_LOCKED"


@pytest.mark.asyncio
async def test_login_validation_error_envelope(client: AsyncClient):
    response = await client.post(f"{API}/auth/login", json={"email": "not-an-email"})

    assert response.status_code == 422
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert {field["field"] for field in error["fields"]} >= {"email", "password"}


@pytest.mark.asyncio
async def test_me_returns_roles_and_derived_role(client: AsyncClient, db_session):
    user_id = await create_user(db_session, "both@example.com", roles=("user", "admin"))
    token = await open_session(db_session, user_id, email="both@example.com")

    response = await client.get(f"{API}/auth/me", headers=bearer(token))

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["id"] == str(user_id)
    assert data["role"] == "admin"
    assert {role["name"] for role in data["roles"]} == {"user", "admin"}


@pytest.mark.asyncio
async def test_me_without_token(client: AsyncClient):
    response = await client.get(f"{API}/auth/me")

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "NO_TOKEN"


@pytest.mark.asyncio
async def test_me_with_garbage_token(client: AsyncClient):
    response = await client.get(f"{API}/auth/me", headers=bearer("not.a.jwt"))

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "INVALID_TOKEN"


@pytest.mark.asyncio
async def test_logout_revokes_session(client: AsyncClient, db_session):
    """
    Given a signed-in user
    When they log out
    Then the same token is refused with SESSION_REVOKED
    """
    user_id = await create_user(db_session, "jane@example.com")
    token = await open_session(db_session, user_id, email="jane@example.com")

    logout = await client.post(f"{API}/auth/logout", headers=bearer(token))
    assert logout.status_code == 200
    assert logout.json()["data"]["revoked"] is True

    response = await client.get(f"{API}/auth/me", headers=bearer(token))
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "SESSION_REVOKED"


@pytest.mark.asyncio
async def test_expired_session_is_refused(client: AsyncClient, db_session):
    user_id = await create_user(db_session, "jane@example.com")
    token = await open_session(db_session, user_id, email="jane@example.com", expired=True)

    response = await client.get(f"{API}/auth/me", headers=bearer(token))

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "SESSION_EXPIRED"


@pytest.mark.asyncio
async def test_token_without_session_is_refused(client: AsyncClient, db_session):
    from datetime import timedelta

    from src.api.utils.jwt import create_access_token

    user_id = await create_user(db_session, "jane@example.com")
    token = create_access_token(user_id, "jane@example.com", timedelta(days=1))

    response = await client.get(f"{API}/auth/me", headers=bearer(token))

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "SESSION_NOT_FOUND"


@pytest.mark.asyncio
async def test_locked_user_cannot_use_existing_session(client: AsyncClient, db_session):
    user_id = await create_user(db_session, "jane@example.com", locked_reason="Abuse")
    token = await open_session(db_session, user_id, email="jane@example.com")

    response = await client.get(f"{API}/auth/me", headers=bearer(token))

    assert response.status_code == 403
    error = response.json()["error"]
    assert error["code"] == "ACCOUNT_LOCKED"
    assert error["reason"] == "Abuse"


@pytest.mark.asyncio
async def test_health_is_outside_api_prefix(client: AsyncClient):
    response = await client.get("/health")

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_login_attempts_are_rate_limited_per_address(
    client: AsyncClient, db_session, clock
):
    """
    Given five login attempts from one address inside 15 minutes
    Then the sixth is refused with 429 before the password is checked
    And once the window passes the address may log in again
    """
    await create_user(db_session, "jane@example.com")

    for _ in range(5):
        response = await client.post(
            f"{API}/auth/login", json={"email": "jane@example.com", "password": "wrong"}
        )
        assert response.status_code == 401

    limited = await client.post(
        f"{API}/auth/login", json={"email": "jane@example.com", "password": TEST_PASSWORD}
    )
    assert limited.status_code == 429
    error = limited.json()["error"]
    assert error["code"] == "RATE_LIMIT_EXCEEDED"
    assert 0 < error["retry_after"] <= 15 * 60
    assert int(limited.headers["retry-after"]) == error["retry_after"]
    assert (await db_session.execute(select(Session))).scalars().all() == []

    clock.advance(15 * 60 + 1)

    response = await client.post(
        f"{API}/auth/login", json={"email": "jane@example.com", "password": TEST_PASSWORD}
    )
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_unexpected_error_keeps_error_envelope(app, admin):
    _, headers = admin

    def broken_clock():
        raise RuntimeError("clock unavailable")

    app.dependency_overrides[get_clock] = broken_clock
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        response = await ac.get(f"{API}/admin/users", headers=headers)

    assert response.status_code == 500
    assert response.json() == {
        "success": False,
        "error": {"code": "INTERNAL_ERROR", "message": "Internal server error"},
    }
