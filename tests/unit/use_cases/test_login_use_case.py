from uuid import uuid4

import bcrypt
import pytest

from src.api.utils.jwt import hash_token, verify_token
from src.app.use_cases.auth.login_use_case import LoginUseCase
from src.domain.base import utcnow
from src.domain.entities import Role, User

PASSWORD = "SecurePass123!"
PASSWORD_HASH = bcrypt.hashpw(PASSWORD.encode(), bcrypt.gensalt(4)).decode()


def make_user(**kwargs):
    return User(id=uuid4(), email="user@acme.com", password_hash=PASSWORD_HASH, **kwargs)


@pytest.mark.asyncio
async def test_successful_login(mock_uow):
    """Token issued, session stores only its hash, login audited"""
    user = make_user()
    mock_uow.users.get_by_email.return_value = user
    mock_uow.roles.get_roles_for_user.return_value = [
        Role(name="moderator", permissions=["users.view"]),
        Role(name="user", permissions=[]),
    ]

    result = await LoginUseCase(mock_uow).execute(
        "  User@Acme.com ", PASSWORD, ip_address="10.0.0.1", user_agent="pytest"
    )

    assert result.is_ok()
    response = result.value
    mock_uow.users.get_by_email.assert_awaited_once_with("user@acme.com")
    assert verify_token(response.token).value.user_id == user.id
    assert response.user.role == "moderator"
    assert [role.name for role in response.user.roles] == ["moderator", "user"]

    session = mock_uow.sessions.create.await_args.args[0]
    assert session.token_hash == hash_token(response.token)
    assert session.ip_address == "10.0.0.1"
    assert str(session.id) == response.session_id

    entry = mock_uow.audit_logs.create.await_args.args[0]
    assert entry.action == "auth.login"
    assert entry.admin_id == user.id
    assert entry.ip_address == "10.0.0.1"

    assert user.last_login_at is not None
    mock_uow.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_unknown_email(mock_uow):
    mock_uow.users.get_by_email.return_value = None

    result = await LoginUseCase(mock_uow).execute("ghost@acme.com", PASSWORD)

    assert result.is_err()
    assert result.error.code == "INVALID_CREDENTIALS"
    mock_uow.sessions.create.assert_not_awaited()


@pytest.mark.asyncio
async def test_wrong_password(mock_uow):
    mock_uow.users.get_by_email.return_value = make_user()

    result = await LoginUseCase(mock_uow).execute("user@acme.com", "nope")

    assert result.error.code == "INVALID_CREDENTIALS"
    mock_uow.commit.assert_not_awaited()


@pytest.mark.asyncio
async def test_deleted_user_cannot_log_in(mock_uow):
    mock_uow.users.get_by_email.return_value = make_user(deleted_at=utcnow())

    result = await LoginUseCase(mock_uow).execute("user@acme.com", PASSWORD)

    assert result.error.code == "INVALID_CREDENTIALS"


@pytest.mark.asyncio
async def test_locked_user_cannot_log_in(mock_uow):
    mock_uow.users.get_by_email.return_value = make_user(locked_at=utcnow(), lock_reason="Fraud")

    result = await LoginUseCase(mock_uow).execute("user@acme.com", PASSWORD)

    assert result.error.code == "ACCOUNT_LOCKED"
    assert "Fraud" in result.error.message
    mock_uow.sessions.create.assert_not_awaited()


@pytest.mark.asyncio
async def test_remember_me_extends_session(mock_uow):
    mock_uow.users.get_by_email.return_value = make_user()
    mock_uow.roles.get_roles_for_user.return_value = []

    await LoginUseCase(mock_uow).execute("user@acme.com", PASSWORD, remember_me=True)

    session = mock_uow.sessions.create.await_args.args[0]
    assert (session.expires_at - utcnow()).days >= 29
