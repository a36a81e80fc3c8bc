from uuid import uuid4

import bcrypt
import pytest

from src.app.use_cases.users import (
    CreateUserUseCase,
    DeleteUserUseCase,
    LockUserUseCase,
    ResetPasswordUseCase,
)
from src.domain.base import utcnow
from src.domain.entities import Role, User


def make_user(**kwargs):
    return User(id=uuid4(), email="jane@example.com", password_hash="x" * 60, **kwargs)


@pytest.mark.asyncio
async def test_lock_revokes_sessions(mock_uow):
    user = make_user()
    mock_uow.users.get_active_by_id.return_value = user
    mock_uow.sessions.revoke_all_by_user_id.return_value = 3
    mock_uow.roles.get_roles_for_user.return_value = []

    result = await LockUserUseCase(mock_uow).lock(user.id, "Chargeback")

    assert result.is_ok()
    assert result.value["revoked_sessions"] == 3
    assert result.value["user"]["is_locked"] is True
    assert user.lock_reason == "Chargeback"
    mock_uow.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_lock_unknown_user(mock_uow):
    mock_uow.users.get_active_by_id.return_value = None

    result = await LockUserUseCase(mock_uow).lock(uuid4(), "Spam")

    assert result.error.code == "USER_NOT_FOUND"
    mock_uow.sessions.revoke_all_by_user_id.assert_not_awaited()


@pytest.mark.asyncio
async def test_unlock_requires_locked_user(mock_uow):
    mock_uow.users.get_active_by_id.return_value = make_user()

    result = await LockUserUseCase(mock_uow).unlock(uuid4())

    assert result.error.code == "USER_NOT_LOCKED"


@pytest.mark.asyncio
async def test_unlock_clears_reason(mock_uow):
    user = make_user(locked_at=utcnow(), lock_reason="Spam")
    mock_uow.users.get_active_by_id.return_value = user
    mock_uow.roles.get_roles_for_user.return_value = []

    result = await LockUserUseCase(mock_uow).unlock(user.id)

    assert result.is_ok()
    assert user.locked_at is None
    assert user.lock_reason is None


@pytest.mark.asyncio
async def test_create_user_defaults_to_user_role(mock_uow):
    default_role = Role(id=uuid4(), name="user", is_system=True)
    mock_uow.users.get_by_email.return_value = None
    mock_uow.roles.get_by_name.return_value = default_role
    admin_id = uuid4()

    result = await CreateUserUseCase(mock_uow).execute("New@Example.com", "s3cret!", admin_id)

    assert result.is_ok()
    user = mock_uow.users.create.await_args.args[0]
    assert user.email == "new@example.com"
    assert bcrypt.checkpw(b"s3cret!", user.password_hash.encode())

    assignment = mock_uow.roles.assign.await_args.args[0]
    assert assignment.role_id == default_role.id
    assert assignment.assigned_by == admin_id
    assert result.value["user"]["role"] == "user"


@pytest.mark.asyncio
async def test_create_user_with_unknown_role(mock_uow):
    mock_uow.users.get_by_email.return_value = None
    mock_uow.roles.get_by_ids.return_value = [Role(id=uuid4(), name="user")]

    result = await CreateUserUseCase(mock_uow).execute(
        "new@example.com", "s3cret!", uuid4(), role_ids=[uuid4(), uuid4()]
    )

    assert result.error.code == "ROLE_NOT_FOUND"
    mock_uow.users.create.assert_not_awaited()
    mock_uow.commit.assert_not_awaited()


@pytest.mark.asyncio
async def test_create_user_duplicate_email(mock_uow):
    mock_uow.users.get_by_email.return_value = make_user()

    result = await CreateUserUseCase(mock_uow).execute("jane@example.com", "s3cret!", uuid4())

    assert result.error.code == "EMAIL_ALREADY_EXISTS"


@pytest.mark.asyncio
async def test_delete_user_is_soft(mock_uow):
    user = make_user()
    mock_uow.users.get_active_by_id.return_value = user
    mock_uow.sessions.revoke_all_by_user_id.return_value = 1

    result = await DeleteUserUseCase(mock_uow).execute(user.id)

    assert result.is_ok()
    assert user.deleted_at is not None
    assert result.value["revoked_sessions"] == 1
    mock_uow.users.delete.assert_not_awaited()


@pytest.mark.asyncio
async def test_reset_password_rejects_short_password(mock_uow):
    result = await ResetPasswordUseCase(mock_uow).execute(uuid4(), "abc")

    assert result.error.code == "PASSWORD_TOO_SHORT"
    mock_uow.users.get_active_by_id.assert_not_awaited()


@pytest.mark.asyncio
async def test_reset_password_revokes_sessions(mock_uow):
    user = make_user()
    mock_uow.users.get_active_by_id.return_value = user
    mock_uow.sessions.revoke_all_by_user_id.return_value = 2

    result = await ResetPasswordUseCase(mock_uow).execute(user.id, "longer-password")

    assert result.value == {"user_id": str(user.id), "revoked_sessions": 2}
    assert bcrypt.checkpw(b"longer-password", user.password_hash.encode())
