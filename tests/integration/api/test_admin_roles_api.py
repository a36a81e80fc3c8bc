import pytest
from httpx import AsyncClient
from sqlmodel import select

from src.domain.entities import AuditLog, UserRole
from tests.fixtures.factories import API, create_user, role_id


async def role_names(client: AsyncClient, headers, user_id):
    response = await client.get(f"{API}/admin/users/{user_id}", headers=headers)
    return {role["name"] for role in response.json()["data"]["user"]["roles"]}


@pytest.mark.asyncio
async def test_cannot_remove_last_role(client: AsyncClient, db_session, admin):
    """
    Given a user holding only the `user` role
    When an admin removes it
    Then the request fails with 400 LAST_ROLE and the assignment remains
    """
    _, headers = admin
    user_id = await create_user(db_session, "jane@example.com", roles=("user",))
    user_role = await role_id(db_session, "user")

    response = await client.delete(
        f"{API}/admin/users/{user_id}/roles/{user_role}", headers=headers
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "LAST_ROLE"
    remaining = (
        await db_session.execute(select(UserRole).where(UserRole.user_id == user_id))
    ).scalars().all()
    assert len(remaining) == 1


@pytest.mark.asyncio
async def test_remove_one_of_two_roles(client: AsyncClient, db_session, admin):
    _, headers = admin
    user_id = await create_user(db_session, "jane@example.com", roles=("user", "moderator"))
    moderator_role = await role_id(db_session, "moderator")

    response = await client.delete(
        f"{API}/admin/users/{user_id}/roles/{moderator_role}", headers=headers
    )

    assert response.status_code == 200
    assert await role_names(client, headers, user_id) == {"user"}

    entries = (
        await db_session.execute(select(AuditLog).where(AuditLog.action == "role.remove"))
    ).scalars().all()
    assert len(entries) == 1
    assert entries[0].target_id == str(user_id)
    assert entries[0].changes == {"role_id": str(moderator_role)}


@pytest.mark.asyncio
async def test_assign_role_twice(client: AsyncClient, db_session, admin):
    _, headers = admin
    user_id = await create_user(db_session, "jane@example.com")
    moderator_role = await role_id(db_session, "moderator")

    first = await client.post(f"{API}/admin/users/{user_id}/roles/{moderator_role}", headers=headers)
    second = await client.post(f"{API}/admin/users/{user_id}/roles/{moderator_role}", headers=headers)

    assert first.status_code == 200
    assert first.json()["data"]["role_name"] == "moderator"
    assert second.status_code == 409
    assert second.json()["error"]["code"] == "ROLE_ALREADY_ASSIGNED"
    assert await role_names(client, headers, user_id) == {"user", "moderator"}


@pytest.mark.asyncio
async def test_admin_cannot_remove_own_role(client: AsyncClient, db_session, admin):
    admin_id, headers = admin
    admin_role = await role_id(db_session, "admin")

    response = await client.delete(
        f"{API}/admin/users/{admin_id}/roles/{admin_role}", headers=headers
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "SELF_TARGET_FORBIDDEN"


@pytest.mark.asyncio
async def test_system_role_is_immutable(client: AsyncClient, db_session, admin):
    _, headers = admin
    moderator_role = await role_id(db_session, "moderator")

    update = await client.put(
        f"{API}/admin/roles/{moderator_role}", json={"description": "changed"}, headers=headers
    )
    delete = await client.delete(f"{API}/admin/roles/{moderator_role}", headers=headers)

    for response in (update, delete):
        assert response.status_code == 403
        assert response.json()["error"]["code"] == "SYSTEM_ROLE_IMMUTABLE"


@pytest.mark.asyncio
async def test_custom_role_lifecycle(client: AsyncClient, db_session, admin):
    _, headers = admin

    created = await client.post(
        f"{API}/admin/roles",
        json={"name": "support", "permissions": ["users.view", "audit.view"]},
        headers=headers,
    )
    assert created.status_code == 201
    role = created.json()["data"]["role"]
    assert role["is_system"] is False
    assert role["user_count"] == 0

    duplicate = await client.post(f"{API}/admin/roles", json={"name": "support"}, headers=headers)
    assert duplicate.status_code == 409
    assert duplicate.json()["error"]["code"] == "ROLE_NAME_TAKEN"

    user_id = await create_user(db_session, "jane@example.com")
    await client.post(f"{API}/admin/users/{user_id}/roles/{role['id']}", headers=headers)

    in_use = await client.delete(f"{API}/admin/roles/{role['id']}", headers=headers)
    assert in_use.status_code == 409
    assert in_use.json()["error"]["code"] == "ROLE_IN_USE"

    await client.delete(f"{API}/admin/users/{user_id}/roles/{role['id']}", headers=headers)
    deleted = await client.delete(f"{API}/admin/roles/{role['id']}", headers=headers)
    assert deleted.status_code == 200


@pytest.mark.asyncio
async def test_create_role_with_unknown_permission(client: AsyncClient, admin):
    _, headers = admin

    response = await client.post(
        f"{API}/admin/roles",
        json={"name": "odd", "permissions": ["users.view", "rockets.launch"]},
        headers=headers,
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "UNKNOWN_PERMISSION"


@pytest.mark.asyncio
async def test_list_roles_puts_system_roles_first(client: AsyncClient, admin):
    _, headers = admin
    await client.post(f"{API}/admin/roles", json={"name": "aaa-custom"}, headers=headers)

    response = await client.get(f"{API}/admin/roles", headers=headers)

    assert response.status_code == 200
    roles = response.json()["data"]["roles"]
    assert roles[-1]["name"] == "aaa-custom"
    admin_role = next(role for role in roles if role["name"] == "admin")
    assert admin_role["user_count"] == 1


@pytest.mark.asyncio
async def test_permission_catalog(client: AsyncClient, admin):
    _, headers = admin

    response = await client.get(f"{API}/admin/permissions", headers=headers)

    assert response.status_code == 200
    categories = {group["category"] for group in response.json()["data"]["permissions"]}
    assert {"Users", "Roles", "Security", "Audit"} <= categories
