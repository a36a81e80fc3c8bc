import pytest
from httpx import AsyncClient

from src.domain.entities import AlertSeverity, AlertType, SecurityAlert
from tests.fixtures.factories import API, bearer, create_user, open_session


@pytest.mark.asyncio
async def test_dashboard_stats(client: AsyncClient, db_session, admin):
    """
    Given an admin, two regular users (one already locked), a high alert
    And the admin locks a user and blocks an address
    Then the overview reflects users, roles, security, sessions and activity
    """
    _, headers = admin
    user_id = await create_user(db_session, "jane@example.com")
    await create_user(db_session, "spam@example.com", locked_reason="Spam")
    db_session.add(
        SecurityAlert(type=AlertType.brute_force, severity=AlertSeverity.high, message="5 failures")
    )
    await db_session.commit()

    await client.post(f"{API}/admin/users/{user_id}/lock", json={"reason": "Abuse"}, headers=headers)
    await client.post(
        f"{API}/admin/security/blocked-ips",
        json={"ip_address": "10.0.0.5", "reason": "Scanner"},
        headers=headers,
    )

    response = await client.get(f"{API}/admin/dashboard/stats", headers=headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["users"] == {
        "total_users": 3,
        "new_users_7d": 3,
        "new_users_30d": 3,
        "locked_users": 2,
        "deleted_users": 0,
    }
    assert data["roles"][0] == {"name": "user", "user_count": 2}
    assert {"name": "admin", "user_count": 1} in data["roles"]
    assert data["security"] == {
        "unreviewed_alerts": 1,
        "high_severity_alerts": 1,
        "active_ip_blocks": 1,
        "alerts_24h": 1,
    }
    assert data["sessions"] == {"total_sessions": 1, "unique_users": 1}
    assert [row["action_count"] for row in data["recent_activity"]] == [2]
    assert sorted(row["action"] for row in data["top_actions"]) == ["ip.block", "user.lock"]


@pytest.mark.asyncio
async def test_activity_chart_splits_by_area(client: AsyncClient, db_session, admin):
    _, headers = admin
    user_id = await create_user(db_session, "jane@example.com")
    await client.post(f"{API}/admin/users/{user_id}/lock", json={"reason": "Abuse"}, headers=headers)
    await client.post(f"{API}/admin/users/{user_id}/unlock", headers=headers)
    await client.post(
        f"{API}/admin/security/blocked-ips",
        json={"ip_address": "10.0.0.5", "reason": "Scanner"},
        headers=headers,
    )

    response = await client.get(f"{API}/admin/dashboard/activity-chart?days=7", headers=headers)

    assert response.status_code == 200
    activity = response.json()["data"]["activity"]
    assert len(activity) == 1
    assert activity[0]["user_actions"] == 2
    assert activity[0]["role_actions"] == 0
    assert activity[0]["security_actions"] == 1
    assert activity[0]["total_actions"] == 3

    invalid = await client.get(f"{API}/admin/dashboard/activity-chart?days=0", headers=headers)
    assert invalid.status_code == 422


@pytest.mark.asyncio
async def test_system_health(client: AsyncClient, admin):
    _, headers = admin

    response = await client.get(f"{API}/admin/system/health", headers=headers)

    assert response.status_code == 200
    health = response.json()["data"]["health"]
    assert health["database"] is True
    assert health["timestamp"].endswith("Z")


@pytest.mark.asyncio
async def test_moderator_sees_activity_but_not_stats(client: AsyncClient, moderator):
    _, headers = moderator

    chart = await client.get(f"{API}/admin/dashboard/activity-chart", headers=headers)
    stats = await client.get(f"{API}/admin/dashboard/stats", headers=headers)

    assert chart.status_code == 200
    assert stats.status_code == 403
    assert stats.json()["error"]["code"] == "PERMISSION_DENIED"


@pytest.mark.asyncio
async def test_dashboard_requires_admin(client: AsyncClient, db_session):
    user_id = await create_user(db_session, "jane@example.com")
    headers = bearer(await open_session(db_session, user_id, email="jane@example.com"))

    response = await client.get(f"{API}/admin/dashboard/stats", headers=headers)

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "ADMIN_REQUIRED"
