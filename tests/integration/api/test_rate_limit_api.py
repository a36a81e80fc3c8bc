import pytest
from httpx import AsyncClient

from src.app.services.rate_limiter import RateLimitPolicy
from src.depends import get_admin_rate_limit_policy
from tests.fixtures.factories import API


@pytest.fixture
def tight_policy(app):
    app.dependency_overrides[get_admin_rate_limit_policy] = lambda: RateLimitPolicy(
        max_actions=3, window_minutes=5
    )


@pytest.mark.asyncio
async def test_admin_rate_limit(client: AsyncClient, admin, clock, tight_policy):
    """
    Given a budget of 3 actions per 5 minutes
    When the admin makes a 4th call inside the window
    Then it is refused with 429 and a positive Retry-After
    And after the window passes calls succeed again
    """
    _, headers = admin

    for _ in range(3):
        response = await client.get(f"{API}/admin/users", headers=headers)
        assert response.status_code == 200

    limited = await client.get(f"{API}/admin/users", headers=headers)
    assert limited.status_code == 429
    error = limited.json()["error"]
    assert error["code"] == "RATE_LIMIT_EXCEEDED"
    assert error["retry_after"] > 0
    assert int(limited.headers["retry-after"]) == error["retry_after"]

    clock.advance(301)

    response = await client.get(f"{API}/admin/users", headers=headers)
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_rate_limit_is_per_admin(client: AsyncClient, admin, moderator, tight_policy):
    _, admin_headers = admin
    _, moderator_headers = moderator

    for _ in range(3):
        await client.get(f"{API}/admin/users", headers=admin_headers)

    assert (await client.get(f"{API}/admin/users", headers=admin_headers)).status_code == 429
    assert (await client.get(f"{API}/admin/users", headers=moderator_headers)).status_code == 200


@pytest.mark.asyncio
async def test_denied_requests_do_not_consume_budget(client: AsyncClient, moderator, tight_policy):
    _, headers = moderator

    for _ in range(5):
        denied = await client.post(
            f"{API}/admin/users", json={"email": "x@example.com", "password": "s3cret!"}, headers=headers
        )
        assert denied.status_code == 403

    assert (await client.get(f"{API}/admin/users", headers=headers)).status_code == 200
