from datetime import timedelta
from uuid import uuid4

import pytest

from src.app.use_cases.security import BlockedIPsUseCase, SecurityAlertsUseCase
from src.domain.base import utcnow
from src.domain.entities import AlertSeverity, AlertType, BlockedIP, SecurityAlert


@pytest.mark.asyncio
async def test_block_normalizes_address(mock_uow):
    mock_uow.blocked_ips.get_active_by_ip.return_value = None

    result = await BlockedIPsUseCase(mock_uow).block(" 2001:DB8::1 ", "Scanner", uuid4())

    assert result.is_ok()
    blocked = mock_uow.blocked_ips.create.await_args.args[0]
    assert blocked.ip_address == "2001:db8::1"
    assert blocked.expires_at is None
    assert result.value["blocked_ip"]["is_active"] is True


@pytest.mark.asyncio
async def test_block_rejects_invalid_address(mock_uow):
    result = await BlockedIPsUseCase(mock_uow).block("10.0.0.300", "typo", uuid4())

    assert result.error.code == "INVALID_IP_ADDRESS"


@pytest.mark.asyncio
async def test_block_rejects_past_expiry(mock_uow):
    result = await BlockedIPsUseCase(mock_uow).block(
        "10.0.0.1", "late", uuid4(), expires_at=utcnow() - timedelta(minutes=1)
    )

    assert result.error.code == "INVALID_EXPIRY"


@pytest.mark.asyncio
async def test_block_rejects_active_duplicate(mock_uow):
    mock_uow.blocked_ips.get_active_by_ip.return_value = BlockedIP(ip_address="10.0.0.1", reason="x")

    result = await BlockedIPsUseCase(mock_uow).block("10.0.0.1", "again", uuid4())

    assert result.error.code == "IP_ALREADY_BLOCKED"
    mock_uow.blocked_ips.create.assert_not_awaited()


@pytest.mark.asyncio
async def test_update_can_make_block_indefinite(mock_uow):
    blocked = BlockedIP(ip_address="10.0.0.1", reason="x", expires_at=utcnow() + timedelta(days=1))
    mock_uow.blocked_ips.get_by_id.return_value = blocked

    result = await BlockedIPsUseCase(mock_uow).update(blocked.id, clear_expiry=True)

    assert result.is_ok()
    assert blocked.expires_at is None


@pytest.mark.asyncio
async def test_update_without_fields(mock_uow):
    result = await BlockedIPsUseCase(mock_uow).update(uuid4())

    assert result.error.code == "NO_FIELDS_TO_UPDATE"


@pytest.mark.asyncio
async def test_list_rejects_unknown_state(mock_uow):
    result = await BlockedIPsUseCase(mock_uow).list_blocked(state="paused")

    assert result.error.code == "INVALID_STATE"


@pytest.mark.asyncio
async def test_cleanup_reports_deleted_count(mock_uow):
    mock_uow.blocked_ips.delete_expired.return_value = 4

    result = await BlockedIPsUseCase(mock_uow).cleanup()

    assert result.value == {"deleted_count": 4}
    mock_uow.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_review_twice_reports_not_found(mock_uow):
    reviewer = uuid4()
    alert = SecurityAlert(
        type=AlertType.brute_force,
        severity=AlertSeverity.high,
        message="Brute force",
        reviewed_by=reviewer,
        reviewed_at=utcnow(),
    )
    mock_uow.security_alerts.mark_reviewed.side_effect = [alert, None]
    use_case = SecurityAlertsUseCase(mock_uow)

    first = await use_case.review(alert.id, reviewer)
    second = await use_case.review(alert.id, uuid4())

    assert first.value["alert"]["reviewed_by"] == str(reviewer)
    assert second.error.code == "ALERT_NOT_FOUND"


@pytest.mark.asyncio
async def test_review_all(mock_uow):
    mock_uow.security_alerts.mark_all_reviewed.return_value = 3

    result = await SecurityAlertsUseCase(mock_uow).review_all(uuid4())

    assert result.value == {"reviewed_count": 3}
