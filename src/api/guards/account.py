import logging

from sqlalchemy.exc import SQLAlchemyError

from src.api.error import AccountLockedError, IPBlockedError, PersistenceError, SessionError
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.libs.result import Error

from .base import ALLOW, Decision, Deny, Guard, GuardContext

logger = logging.getLogger(__name__)


class AccountLockGate(Guard):
    """Rejects locked accounts. Fail-closed: a storage error denies with 500."""

    name = "AccountLockGate"

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def check(self, ctx: GuardContext) -> Decision:
        try:
            async with self.uow:
                user = await self.uow.users.get_by_id(ctx.user_id)
                if user is None:
                    return Deny(SessionError(Error("USER_NOT_FOUND", "User not found")))
                locked_at, lock_reason = user.locked_at, user.lock_reason
        except SQLAlchemyError:
            logger.exception(f"Lock status lookup failed for user {ctx.user_id}")
            return Deny(PersistenceError(Error("LOCK_CHECK_FAILED", "Unable to verify account status")))

        if locked_at is not None:
            return Deny(
                AccountLockedError(Error("ACCOUNT_LOCKED", "Account is locked"), reason=lock_reason)
            )
        return ALLOW


class IPBlockGate(Guard):
    """
    Rejects addresses with an active block.

    Fail-open: if the block list cannot be read the request goes through and
    the failure is logged.
    """

    name = "IPBlockGate"

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def check(self, ctx: GuardContext) -> Decision:
        if not ctx.ip_address:
            return ALLOW

        try:
            async with self.uow:
                blocked = await self.uow.blocked_ips.get_active_by_ip(ctx.ip_address, utcnow())
                if blocked is None:
                    return ALLOW
                reason, expires_at = blocked.reason, blocked.expires_at
        except SQLAlchemyError:
            logger.exception(f"Block list lookup failed for {ctx.ip_address}; allowing request")
            return ALLOW

        return Deny(
            IPBlockedError(
                Error("IP_BLOCKED", "Access from this IP address is blocked"),
                reason=reason,
                expires_at=expires_at.isoformat() if expires_at else None,
            )
        )
