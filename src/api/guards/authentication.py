import logging

from sqlalchemy.exc import SQLAlchemyError

from src.api.error import AuthenticationError, SessionError
from src.api.utils.jwt import hash_token, verify_token
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.libs.result import Error

from .base import ALLOW, Decision, Deny, Guard, GuardContext

logger = logging.getLogger(__name__)


class TokenVerifier(Guard):
    """Signature, expiry, issuer and audience check. Never touches storage."""

    name = "TokenVerifier"

    async def check(self, ctx: GuardContext) -> Decision:
        result = verify_token(ctx.token)
        if result.is_err():
            return Deny(AuthenticationError(result.error))
        ctx.claims = result.value
        return ALLOW


class SessionGate(Guard):
    """
    Maps the token to a live session.

    Precedence: not found, then revoked, then expired. A revoked session is
    reported as revoked even when it has also expired. Storage errors deny.
    """

    name = "SessionGate"

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def check(self, ctx: GuardContext) -> Decision:
        if ctx.claims is None or not ctx.token:
            return Deny(AuthenticationError(Error("NO_TOKEN", "Authentication required")))

        try:
            async with self.uow:
                session = await self.uow.sessions.get_by_token_hash(hash_token(ctx.token))
                if session is None or session.user_id != ctx.claims.user_id:
                    return Deny(SessionError(Error("SESSION_NOT_FOUND", "Session not found")))
                if session.revoked_at is not None:
                    return Deny(SessionError(Error("SESSION_REVOKED", "Session has been revoked")))
                if session.expires_at <= utcnow():
                    return Deny(SessionError(Error("SESSION_EXPIRED", "Session has expired")))

                user = await self.uow.users.get_active_by_id(session.user_id)
                if user is None:
                    return Deny(SessionError(Error("USER_NOT_FOUND", "User not found")))

                ctx.session_id = session.id
                ctx.user_id = user.id
                ctx.email = user.email
        except SQLAlchemyError:
            logger.exception("Session lookup failed")
            return Deny(SessionError(Error("SESSION_CHECK_FAILED", "Unable to verify session")))

        return ALLOW
