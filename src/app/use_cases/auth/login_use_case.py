"""
Login Use Case

Verifies credentials, opens a session and records the login in the audit
trail (the suspicious-login heuristic reads it back).
"""

from datetime import timedelta
from typing import Optional

import bcrypt

from config import ApplicationConfig
from src.api.utils.jwt import create_access_token, hash_token
from src.app.services.security_heuristics import LOGIN_ACTION
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.serializers import grants_of, iso
from src.domain.base import utcnow
from src.domain.entities import AuditLog, Session
from src.domain.permissions import primary_role_name
from src.libs.result import Error, Result, Return

from .dtos import LoginResponse, RoleInfo, UserProfile

# Compared against when the email is unknown so both paths cost one bcrypt check
_DUMMY_HASH = bcrypt.hashpw(b"dummy_password", bcrypt.gensalt(12))


class LoginUseCase:
    """
    Use case for user login and token issuance.

    Business Rules:
    - Unknown email and wrong password return the same INVALID_CREDENTIALS
    - Soft-deleted users cannot log in
    - Locked users are refused with ACCOUNT_LOCKED after a correct password
    - Only the SHA-256 hash of the issued token is stored on the session
    - Token lifetime is TOKEN_TTL_DAYS, REMEMBER_ME_TTL_DAYS with remember_me
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self,
        email: str,
        password: str,
        remember_me: bool = False,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Result[LoginResponse]:
        async with self.uow:
            user = await self.uow.users.get_by_email(email.strip().lower())

            if user is None or user.is_deleted:
                bcrypt.checkpw(b"dummy_password", _DUMMY_HASH)
                return Return.err(Error("INVALID_CREDENTIALS", "Invalid email or password"))

            if not bcrypt.checkpw(password.encode(), user.password_hash.encode()):
                return Return.err(Error("INVALID_CREDENTIALS", "Invalid email or password"))

            if user.is_locked:
                reason = f": {user.lock_reason}" if user.lock_reason else ""
                return Return.err(Error("ACCOUNT_LOCKED", f"Account is locked{reason}"))

            now = utcnow()
            ttl_days = (
                ApplicationConfig.REMEMBER_ME_TTL_DAYS
                if remember_me
                else ApplicationConfig.TOKEN_TTL_DAYS
            )
            token = create_access_token(user.id, user.email, timedelta(days=ttl_days))

            session = Session(
                user_id=user.id,
                token_hash=hash_token(token),
                ip_address=ip_address,
                user_agent=user_agent,
                expires_at=now + timedelta(days=ttl_days),
            )
            await self.uow.sessions.create(session)

            user.last_login_at = now
            await self.uow.users.update(user)

            await self.uow.audit_logs.create(
                AuditLog(
                    admin_id=user.id,
                    action=LOGIN_ACTION,
                    target_type="user",
                    target_id=str(user.id),
                    changes={"remember_me": remember_me},
                    ip_address=ip_address,
                    user_agent=user_agent,
                )
            )

            roles = await self.uow.roles.get_roles_for_user(user.id)
            await self.uow.commit()

            return Return.ok(
                LoginResponse(
                    token=token,
                    session_id=str(session.id),
                    expires_at=iso(session.expires_at),
                    user=UserProfile(
                        id=str(user.id),
                        email=user.email,
                        full_name=user.full_name,
                        role=primary_role_name([role.name for role in roles]),
                        roles=[RoleInfo(**grant) for grant in grants_of(roles)],
                    ),
                )
            )
