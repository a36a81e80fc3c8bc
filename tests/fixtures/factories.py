"""
Row builders shared by the integration tests.

Every helper commits and returns plain ids/tokens, never ORM instances:
request handling rolls back the shared test session, which expires any
instance a test still holds.
"""

from datetime import timedelta
from typing import Iterable, Optional
from uuid import UUID, uuid4

import bcrypt
from sqlmodel import select

from config import ApplicationConfig
from src.api.utils.jwt import create_access_token, hash_token
from src.domain.base import utcnow
from src.domain.entities import Role, Session, User, UserRole

API = ApplicationConfig.API_PREFIX

TEST_PASSWORD = "correct-horse"
_PASSWORD_HASH = bcrypt.hashpw(TEST_PASSWORD.encode(), bcrypt.gensalt(4)).decode()


async def role_id(db_session, name: str) -> UUID:
    result = await db_session.execute(select(Role.id).where(Role.name == name))
    return result.scalar_one()


async def create_user(
    db_session,
    email: str,
    roles: Iterable[str] = ("user",),
    full_name: Optional[str] = None,
    locked_reason: Optional[str] = None,
) -> UUID:
    user_id = uuid4()
    db_session.add(
        User(
            id=user_id,
            email=email,
            full_name=full_name,
            password_hash=_PASSWORD_HASH,
            locked_at=utcnow() if locked_reason else None,
            lock_reason=locked_reason,
        )
    )
    await db_session.flush()
    for name in roles:
        db_session.add(UserRole(user_id=user_id, role_id=await role_id(db_session, name)))
    await db_session.commit()
    return user_id


async def open_session(
    db_session,
    user_id: UUID,
    email: str = "user@example.com",
    revoked: bool = False,
    expired: bool = False,
    ip_address: str = "127.0.0.1",
) -> str:
    """Create a session row and return the bearer token bound to it"""
    token = create_access_token(user_id, email, timedelta(days=7))
    now = utcnow()
    db_session.add(
        Session(
            user_id=user_id,
            token_hash=hash_token(token),
            ip_address=ip_address,
            revoked_at=now if revoked else None,
            expires_at=now - timedelta(minutes=1) if expired else now + timedelta(days=7),
        )
    )
    await db_session.commit()
    return token


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
