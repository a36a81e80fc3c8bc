import hashlib
import secrets
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Optional
from uuid import UUID

from fastapi import Request
from jose import ExpiredSignatureError, JWTError, jwt

from config import ApplicationConfig
from src.libs.result import Error, Result, Return

ALGORITHM = "HS256"


@dataclass(frozen=True)
class TokenClaims:
    """Decoded identity claims of an access token"""

    user_id: UUID
    email: Optional[str]
    expires_at: datetime
    token_id: Optional[str] = None


def create_access_token(user_id: UUID, email: str, expires_delta: timedelta) -> str:
    """
    Create JWT access token

    Args:
        user_id: User UUID
        email: User email, carried for display only
        expires_delta: Token expiration duration

    Returns:
        JWT token string (HS256). A random jti keeps every issued token unique.
    """
    now = datetime.now(UTC)
    payload = {
        "sub": str(user_id),
        "email": email,
        "jti": secrets.token_urlsafe(16),
        "iat": now,
        "exp": now + expires_delta,
        "iss": ApplicationConfig.JWT_ISSUER,
        "aud": ApplicationConfig.JWT_AUDIENCE,
    }
    return jwt.encode(payload, ApplicationConfig.JWT_SECRET, algorithm=ALGORITHM)


def verify_token(token: Optional[str]) -> Result[TokenClaims]:
    """
    Verify signature, expiry, issuer and audience. No I/O.

    Returns:
        Result with TokenClaims, or Error NO_TOKEN / TOKEN_EXPIRED / INVALID_TOKEN
    """
    if not token:
        return Return.err(Error("NO_TOKEN", "Authentication required"))

    try:
        payload = jwt.decode(
            token,
            ApplicationConfig.JWT_SECRET,
            algorithms=[ALGORITHM],
            audience=ApplicationConfig.JWT_AUDIENCE,
            issuer=ApplicationConfig.JWT_ISSUER,
        )
    except ExpiredSignatureError:
        return Return.err(Error("TOKEN_EXPIRED", "Token has expired"))
    except JWTError:
        return Return.err(Error("INVALID_TOKEN", "Invalid token"))

    try:
        user_id = UUID(payload["sub"])
        expires_at = datetime.fromtimestamp(payload["exp"], UTC).replace(tzinfo=None)
    except (KeyError, TypeError, ValueError):
        return Return.err(Error("INVALID_TOKEN", "Invalid token"))

    return Return.ok(
        TokenClaims(
            user_id=user_id,
            email=payload.get("email"),
            expires_at=expires_at,
            token_id=payload.get("jti"),
        )
    )


def extract_token(request: Request) -> Optional[str]:
    """Cookie first, then the bearer Authorization header"""
    token = request.cookies.get(ApplicationConfig.AUTH_COOKIE_NAME)
    if token:
        return token

    authorization = request.headers.get("Authorization")
    if authorization:
        scheme, _, credentials = authorization.partition(" ")
        if scheme.lower() == "bearer" and credentials.strip():
            return credentials.strip()
    return None


def hash_token(token: str) -> str:
    """Sessions store only this SHA-256 hex digest"""
    return hashlib.sha256(token.encode()).hexdigest()
