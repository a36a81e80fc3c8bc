from typing import Any, Dict, Optional

from fastapi import status

from src.libs.result import Error


class ClientError(Exception):
    def __init__(
        self,
        base_error: Error,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        details: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.base_error = base_error
        self.status_code = status_code
        self.details = details or {}
        self.headers = headers
        super().__init__(base_error.message)


class ServerError(Exception):
    def __init__(self, base_error: Error):
        self.base_error = base_error
        super().__init__(base_error.message)


# Access-control taxonomy. Each class fixes the status code of its family so
# guards only pick the code and message.


class AuthenticationError(ClientError):
    """Token missing, malformed, badly signed or expired"""

    def __init__(self, base_error: Error):
        super().__init__(base_error, status_code=status.HTTP_401_UNAUTHORIZED)


class SessionError(ClientError):
    """Token is well-formed but its session is unusable"""

    def __init__(self, base_error: Error):
        super().__init__(base_error, status_code=status.HTTP_401_UNAUTHORIZED)


class AccountLockedError(ClientError):
    def __init__(self, base_error: Error, reason: Optional[str] = None):
        super().__init__(
            base_error, status_code=status.HTTP_403_FORBIDDEN, details={"reason": reason}
        )


class IPBlockedError(ClientError):
    def __init__(self, base_error: Error, reason: Optional[str] = None, expires_at: Optional[str] = None):
        super().__init__(
            base_error,
            status_code=status.HTTP_403_FORBIDDEN,
            details={"reason": reason, "expires_at": expires_at},
        )


class AuthorizationError(ClientError):
    """Missing role or permission, or an action aimed at the caller's own account"""

    def __init__(self, base_error: Error, status_code: int = status.HTTP_403_FORBIDDEN):
        super().__init__(base_error, status_code=status_code)


class RateLimitExceeded(ClientError):
    def __init__(self, base_error: Error, retry_after: int):
        self.retry_after = retry_after
        super().__init__(
            base_error,
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            details={"retry_after": retry_after},
            headers={"Retry-After": str(retry_after)},
        )


class PersistenceError(ServerError):
    """Storage failure inside a fail-closed gate"""
