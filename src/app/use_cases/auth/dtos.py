"""
Authentication Use Case DTOs (Data Transfer Objects)
"""

from typing import List, Optional

from pydantic import BaseModel


class RoleInfo(BaseModel):
    name: str
    permissions: List[str]


class UserProfile(BaseModel):
    """Identity context of the signed-in user"""

    id: str
    email: str
    full_name: Optional[str] = None
    role: Optional[str] = None  # derived, read-only
    roles: List[RoleInfo]


class LoginResponse(BaseModel):
    """Response for user login use case"""

    token: str
    session_id: str
    expires_at: str
    user: UserProfile


class LogoutResponse(BaseModel):
    session_id: str
    revoked: bool
